from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from koboutils.process import Command


class FakeResponse:
    def __init__(self, body: bytes, status_code: int = 200) -> None:
        self.body = body
        self.status_code = status_code
        self.headers = {"content-length": str(len(body))}

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc_info) -> None:
        return None

    def raise_for_status(self) -> None:
        import requests

        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def iter_content(self, block_size: int):
        for start in range(0, len(self.body), block_size):
            yield self.body[start : start + block_size]


class FakeHTTP:
    """Stands in for requests.get and records every requested URL."""

    def __init__(self, body: bytes = b"0123456789", status_code: int = 200) -> None:
        self.body = body
        self.status_code = status_code
        self.requests: list[str] = []

    def __call__(self, url: str, stream: bool = False) -> FakeResponse:
        self.requests.append(url)
        return FakeResponse(self.body, self.status_code)


class FakeRunner:
    """Records commands instead of running them. Fails any command whose args contain `fail_on`."""

    def __init__(self, fail_on: str | None = None, returncode: int = 1) -> None:
        self.fail_on = fail_on
        self.returncode = returncode
        self.commands: list[Command] = []

    def run(self, command: Command) -> subprocess.CompletedProcess:
        self.commands.append(command)
        if self.fail_on is not None and any(self.fail_on in arg for arg in command.args):
            return subprocess.CompletedProcess(list(command.args), self.returncode, stdout="", stderr="boom")
        return subprocess.CompletedProcess(list(command.args), 0, stdout="", stderr="")


@pytest.fixture
def fake_http(monkeypatch: pytest.MonkeyPatch) -> FakeHTTP:
    http = FakeHTTP()
    monkeypatch.setattr("koboutils.downloader.requests.get", http)
    return http


def write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
