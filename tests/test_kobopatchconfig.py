from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from conftest import write_file
from koboutils.errors import ConfigParseError, ConfigReadError, ConfigWriteError
from koboutils.kobopatchconfig import KobopatchConfig

VERSION = "4.19.14123"
FIRMWARE_IN = f"src/kobo-update-{VERSION}.zip"

TEMPLATE = """
version: {{version}}
in: src/kobo-update-{{version}}.zip
out: out/KoboRoot.tgz
log: out/log.txt
patchFormat: kobopatch

patches:
  src/nickel.yaml: usr/local/Kobo/nickel
  src/libnickel.so.1.0.0.yaml: usr/local/Kobo/libnickel.so.1.0.0

overrides:
  src/nickel.yaml:
    Custom footer: no
    Remove beta features: yes
  src/libnickel.so.1.0.0.yaml:
    Allow searches on Extra dictionaries: no
"""


@pytest.fixture
def template(tmp_path: Path) -> Path:
    return write_file(tmp_path / "template" / "kobopatch.yaml", TEMPLATE)


def _merge(template: Path, overrides: str, tmp_path: Path) -> KobopatchConfig:
    return KobopatchConfig.merge(template, write_file(tmp_path / "overrides.yaml", overrides), VERSION, FIRMWARE_IN)


def test_version_placeholder_replaced(template: Path) -> None:
    config = KobopatchConfig.load(template, "4.20.14601")
    assert config.version == "4.20.14601"
    assert config.input == "src/kobo-update-4.20.14601.zip"
    assert config.patch_format == "kobopatch"


def test_empty_overrides_keep_template(template: Path, tmp_path: Path) -> None:
    config = _merge(template, "", tmp_path)
    expected = KobopatchConfig.load(template, VERSION)

    assert config == expected


def test_override_fields_replace_template(template: Path, tmp_path: Path) -> None:
    config = _merge(
        template,
        """
log: custom/log.txt
patches:
  src/nickel.yaml: usr/local/Kobo/nickel
""",
        tmp_path,
    )

    assert config.log == "custom/log.txt"
    assert config.output == "out/KoboRoot.tgz"
    assert config.patches == {"src/nickel.yaml": "usr/local/Kobo/nickel"}


def test_override_toggles_merged_per_option(template: Path, tmp_path: Path) -> None:
    config = _merge(
        template,
        """
overrides:
  src/nickel.yaml:
    Custom footer: yes
  src/new.yaml:
    Something: yes
""",
        tmp_path,
    )

    assert config.overrides == {
        "src/nickel.yaml": {"Custom footer": True, "Remove beta features": True},
        "src/libnickel.so.1.0.0.yaml": {"Allow searches on Extra dictionaries": False},
        "src/new.yaml": {"Something": True},
    }


def test_run_values_beat_both_documents(tmp_path: Path) -> None:
    template = write_file(tmp_path / "kobopatch.yaml", "version: 1.0.0\nin: somewhere.zip\nout: out/KoboRoot.tgz\n")
    config = _merge(template, "version: 2.0.0\nin: elsewhere.zip\n", tmp_path)

    assert config.version == VERSION
    assert config.input == FIRMWARE_IN


def test_optional_fields_from_overrides(template: Path, tmp_path: Path) -> None:
    config = _merge(
        template,
        """
lrelease: lrelease
translations:
  src/koreader.ts: usr/local/Kobo/translations/nickel-de.qm
files:
  src/extra.txt: usr/local/extra.txt
""",
        tmp_path,
    )

    document = config.to_document()
    assert document["lrelease"] == "lrelease"
    assert document["translations"] == {"src/koreader.ts": "usr/local/Kobo/translations/nickel-de.qm"}
    assert document["files"] == {"src/extra.txt": "usr/local/extra.txt"}


def test_write_omits_empty_optional_fields(template: Path, tmp_path: Path) -> None:
    config = _merge(template, "", tmp_path)
    output = tmp_path / "build" / "kobopatch.yaml"
    output.parent.mkdir()

    config.write(output)
    text = output.read_text()

    assert f"version: {VERSION}\n" in text
    assert f"in: {FIRMWARE_IN}\n" in text
    assert list(yaml.safe_load(text)) == ["version", "in", "out", "log", "patchFormat", "patches", "overrides"]
    assert KobopatchConfig.load(output) == config


def test_missing_overrides_file(template: Path, tmp_path: Path) -> None:
    with pytest.raises(ConfigReadError):
        KobopatchConfig.merge(template, tmp_path / "overrides.yaml", VERSION, FIRMWARE_IN)


def test_missing_template(tmp_path: Path) -> None:
    with pytest.raises(ConfigReadError):
        _merge(tmp_path / "nope.yaml", "", tmp_path)


@pytest.mark.parametrize(
    "overrides",
    [
        "overrides: [\n",
        "- just\n- a list\n",
        "overrides:\n  src/nickel.yaml:\n    Custom footer: maybe\n",
        "overrides:\n  src/nickel.yaml: yes\n",
        "patches: [a, b]\n",
        "log: [a]\n",
    ],
)
def test_invalid_overrides_rejected(template: Path, tmp_path: Path, overrides: str) -> None:
    with pytest.raises(ConfigParseError):
        _merge(template, overrides, tmp_path)


def test_write_failure(template: Path, tmp_path: Path) -> None:
    config = KobopatchConfig.load(template, VERSION)
    with pytest.raises(ConfigWriteError):
        config.write(tmp_path)


def test_overrides_that_are_not_utf8(template: Path, tmp_path: Path) -> None:
    overrides = tmp_path / "overrides.yaml"
    overrides.write_bytes(b"log: \xff\xfe\n")

    with pytest.raises(ConfigParseError):
        KobopatchConfig.merge(template, overrides, VERSION, FIRMWARE_IN)


def test_template_that_is_not_utf8(tmp_path: Path) -> None:
    template = tmp_path / "kobopatch.yaml"
    template.write_bytes(b"version: {{version}}\nlog: \xff\n")

    with pytest.raises(ConfigParseError):
        KobopatchConfig.load(template, VERSION)
