# builder.py
#
# Copyright (c) 2025 Michael Johnson
# All rights reserved.
#
# SPDX-License-Identifier: BSD-2-Clause
#
# Licensed under the BSD 2-Clause "Simplified" License

"""Build the kobopatch binaries for the host platform with the Go toolchain."""

import os
import platform
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from alive_progress import alive_bar

from .errors import BuildError, UnsupportedPlatformError
from .process import Command, ProcessRunner

KOBOPATCH_PACKAGE = "kobopatch"
KOBOPATCH_APPLY_PACKAGE = "tools/kobopatch-apply"
CSSEXTRACT_PACKAGE = "tools/cssextract"

# platform.machine() spellings mapped to Go architecture names
_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
}


@dataclass(frozen=True)
class BuildTarget:
    """Binaries to build for one platform."""

    platform: str
    binaries: tuple[tuple[str, str], ...]
    extra_args: tuple[str, ...] = ()


BUILD_TARGETS = {
    "linux/amd64": BuildTarget(
        platform="linux/amd64",
        binaries=(
            (KOBOPATCH_PACKAGE, "kobopatch-linux-64bit"),
            (KOBOPATCH_APPLY_PACKAGE, "kobopatch-apply-linux-64bit"),
            (CSSEXTRACT_PACKAGE, "cssextract-linux-64bit"),
        ),
    ),
    "linux/386": BuildTarget(
        platform="linux/386",
        binaries=(
            (KOBOPATCH_PACKAGE, "kobopatch-linux-32bit"),
            (KOBOPATCH_APPLY_PACKAGE, "kobopatch-apply-linux-32bit"),
            (CSSEXTRACT_PACKAGE, "cssextract-linux-32bit"),
        ),
    ),
    "darwin/amd64": BuildTarget(
        platform="darwin/amd64",
        binaries=(
            (KOBOPATCH_PACKAGE, "kobopatch-darwin-64bit"),
            (KOBOPATCH_APPLY_PACKAGE, "kobopatch-apply-darwin-64bit"),
            (CSSEXTRACT_PACKAGE, "cssextract-darwin-64bit"),
        ),
    ),
    "windows/386": BuildTarget(
        platform="windows/386",
        binaries=(
            (KOBOPATCH_PACKAGE, "koboptch-windows.exe"),
            (KOBOPATCH_APPLY_PACKAGE, "koboptch-apply-windows.exe"),
            (CSSEXTRACT_PACKAGE, "cssextract-windows.exe"),
        ),
        # Link statically so the binaries run without the MinGW runtime
        extra_args=("-ldflags", "-extldflags -static"),
    ),
}


class Builder:
    """Static methods to build kobopatch and its tools."""

    @staticmethod
    def host_platform() -> str:
        """Return the host platform in Go's 'os/arch' form, e.g. 'linux/amd64'."""
        system = platform.system().lower()
        machine = platform.machine().lower()
        return f"{system}/{_ARCH_ALIASES.get(machine, machine)}"

    @staticmethod
    def resolve_target(platform_key: str) -> BuildTarget:
        """Look up the build target for a platform.

        :param platform_key: Platform in 'os/arch' form.
        :raises UnsupportedPlatformError: No binaries are known for the platform.
        """
        try:
            return BUILD_TARGETS[platform_key]
        except KeyError:
            supported = ", ".join(sorted(BUILD_TARGETS))
            raise UnsupportedPlatformError(
                f"cannot build kobopatch for {platform_key}, supported platforms are: {supported}"
            ) from None

    @staticmethod
    def resolve_host_target() -> BuildTarget:
        return Builder.resolve_target(Builder.host_platform())

    @staticmethod
    def build_commands(target: BuildTarget, source_dir: Path, bin_dir: Path) -> list[tuple[str, Command, Path]]:
        """Return the 'go build' command for each binary of a target.

        The output path is given relative to the source directory since that is where the commands run.

        :param target: The platform's build target.
        :param source_dir: Root of the kobopatch Go module.
        :param bin_dir: Directory the binaries are written to.
        :returns: Tuples of package, command and the path of the binary it produces.
        """
        commands = list()

        for package, binary_name in target.binaries:
            binary = Path(bin_dir) / binary_name
            output = os.path.relpath(binary, source_dir)
            args = ["go", "build", f"-o={output}", *target.extra_args, f"./{package}"]
            commands.append((package, Command(args=tuple(args), cwd=Path(source_dir)), binary))

        return commands

    @staticmethod
    def build(
        target: BuildTarget,
        source_dir: Path,
        bin_dir: Path,
        runner: ProcessRunner,
        report: Callable[[str], None] | None = None,
    ) -> dict[str, Path]:
        """Build every binary for a target, one after the other. The first failure stops the build.

        :param target: The platform's build target.
        :param source_dir: Root of the kobopatch Go module.
        :param bin_dir: Directory the binaries are written to.
        :param runner: Runs the build commands.
        :param report: Called with each command line before it runs.
        :returns: Package mapped to the path of its binary.
        :raises BuildError: A build failed or the Go toolchain could not be started.
        """
        built = dict()

        for package, command, binary in Builder.build_commands(target, source_dir, bin_dir):
            if report is not None:
                report(str(command))

            try:
                with alive_bar(monitor=False, stats=False):
                    result = runner.run(command)
            except OSError as exc:
                raise BuildError(f"failed to run '{command}': {exc}") from exc

            if result.returncode != 0:
                message = f"'{command}' exited with status {result.returncode}"
                details = (result.stderr or "").strip()
                if details:
                    message = f"{message}: {details}"
                raise BuildError(message)

            built[package] = binary

        return built
