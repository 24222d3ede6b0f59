# runconfig.py
#
# Copyright (c) 2025 Michael Johnson
# All rights reserved.
#
# SPDX-License-Identifier: BSD-2-Clause
#
# Licensed under the BSD 2-Clause "Simplified" License

"""Parameters of a single patching run and the working directory layout derived from them."""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_UUID = "00000000-0000-0000-0000-000000000370"
DEFAULT_VERSION = "4.19.14123"


@dataclass(frozen=True)
class RunConfig:
    """Everything a run needs to know. Passed explicitly into each step."""

    uuid: str
    version: str
    workdir: Path

    @property
    def catalog_file(self) -> Path:
        return self.workdir / "firmwares.json"

    @property
    def overrides_file(self) -> Path:
        return self.workdir / "overrides.yaml"

    @property
    def kobopatch_dir(self) -> Path:
        """Root of the kobopatch Go module. Builds run from here."""
        return self.workdir / "kobopatch"

    @property
    def template_file(self) -> Path:
        return self.workdir / "kobopatch-patches" / "src" / "template" / "kobopatch.yaml"

    @property
    def patch_versions_dir(self) -> Path:
        """Directory holding one subdirectory of patch fragments per patch group."""
        return self.workdir / "kobopatch-patches" / "src" / "versions" / self.version

    @property
    def build_dir(self) -> Path:
        return self.workdir / "build"

    @property
    def build_bin_dir(self) -> Path:
        return self.build_dir / "bin"

    @property
    def build_out_dir(self) -> Path:
        return self.build_dir / "out"

    @property
    def build_src_dir(self) -> Path:
        return self.build_dir / "src"

    @property
    def build_config_file(self) -> Path:
        return self.build_dir / "kobopatch.yaml"

    @property
    def firmware_name(self) -> str:
        return f"kobo-update-{self.version}.zip"

    @property
    def firmware_file(self) -> Path:
        """Cache entry for the downloaded firmware. Only ever invalidated by deleting it."""
        return self.build_src_dir / self.firmware_name

    @property
    def firmware_in(self) -> str:
        """Firmware path as kobopatch sees it, relative to the build directory."""
        return f"src/{self.firmware_name}"

    def required_directories(self) -> list[Path]:
        return [self.build_dir, self.build_bin_dir, self.build_out_dir, self.build_src_dir]
