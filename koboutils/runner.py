# runner.py
#
# Copyright (c) 2025 Michael Johnson
# All rights reserved.
#
# SPDX-License-Identifier: BSD-2-Clause
#
# Licensed under the BSD 2-Clause "Simplified" License

"""Run the freshly built kobopatch binary."""

from pathlib import Path

from .errors import PatchRunError
from .process import Command, ProcessRunner


class PatchRunner:
    """Runs kobopatch against the merged configuration."""

    @staticmethod
    def run(binary: Path, build_dir: Path, config_name: str, runner: ProcessRunner) -> None:
        """Run kobopatch from the build directory, with its output going to the terminal.

        :param binary: Path of the kobopatch binary.
        :param build_dir: Build directory. Paths in the configuration are relative to it.
        :param config_name: Name of the configuration file inside the build directory.
        :param runner: Runs the command.
        :raises PatchRunError: kobopatch could not be started or exited non-zero.
        """
        # Windows resolves a relative program against our own directory, not cwd
        command = Command(args=(str(Path(binary).resolve()), config_name), cwd=Path(build_dir), capture=False)

        try:
            result = runner.run(command)
        except OSError as exc:
            raise PatchRunError(f"failed to run '{command}': {exc}") from exc

        if result.returncode != 0:
            raise PatchRunError(f"'{command}' exited with status {result.returncode}")
