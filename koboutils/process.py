# process.py
#
# Copyright (c) 2025 Michael Johnson
# All rights reserved.
#
# SPDX-License-Identifier: BSD-2-Clause
#
# Licensed under the BSD 2-Clause "Simplified" License

"""Thin wrapper around running external commands, so the build and patch steps can be tested without them."""

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Command:
    """An external command and the directory to run it from.

    When capture is False the command's output goes straight to the terminal.
    """

    args: Sequence[str]
    cwd: Path
    capture: bool = True

    def __str__(self) -> str:
        return " ".join(self.args)


class ProcessRunner:
    """Runs commands with subprocess. Does not check the exit status."""

    def run(self, command: Command) -> subprocess.CompletedProcess:
        """Run a command to completion.

        :param command: The command to run.
        :returns: The completed process. Output is only populated when the command captures it.
        :raises OSError: The executable could not be started.
        """
        return subprocess.run(list(command.args), cwd=command.cwd, capture_output=command.capture, text=True)
