# __init__.py
#
# Copyright (c) 2025 Michael Johnson
# All rights reserved.
#
# SPDX-License-Identifier: BSD-2-Clause
#
# Licensed under the BSD 2-Clause "Simplified" License

"""Helper utilities for the firmware patcher. Broken out here to keep the main script from being too complex."""

from .builder import BUILD_TARGETS, Builder, BuildTarget
from .catalog import FirmwareCatalog, FirmwareDevice, FirmwareVersion
from .downloader import Downloader
from .errors import KoboPatchError
from .kobopatchconfig import KobopatchConfig
from .patches import PatchAssembler
from .process import Command, ProcessRunner
from .runconfig import DEFAULT_UUID, DEFAULT_VERSION, RunConfig
from .runner import PatchRunner

__all__ = [
    "BUILD_TARGETS",
    "Builder",
    "BuildTarget",
    "Command",
    "DEFAULT_UUID",
    "DEFAULT_VERSION",
    "Downloader",
    "FirmwareCatalog",
    "FirmwareDevice",
    "FirmwareVersion",
    "KoboPatchError",
    "KobopatchConfig",
    "PatchAssembler",
    "PatchRunner",
    "ProcessRunner",
    "RunConfig",
]
