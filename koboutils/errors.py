# errors.py
#
# Copyright (c) 2025 Michael Johnson
# All rights reserved.
#
# SPDX-License-Identifier: BSD-2-Clause
#
# Licensed under the BSD 2-Clause "Simplified" License

"""Errors raised while patching the firmware. Every one of them is fatal for the run."""


class KoboPatchError(Exception):
    """Base error for the firmware patcher."""


class CatalogReadError(KoboPatchError):
    """Raised when the firmware catalog cannot be read."""


class CatalogParseError(KoboPatchError):
    """Raised when the firmware catalog is not valid JSON or has the wrong shape."""


class NotFoundError(KoboPatchError):
    """Raised when the requested device or firmware version is not in the catalog."""


class DownloadError(KoboPatchError):
    """Raised when the firmware image cannot be downloaded."""


class AssemblyError(KoboPatchError):
    """Raised when the patch fragments cannot be merged."""


class ConfigReadError(KoboPatchError):
    """Raised when the template or overrides document cannot be read."""


class ConfigParseError(KoboPatchError):
    """Raised when the template or overrides document is not valid."""


class ConfigWriteError(KoboPatchError):
    """Raised when the merged kobopatch.yaml cannot be written."""


class BuildError(KoboPatchError):
    """Raised when building one of the kobopatch binaries fails."""


class UnsupportedPlatformError(BuildError):
    """Raised when there is no build target for the host platform."""


class PatchRunError(KoboPatchError):
    """Raised when the kobopatch binary fails."""
