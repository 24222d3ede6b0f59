# catalog.py
#
# Copyright (c) 2025 Michael Johnson
# All rights reserved.
#
# SPDX-License-Identifier: BSD-2-Clause
#
# Licensed under the BSD 2-Clause "Simplified" License

"""Kobo firmware catalog loaded from 'firmwares.json'."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import CatalogParseError, CatalogReadError, NotFoundError


@dataclass(frozen=True)
class FirmwareVersion:
    version: str
    date: str
    download: str


@dataclass(frozen=True)
class FirmwareDevice:
    id: str
    model: str
    hardware: str
    versions: tuple[FirmwareVersion, ...]


def _require_str(entry: dict[str, Any], key: str, context: str, required: bool = True) -> str:
    value = entry.get(key)
    if value is None and not required:
        return ""
    if not isinstance(value, str):
        raise CatalogParseError(f"{context}: '{key}' must be a string")
    return value


def _parse_version(entry: Any, context: str) -> FirmwareVersion:
    if not isinstance(entry, dict):
        raise CatalogParseError(f"{context} must be an object")

    return FirmwareVersion(
        version=_require_str(entry, "version", context),
        date=_require_str(entry, "date", context, required=False),
        download=_require_str(entry, "download", context),
    )


def _parse_device(entry: Any, context: str) -> FirmwareDevice:
    if not isinstance(entry, dict):
        raise CatalogParseError(f"{context} must be an object")

    versions = entry.get("versions")
    if not isinstance(versions, list):
        raise CatalogParseError(f"{context}: 'versions' must be a list")

    return FirmwareDevice(
        id=_require_str(entry, "id", context),
        model=_require_str(entry, "model", context, required=False),
        hardware=_require_str(entry, "hardware", context, required=False),
        versions=tuple(_parse_version(v, f"{context} version {i}") for i, v in enumerate(versions)),
    )


class FirmwareCatalog:
    """Read-only list of devices and the firmware versions available for each."""

    def __init__(self, devices: tuple[FirmwareDevice, ...]):  # noqa: D107
        self.devices = devices

    @staticmethod
    def load(catalog_file: Path) -> "FirmwareCatalog":
        """Read and parse a catalog file.

        :param catalog_file: Path to the JSON catalog.
        :returns: The parsed catalog.
        :raises CatalogReadError: The file could not be read.
        :raises CatalogParseError: The file is not valid JSON or does not look like a catalog.
        """
        try:
            raw = Path(catalog_file).read_text(encoding="utf-8")
        except OSError as exc:
            raise CatalogReadError(f"failed to read: {catalog_file}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise CatalogParseError(f"failed to parse: {catalog_file}: {exc}") from exc

        try:
            loaded = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CatalogParseError(f"failed to parse: {catalog_file}: {exc}") from exc

        if not isinstance(loaded, list):
            raise CatalogParseError(f"{catalog_file} must contain a list of devices")

        return FirmwareCatalog(tuple(_parse_device(d, f"{catalog_file} device {i}") for i, d in enumerate(loaded)))

    def lookup(self, uuid: str, version: str) -> FirmwareVersion:
        """Find a firmware version for a device.

        :param uuid: Device id, as listed in the catalog.
        :param version: Exact firmware version string.
        :returns: The matching firmware version.
        :raises NotFoundError: The device or the version is not in the catalog.
        """
        device_found = False

        for device in self.devices:
            if device.id != uuid:
                continue
            device_found = True
            for firmware in device.versions:
                if firmware.version == version:
                    return firmware

        if not device_found:
            raise NotFoundError(f"firmware not found: no device with uuid {uuid}")
        raise NotFoundError(f"firmware not found: no version {version} for device {uuid}")
