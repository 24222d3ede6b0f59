# kobopatchconfig.py
#
# Copyright (c) 2025 Michael Johnson
# All rights reserved.
#
# SPDX-License-Identifier: BSD-2-Clause
#
# Licensed under the BSD 2-Clause "Simplified" License

"""Build the 'kobopatch.yaml' file from the template and the user's overrides."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigParseError, ConfigReadError, ConfigWriteError

VERSION_PLACEHOLDER = "{{version}}"


@dataclass
class KobopatchConfig:
    """The kobopatch configuration document.

    The YAML key of each field is stored in its metadata. Fields marked optional are left out of the written document
    when they are empty.
    """

    version: str = field(default="", metadata={"key": "version"})
    input: str = field(default="", metadata={"key": "in"})
    output: str = field(default="", metadata={"key": "out"})
    log: str = field(default="", metadata={"key": "log"})
    patch_format: str = field(default="", metadata={"key": "patchFormat"})
    patches: dict[str, str] = field(default_factory=dict, metadata={"key": "patches"})
    overrides: dict[str, dict[str, bool]] = field(default_factory=dict, metadata={"key": "overrides"})
    lrelease: str = field(default="", metadata={"key": "lrelease", "optional": True})
    translations: dict[str, str] = field(default_factory=dict, metadata={"key": "translations", "optional": True})
    files: dict[str, Any] = field(default_factory=dict, metadata={"key": "files", "optional": True})

    @staticmethod
    def __read_document(path: Path, version: str | None = None) -> dict[str, Any]:
        """Read a YAML document, optionally replacing the version placeholder first.

        The placeholder has to be replaced in the raw text because '{{version}}' is not valid YAML on its own.
        """
        try:
            raw = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigReadError(f"failed to read: {path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ConfigParseError(f"failed to decode: {path}: {exc}") from exc

        if version is not None:
            raw = raw.replace(VERSION_PLACEHOLDER, version)

        try:
            document = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ConfigParseError(f"failed to unmarshal: {path}: {exc}") from exc

        if document is None:
            return dict()
        if not isinstance(document, dict):
            raise ConfigParseError(f"{path} must contain a mapping at root")

        return document

    @staticmethod
    def __parse_fields(document: dict[str, Any], path: Path) -> dict[str, Any]:
        """Validate the known keys of a document and return them by field name. Unknown keys are ignored."""
        parsed = dict()

        for config_field in fields(KobopatchConfig):
            key = config_field.metadata["key"]
            value = document.get(key)
            if value is None:
                continue

            if config_field.name in ("patches", "translations"):
                parsed[config_field.name] = _string_mapping(value, key, path)
            elif config_field.name == "overrides":
                parsed[config_field.name] = _toggle_mapping(value, path)
            elif config_field.name == "files":
                if not isinstance(value, dict):
                    raise ConfigParseError(f"{path}: '{key}' must be a mapping")
                parsed[config_field.name] = dict(value)
            else:
                parsed[config_field.name] = _scalar(value, key, path)

        return parsed

    @staticmethod
    def load(path: Path, version: str | None = None) -> "KobopatchConfig":
        """Load a single configuration document.

        :param path: Path of the YAML document.
        :param version: If set, replaces every '{{version}}' token before parsing.
        :returns: The parsed configuration.
        """
        return KobopatchConfig(**KobopatchConfig.__parse_fields(KobopatchConfig.__read_document(path, version), path))

    @staticmethod
    def merge(template_path: Path, overrides_path: Path, version: str, firmware_in: str) -> "KobopatchConfig":
        """Merge the template with the user's overrides for a given firmware version.

        Every key present in the overrides document replaces the template's value, except 'overrides' where each patch
        toggle is set individually. The version and input firmware always come from the run, never from either document.

        :param template_path: Path to the kobopatch.yaml template.
        :param overrides_path: Path to the user's overrides document.
        :param version: The firmware version being patched.
        :param firmware_in: Path of the input firmware, relative to the build directory.
        :returns: The merged configuration.
        """
        config = KobopatchConfig.load(template_path, version)
        overrides = KobopatchConfig.__parse_fields(KobopatchConfig.__read_document(overrides_path), overrides_path)

        for name, value in overrides.items():
            if name == "overrides":
                for group, toggles in value.items():
                    config.overrides.setdefault(group, dict()).update(toggles)
            else:
                setattr(config, name, value)

        config.version = version
        config.input = firmware_in

        return config

    def to_document(self) -> dict[str, Any]:
        """Return the configuration as the mapping written to kobopatch.yaml."""
        document = dict()

        for config_field in fields(self):
            value = getattr(self, config_field.name)
            if config_field.metadata.get("optional") and not value:
                continue
            document[config_field.metadata["key"]] = value

        return document

    def write(self, path: Path) -> None:
        """Write out the configuration.

        :param path: Destination of the kobopatch.yaml file.
        :raises ConfigWriteError: The document could not be serialized or written.
        """
        try:
            Path(path).write_text(
                yaml.safe_dump(self.to_document(), sort_keys=False, default_flow_style=False, allow_unicode=True),
                encoding="utf-8",
            )
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigWriteError(f"failed to write: {path}: {exc}") from exc


def _scalar(value: Any, key: str, path: Path) -> str:
    # YAML reads things like 'patchFormat: 32' as numbers
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ConfigParseError(f"{path}: '{key}' must be a string")
    return str(value)


def _string_mapping(value: Any, key: str, path: Path) -> dict[str, str]:
    if not isinstance(value, dict):
        raise ConfigParseError(f"{path}: '{key}' must be a mapping")
    return {str(name): _scalar(entry, f"{key}.{name}", path) for name, entry in value.items()}


def _toggle_mapping(value: Any, path: Path) -> dict[str, dict[str, bool]]:
    if not isinstance(value, dict):
        raise ConfigParseError(f"{path}: 'overrides' must be a mapping")

    toggles = dict()
    for group, options in value.items():
        if options is None:
            options = dict()
        if not isinstance(options, dict):
            raise ConfigParseError(f"{path}: 'overrides.{group}' must be a mapping")
        for option, enabled in options.items():
            if not isinstance(enabled, bool):
                raise ConfigParseError(f"{path}: 'overrides.{group}.{option}' must be true or false")
        toggles[str(group)] = {str(option): enabled for option, enabled in options.items()}

    return toggles
