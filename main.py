#!/usr/bin/env python3
# main.py
#
# Copyright (c) 2025 - 2026 Michael Johnson
# All rights reserved.
#
# SPDX-License-Identifier: BSD-2-Clause
#
# Licensed under the BSD 2-Clause "Simplified" License

"""Patch Kobo e-reader Firmware with kobopatch.

This tool builds kobopatch, downloads the requested firmware version if it isn't cached yet, merges the patches for that
version together with your 'overrides.yaml' and runs kobopatch to create the patched firmware.
"""

import re
import shutil
from pathlib import Path

import click

from koboutils import (
    DEFAULT_UUID,
    DEFAULT_VERSION,
    Builder,
    Downloader,
    FirmwareCatalog,
    KoboPatchError,
    KobopatchConfig,
    PatchAssembler,
    PatchRunner,
    ProcessRunner,
    RunConfig,
)
from koboutils.builder import KOBOPATCH_PACKAGE


def validate_version(ctx, param, value):
    """Check input version format. Will match any string that contains digits with dots between them.

    :param ctx: Click context
    :param param: Optional parameter
    :param value: Optional value
    """
    version_format = r"^\d+(\.\d+)*$"

    if re.match(version_format, value):
        return value
    else:
        raise click.BadParameter("version number must be in the format w.x.y")


def __create_directories(run: RunConfig) -> None:
    """Create the build directory structure, if it doesn't exist yet."""
    for directory in run.required_directories():
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise click.ClickException(f"failed to create {directory}: {exc}") from exc


def patch_firmware(run: RunConfig, catalog_file: Path, overrides_file: Path, runner: ProcessRunner) -> Path:
    """Run every step of the patching process in order. The first failure stops the run.

    :param run: Parameters of this run.
    :param catalog_file: Path to the firmware catalog.
    :param overrides_file: Path to the user's overrides document.
    :param runner: Runs the external commands.
    :returns: Path of the merged kobopatch.yaml
    """
    click.secho("Finding Firmware", bold=True, underline=True)
    catalog = FirmwareCatalog.load(catalog_file)
    firmware = catalog.lookup(run.uuid, run.version)
    click.echo(f"Found version {click.style(firmware.version, bold=True)} ({firmware.date or 'no release date'})")

    # Read both documents now so a broken template or overrides file stops the run before anything is built
    click.echo("Merging template configuration with overrides")
    config = KobopatchConfig.merge(run.template_file, overrides_file, run.version, run.firmware_in)

    # End section
    click.echo()

    click.secho("Building kobopatch", bold=True, underline=True)
    target = Builder.resolve_host_target()
    click.echo(f"Building for {click.style(target.platform, bold=True)}")
    binaries = Builder.build(target, run.kobopatch_dir, run.build_bin_dir, runner, report=click.echo)

    # End section
    click.echo()

    click.secho("Downloading Firmware", bold=True, underline=True)
    click.echo(f"Fetching: {firmware.download}")
    if Downloader.fetch_firmware(firmware.download, run.firmware_file):
        click.echo(f"Downloaded: {run.firmware_file}")
    else:
        click.echo(f"Already exists: {run.firmware_file}")

    # End section
    click.echo()

    click.secho("Preparing Patches", bold=True, underline=True)
    click.echo("Merging patch files")
    for group, merged_file in PatchAssembler.assemble(run.patch_versions_dir, run.build_src_dir).items():
        click.echo(f"  {group} -> {merged_file}")

    click.echo(f"Writing '{run.build_config_file.name}'")
    config.write(run.build_config_file)

    # End section
    click.echo()

    click.secho("Patching Firmware", bold=True, underline=True)
    PatchRunner.run(binaries[KOBOPATCH_PACKAGE], run.build_dir, run.build_config_file.name, runner)

    # End section
    click.echo()

    return run.build_config_file


@click.command()
@click.option(
    "-uuid",
    "--uuid",
    default=DEFAULT_UUID,
    help=f"uuid of the kobo (see firmwares.json). Default is '{DEFAULT_UUID}'",
)
@click.option(
    "-version",
    "--version",
    default=DEFAULT_VERSION,
    help=f"version of the firmware to patch. Default is '{DEFAULT_VERSION}'",
    callback=validate_version,
)
@click.option(
    "--workdir",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory holding kobopatch, kobopatch-patches and the build directory. Defaults to the current directory",
)
@click.option(
    "--catalog",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Firmware catalog to use. Defaults to 'firmwares.json' in the working directory",
)
@click.option(
    "--overrides",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Overrides document to use. Defaults to 'overrides.yaml' in the working directory",
)
def main(uuid, version, workdir, catalog, overrides):
    """Create a patched version of the Kobo firmware."""
    run = RunConfig(uuid=uuid, version=version, workdir=workdir)
    catalog_file = catalog or run.catalog_file
    overrides_file = overrides or run.overrides_file

    # Get the terminal width for formatting purposes
    termwidth = 80 if shutil.get_terminal_size().columns > 80 else shutil.get_terminal_size().columns

    click.echo(f"{click.style('Kobo Firmware Patch Tool', bold=True, reverse=True): ^{termwidth}}")
    click.echo()
    click.echo(f"Attempting to patch version {click.style(version, bold=True)} for {click.style(uuid, bold=True)}")
    click.echo()

    __create_directories(run)

    try:
        config_file = patch_firmware(run, catalog_file, overrides_file, ProcessRunner())
    except KoboPatchError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Patched firmware written to {click.style(str(run.build_out_dir), bold=True)} using {config_file}")


if __name__ == "__main__":
    main()
