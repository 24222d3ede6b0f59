# patches.py
#
# Copyright (c) 2025 Michael Johnson
# All rights reserved.
#
# SPDX-License-Identifier: BSD-2-Clause
#
# Licensed under the BSD 2-Clause "Simplified" License

"""Methods to merge the per-version patch fragments into the files kobopatch reads."""

from pathlib import Path

from .errors import AssemblyError

GENERATED_PATCH_SUFFIX = ".yaml"


class PatchAssembler:
    """Static methods that build the merged patch files."""

    @staticmethod
    def __clear_generated(output_dir: Path) -> None:
        """Remove merged patch files left over from a previous run."""
        for file in output_dir.glob(f"**/*{GENERATED_PATCH_SUFFIX}"):
            if file.is_file():
                file.unlink()

    @staticmethod
    def collect_fragments(versions_dir: Path) -> dict[str, list[Path]]:
        """Group the fragment files under a version directory by the name of the directory holding them.

        Fragments are sorted by path, which kobopatch relies on: the order of the fragments is the order of the patches.

        :param versions_dir: Directory with one subdirectory of fragments per patch group.
        :returns: Group name mapped to its fragment files, in order.
        """
        groups: dict[str, list[Path]] = dict()

        for file in sorted(versions_dir.glob("**/*")):
            if file.is_file():
                groups.setdefault(file.parent.name, []).append(file)

        return groups

    @staticmethod
    def assemble(versions_dir: Path, output_dir: Path) -> dict[str, Path]:
        """Concatenate every patch group into a single file named after the group.

        Each fragment is followed by a newline. Merged files are always written from scratch so running this twice gives
        the same output.

        :param versions_dir: Directory with one subdirectory of fragments per patch group.
        :param output_dir: Directory to write the merged files to.
        :returns: Group name mapped to the merged file.
        :raises AssemblyError: The fragments could not be read or the merged files could not be written.
        """
        versions_dir = Path(versions_dir)
        output_dir = Path(output_dir)

        if not versions_dir.is_dir():
            raise AssemblyError(f"patch directory not found: {versions_dir}")

        merged = dict()

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            PatchAssembler.__clear_generated(output_dir)

            for group, fragments in PatchAssembler.collect_fragments(versions_dir).items():
                merged_file = output_dir / group
                with open(merged_file, "wb") as patch_file:
                    for fragment in fragments:
                        patch_file.write(fragment.read_bytes())
                        patch_file.write(b"\n")
                merged[group] = merged_file
        except OSError as exc:
            raise AssemblyError(f"failed to merge patches from {versions_dir}: {exc}") from exc

        return merged
