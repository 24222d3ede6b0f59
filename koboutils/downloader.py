# downloader.py
#
# Copyright (c) 2025 Michael Johnson
# All rights reserved.
#
# SPDX-License-Identifier: BSD-2-Clause
#
# Licensed under the BSD 2-Clause "Simplified" License

"""Kobo Firmware Downloader."""

from pathlib import Path

import requests
from alive_progress import alive_bar

from .errors import DownloadError


class Downloader:
    """Firmware Downloader."""

    @staticmethod
    def __download_firmware(url: str, part_file: Path) -> None:
        """Given a URL, stream the contents into a file while displaying the progress.

        :param url: The URL of the firmware to download.
        :param part_file: Where to write the downloaded bytes.
        :return: None
        """
        block_size = 1024  # Download block size in bytes

        with requests.get(url, stream=True) as response:
            response.raise_for_status()
            total_size = int(response.headers.get("content-length", 0))

            with (
                open(part_file, "wb") as firmware_image,
                alive_bar(total=total_size or None, scale="IEC", unit="B") as bar,
            ):
                for data in response.iter_content(block_size):
                    bar(len(data))
                    firmware_image.write(data)

    @staticmethod
    def fetch_firmware(url: str, output_file: Path) -> bool:
        """Download a firmware image unless it is already cached.

        The image is written next to the destination with a '.part' suffix and only renamed into place once the whole
        body has been received, so an interrupted download never looks like a cached one.

        :param url: The URL of the firmware to download.
        :param output_file: Destination of the firmware image.
        :return: True if the image was downloaded, False if it already existed.
        :raises DownloadError: The server answered with an error or the transfer failed.
        """
        output_file = Path(output_file)
        if output_file.exists():
            return False

        # Make the destination directory. Create any parents, if needed. If the directory already exists, don't error.
        output_file.parent.mkdir(parents=True, exist_ok=True)
        part_file = output_file.with_name(f"{output_file.name}.part")

        try:
            Downloader.__download_firmware(url, part_file)
            part_file.replace(output_file)
        except requests.exceptions.RequestException as exc:
            part_file.unlink(missing_ok=True)
            raise DownloadError(f"failed to download {url}: {exc}") from exc
        except OSError as exc:
            part_file.unlink(missing_ok=True)
            raise DownloadError(f"failed to write {output_file}: {exc}") from exc

        return True
