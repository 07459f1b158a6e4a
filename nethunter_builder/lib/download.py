from __future__ import annotations

import logging
from pathlib import Path

import requests

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
DL_HEADERS = {"User-Agent": "nethunter-builder"}


class DownloadError(RuntimeError):
    pass


def download(url: str, destination: Path, *, timeout: float = 60.0) -> Path:
    """Stream *url* into *destination*.

    Data goes to ``<destination>.part`` and is renamed into place only once
    the stream is complete; the partial file is removed on any failure,
    interrupts included, so a re-run never mistakes it for the real file.
    """

    destination.parent.mkdir(parents=True, exist_ok=True)
    partial = destination.with_name(destination.name + ".part")
    try:
        with requests.get(url, stream=True, headers=DL_HEADERS, timeout=timeout) as r:
            r.raise_for_status()
            size = r.headers.get("Content-Length")
            if size:
                logger.info("Downloading %s (%s bytes) - %s", destination.name, size, url)
            else:
                logger.info("Downloading %s (unknown size) - %s", destination.name, url)

            written = 0
            with partial.open("wb") as f:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    f.write(chunk)
                    written += len(chunk)
            partial.replace(destination)
    except (requests.exceptions.RequestException, OSError) as e:
        raise DownloadError(f"There was a problem downloading {url}: {e}") from e
    finally:
        partial.unlink(missing_ok=True)

    logger.info("Download OK: %s (%d bytes)", destination, written)
    return destination
