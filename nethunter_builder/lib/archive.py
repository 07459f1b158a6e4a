from __future__ import annotations

import fnmatch
import logging
import os
import zipfile
from pathlib import Path
from typing import Iterable, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


def extract_tarball(archive: Path, dest_dir: Path) -> None:
    dest_dir.mkdir(parents=True, exist_ok=True)
    run_cmd(["tar", "-xzf", str(archive), "-C", str(dest_dir)])


def _excluded(rel: str, patterns: Sequence[str]) -> bool:
    # zip -x semantics: patterns match the whole relative path and "*" spans "/".
    return any(fnmatch.fnmatch(rel, pat) for pat in patterns)


def iter_files(src: Path, exclude: Sequence[str] = ()) -> Iterable[Path]:
    for dirname, subdirs, files in os.walk(src):
        base = Path(dirname)
        subdirs[:] = sorted(
            d for d in subdirs if not _excluded((base / d).relative_to(src).as_posix(), exclude)
        )
        for filename in sorted(files):
            path = base / filename
            if not _excluded(path.relative_to(src).as_posix(), exclude):
                yield path


def zip_directory(src: Path, dst: Path, *, exclude: Sequence[str] = ()) -> Path:
    """Zip the contents of *src* into *dst* (overwrites *dst*)."""

    logger.info("Creating zip file: %s", dst)
    # dst may live inside src; never add it to itself.
    dst_resolved = dst.resolve()
    with zipfile.ZipFile(dst, "w", zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        for path in iter_files(src, exclude):
            if path.resolve() == dst_resolved:
                continue
            arcname = path.relative_to(src).as_posix()
            zf.write(path, arcname)
            logger.debug("Added: %s", arcname)

    logger.info("Finished creating zip: %s", dst)
    return dst
