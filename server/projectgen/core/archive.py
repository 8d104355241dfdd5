# projectgen/core/archive.py
"""
Deterministic zip construction straight from the file map (not from disk).

The archive is written to `<name>.zip.part` and renamed into place only after
the zip stream is closed, so a half-written archive is never visible under its
final name.
"""
import logging
import os
import zipfile
from pathlib import Path
from typing import Mapping, Union

from projectgen.core.errors import ArchiveBuildError

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSION = ".zip"
COMPRESS_LEVEL = 9
# zip timestamps cannot predate 1980
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)
FILE_MODE = 0o644


def archive_name(namespace: str) -> str:
    return f"{namespace}{ARCHIVE_EXTENSION}"


def build_archive(files: Mapping[str, str], namespace: str, root: Union[str, Path]) -> Path:
    root = Path(root)
    final_path = root / archive_name(namespace)
    part_path = final_path.with_name(final_path.name + ".part")

    try:
        root.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(part_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=COMPRESS_LEVEL) as zf:
            for rel_path in sorted(files):
                info = zipfile.ZipInfo(rel_path, date_time=FIXED_DATE_TIME)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = (0o100000 | FILE_MODE) << 16
                zf.writestr(info, files[rel_path].encode("utf-8"), compresslevel=COMPRESS_LEVEL)
        os.replace(part_path, final_path)
    except (OSError, zipfile.BadZipFile, ValueError) as e:
        logger.exception("archive build failed for %s", namespace)
        try:
            part_path.unlink()
        except OSError:
            pass
        raise ArchiveBuildError(f"failed to build archive {final_path.name}: {e}", path=str(final_path)) from e

    logger.info("built archive %s (%d entries)", final_path, len(files))
    return final_path
