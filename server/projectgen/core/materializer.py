# projectgen/core/materializer.py
import logging
import os
import tempfile
from pathlib import Path
from typing import Mapping, Union

from projectgen.core.errors import MaterializeError
from projectgen.utils.file_helpers import is_within

logger = logging.getLogger(__name__)


def _atomic_write_text(target: Path, content: str) -> None:
    fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        os.replace(tmp, target)
    except BaseException:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        raise


def materialize(files: Mapping[str, str], namespace: str, root: Union[str, Path]) -> Path:
    """
    Write every file map entry to <root>/<namespace>/<path>.

    Each file is replaced atomically. Earlier writes are not rolled back when a
    later one fails; the partial directory is left for inspection.
    """
    project_dir = Path(root) / namespace
    try:
        project_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise MaterializeError(f"cannot create project directory: {e}", path=str(project_dir)) from e

    for rel_path, content in files.items():
        target = project_dir / rel_path
        if not is_within(project_dir, target):
            raise MaterializeError(f"refusing to write outside project directory: {rel_path}", path=rel_path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            _atomic_write_text(target, content)
        except (OSError, UnicodeError) as e:
            logger.exception("failed to write %s", target)
            raise MaterializeError(f"failed to write {rel_path}: {e}", path=rel_path) from e

    logger.info("materialized %d file(s) under %s", len(files), project_dir)
    return project_dir
