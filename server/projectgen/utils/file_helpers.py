import re
from pathlib import Path
from typing import Optional

_SLUG_STRIP = re.compile(r"[^A-Za-z0-9_-]+")


def is_safe_relative_path(p: str) -> bool:
    """
    True for a forward-slash relative path with no empty, '.' or '..' segments.
    Nothing is normalized: a path that needs cleaning is rejected.
    """
    if not isinstance(p, str) or p.strip() == "":
        return False
    if p.startswith("/") or "\\" in p or "\x00" in p:
        return False
    # drive letters (C:foo) are absolute on windows
    if re.match(r"^[A-Za-z]:", p):
        return False
    for segment in p.split("/"):
        if segment in ("", ".", ".."):
            return False
    return True


def slugify(value: Optional[str], default: str = "") -> str:
    """Reduce a human supplied name to [A-Za-z0-9_-]."""
    if not value:
        return default
    slug = _SLUG_STRIP.sub("-", value.strip()).strip("-_")
    return slug[:64] or default


def is_within(base: Path, target: Path) -> bool:
    """True when target resolves inside base."""
    try:
        target.resolve().relative_to(base.resolve())
        return True
    except ValueError:
        return False
