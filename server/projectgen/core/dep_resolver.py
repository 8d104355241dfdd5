# projectgen/core/dep_resolver.py
"""
Version suggestions for packages the validator found undeclared.

Responsibilities:
- Given package names, suggest a version string for a remediation hint.
- When registry lookup is enabled, query npm `dist-tags.latest` (cached with TTL).
- Otherwise, or when the registry cannot answer, suggest "latest".

Suggestions only inform the hint returned to the caller; they never modify
the generated file map.
"""
import logging
import os
import pickle
import time
import urllib.parse
from typing import Any, Dict, Iterable, Optional

import requests

from projectgen.core.validator import SUGGESTED_VERSION
from projectgen.utils.config import LOG_DIR

logger = logging.getLogger(__name__)

NPM_REGISTRY = "https://registry.npmjs.org"
NPM_CACHE_FILE = os.path.join(LOG_DIR, "npm_cache.pkl")
NPM_CACHE_TTL = 24 * 3600
REQUEST_TIMEOUT = 8


def _load_cache(cache_file: str = NPM_CACHE_FILE) -> Dict[str, Any]:
    try:
        if os.path.exists(cache_file):
            mtime = os.path.getmtime(cache_file)
            if time.time() - mtime < NPM_CACHE_TTL:
                with open(cache_file, "rb") as fh:
                    return pickle.load(fh)
    except (OSError, pickle.UnpicklingError, EOFError):
        logger.warning("ignoring unreadable npm cache %s", cache_file)
    return {}


def _save_cache(cache: Dict[str, Any], cache_file: str = NPM_CACHE_FILE) -> None:
    try:
        os.makedirs(os.path.dirname(cache_file) or ".", exist_ok=True)
        # atomic write
        tmp = cache_file + ".tmp"
        with open(tmp, "wb") as fh:
            pickle.dump(cache, fh)
        os.replace(tmp, cache_file)
    except OSError:
        logger.warning("failed to write npm cache %s", cache_file)


def get_latest_version(name: str, session: Optional[requests.Session] = None) -> Optional[str]:
    """Return dist-tags.latest for a package, or None if the registry can't say."""
    encoded = urllib.parse.quote(name, safe="@")
    url = f"{NPM_REGISTRY}/{encoded}"
    getter = session.get if session is not None else requests.get
    try:
        resp = getter(url, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        logger.warning("npm registry lookup failed for %s: %s", name, e)
        return None
    if resp.status_code != 200:
        logger.info("npm registry returned %s for %s", resp.status_code, name)
        return None
    try:
        data = resp.json()
    except ValueError:
        return None
    dist = data.get("dist-tags", {}) or {}
    return dist.get("latest") or data.get("version")


def suggest_versions(names: Iterable[str],
                     lookup: bool = False,
                     cache_file: str = NPM_CACHE_FILE) -> Dict[str, str]:
    """
    Map each name to a suggested version string. Caret-prefixed when the
    registry answered, SUGGESTED_VERSION otherwise.
    """
    names = list(names)
    suggestions = {name: SUGGESTED_VERSION for name in names}
    if not lookup or not names:
        return suggestions

    cache = _load_cache(cache_file)
    dirty = False
    for name in names:
        entry = cache.get(name)
        if entry and time.time() - entry.get("ts", 0) < NPM_CACHE_TTL:
            suggestions[name] = f"^{entry['ver']}"
            continue
        ver = get_latest_version(name)
        if ver:
            suggestions[name] = f"^{ver}"
            cache[name] = {"ver": ver, "ts": time.time()}
            dirty = True

    if dirty:
        _save_cache(cache, cache_file)
    return suggestions
