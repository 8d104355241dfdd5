# projectgen/core/namespace.py
"""
Collision-free project namespaces: `<platform>-<name>-<millis>`.

The millisecond component is strictly increasing per factory, so two requests
landing in the same millisecond with the same supplied name still get
distinct namespaces. The namespace names both the project directory and the
archive, and is never reused.
"""
import threading
import time
from typing import Callable, Optional

from projectgen.utils.file_helpers import slugify

DEFAULT_PROJECT_NAME = "project"


def _now_millis() -> int:
    return int(time.time() * 1000)


class NamespaceFactory:
    def __init__(self, clock_ms: Callable[[], int] = _now_millis) -> None:
        self._clock_ms = clock_ms
        self._last = 0
        self._lock = threading.Lock()

    def _next_stamp(self) -> int:
        with self._lock:
            stamp = max(self._clock_ms(), self._last + 1)
            self._last = stamp
            return stamp

    def create(self, project_name: Optional[str] = None, platform: Optional[str] = None) -> str:
        parts = []
        prefix = slugify(platform).lower()
        if prefix:
            parts.append(prefix)
        parts.append(slugify(project_name, DEFAULT_PROJECT_NAME))
        parts.append(str(self._next_stamp()))
        return "-".join(parts)
