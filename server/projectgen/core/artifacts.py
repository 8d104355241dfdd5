# projectgen/core/artifacts.py
"""
Artifact lifecycle: Built -> Available -> {Downloaded, Expired} -> Deleted.

The registry owns every archive it is handed. Exactly one expiry timer is
scheduled per artifact when it becomes available and it is never rescheduled.
Downloads never delete; only the expiry timer does, and file deletion is
idempotent so a timer firing during or after a download is harmless.
Deleted entries are dropped from the registry; unknown names are NotFound.

Time and timers are injected (clock + scheduler) so the lifecycle can be
driven without real wall-clock waits.
"""
import enum
import heapq
import itertools
import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Dict, List, Optional, Tuple, Union

from projectgen.core.archive import ARCHIVE_EXTENSION
from projectgen.core.errors import ArtifactNotFound

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


class ArtifactState(str, enum.Enum):
    BUILT = "built"
    AVAILABLE = "available"
    DOWNLOADED = "downloaded"
    EXPIRED = "expired"
    DELETED = "deleted"


RETRIEVABLE_STATES = (ArtifactState.AVAILABLE, ArtifactState.DOWNLOADED)


@dataclass
class Artifact:
    name: str
    path: Path
    created_at: float
    deadline: float
    state: ArtifactState = ArtifactState.BUILT
    downloads: int = 0


# ----------------------------
# Schedulers
# ----------------------------
class ThreadingScheduler:
    """Runs callbacks on daemon threading.Timer threads."""

    def __init__(self) -> None:
        self._timers: Dict[int, threading.Timer] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def call_later(self, delay: float, callback: Callable[[], None]) -> int:
        handle = next(self._ids)

        def _run() -> None:
            with self._lock:
                self._timers.pop(handle, None)
            callback()

        timer = threading.Timer(max(0.0, delay), _run)
        timer.daemon = True
        with self._lock:
            self._timers[handle] = timer
        timer.start()
        return handle

    def cancel_all(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()


class ManualClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


class ManualScheduler:
    """Deterministic scheduler; callbacks fire only when `advance` passes them."""

    def __init__(self, clock: ManualClock) -> None:
        self.clock = clock
        self._queue: List[Tuple[float, int, Callable[[], None]]] = []
        self._ids = itertools.count(1)

    def call_later(self, delay: float, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        heapq.heappush(self._queue, (self.clock.now + max(0.0, delay), handle, callback))
        return handle

    @property
    def pending(self) -> int:
        return len(self._queue)

    def advance(self, seconds: float) -> None:
        target = self.clock.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, callback = heapq.heappop(self._queue)
            self.clock.now = when
            callback()
        self.clock.now = target

    def cancel_all(self) -> None:
        self._queue.clear()


# ----------------------------
# Registry
# ----------------------------
def delete_file(path: Union[str, Path]) -> bool:
    """Remove a file; absent files are a no-op. Returns True if something was removed."""
    try:
        Path(path).unlink()
        return True
    except FileNotFoundError:
        return False


def is_valid_artifact_name(name: str) -> bool:
    if not isinstance(name, str) or not name.endswith(ARCHIVE_EXTENSION):
        return False
    if len(name) <= len(ARCHIVE_EXTENSION):
        return False
    if "/" in name or "\\" in name or ".." in name or "\x00" in name:
        return False
    return True


class ArtifactRegistry:
    def __init__(self,
                 root: Union[str, Path],
                 ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic,
                 scheduler=None) -> None:
        self.root = Path(root)
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.scheduler = scheduler if scheduler is not None else ThreadingScheduler()
        self._artifacts: Dict[str, Artifact] = {}
        self._lock = threading.RLock()

    def get(self, name: str) -> Optional[Artifact]:
        with self._lock:
            return self._artifacts.get(name)

    def register(self, archive_path: Union[str, Path]) -> Artifact:
        """Take ownership of a finished archive and start its expiry window."""
        path = Path(archive_path)
        name = path.name
        if not is_valid_artifact_name(name):
            raise ValueError(f"not an archive name: {name}")

        with self._lock:
            if name in self._artifacts:
                raise ValueError(f"artifact already registered: {name}")
            now = self.clock()
            artifact = Artifact(name=name, path=path, created_at=now, deadline=now + self.ttl_seconds)
            self._artifacts[name] = artifact
            artifact.state = ArtifactState.AVAILABLE
            self.scheduler.call_later(self.ttl_seconds, lambda: self.expire(name))

        logger.info("artifact %s available for %.0fs", name, self.ttl_seconds)
        return artifact

    def open_artifact(self, name: str) -> BinaryIO:
        """
        Open a retrievable artifact for streaming.
        Raises ArtifactNotFound for anything not registered, expired or missing on disk.
        """
        if not is_valid_artifact_name(name):
            raise ArtifactNotFound(str(name))

        with self._lock:
            artifact = self._artifacts.get(name)
            if artifact is None or artifact.state not in RETRIEVABLE_STATES:
                raise ArtifactNotFound(name)
            if self.clock() >= artifact.deadline:
                raise ArtifactNotFound(name)
            try:
                handle = open(artifact.path, "rb")
            except FileNotFoundError:
                raise ArtifactNotFound(name) from None
            artifact.state = ArtifactState.DOWNLOADED
            artifact.downloads += 1

        logger.info("artifact %s retrieved (download #%d)", name, artifact.downloads)
        return handle

    def expire(self, name: str) -> None:
        """Expiry timer callback. Safe to call more than once."""
        with self._lock:
            artifact = self._artifacts.get(name)
            if artifact is None or artifact.state == ArtifactState.DELETED:
                return
            artifact.state = ArtifactState.EXPIRED
            path = artifact.path

        try:
            removed = delete_file(path)
        except OSError:
            logger.exception("failed to delete expired artifact %s", path)
            return

        with self._lock:
            artifact.state = ArtifactState.DELETED
            self._artifacts.pop(name, None)
        logger.info("artifact %s expired (%s)", name, "deleted" if removed else "already gone")

    def shutdown(self) -> None:
        cancel = getattr(self.scheduler, "cancel_all", None)
        if cancel is not None:
            cancel()
