# =============================================================================
# ARTIFACT LIFECYCLE TESTS
# =============================================================================

import time

import pytest

from projectgen.core.archive import build_archive
from projectgen.core.artifacts import (
    ArtifactRegistry,
    ArtifactState,
    ThreadingScheduler,
    delete_file,
    is_valid_artifact_name,
)
from projectgen.core.errors import ArtifactNotFound


@pytest.fixture
def built_archive(tmp_path, react_vite_files):
    return build_archive(react_vite_files, "demo-1", tmp_path)


class TestRegistration:
    """Built -> Available."""

    def test_register_makes_available_with_deadline(self, registry, built_archive, manual_scheduler):
        artifact = registry.register(built_archive)

        assert artifact.name == "demo-1.zip"
        assert artifact.state == ArtifactState.AVAILABLE
        assert artifact.deadline == artifact.created_at + 300
        assert manual_scheduler.pending == 1

    def test_register_twice_rejected(self, registry, built_archive):
        registry.register(built_archive)
        with pytest.raises(ValueError):
            registry.register(built_archive)

    def test_register_requires_zip_name(self, registry, tmp_path):
        other = tmp_path / "notes.txt"
        other.write_text("x")
        with pytest.raises(ValueError):
            registry.register(other)


class TestRetrieval:
    """Available -> Downloaded."""

    def test_download_streams_exact_bytes(self, registry, built_archive):
        expected = built_archive.read_bytes()
        registry.register(built_archive)

        with registry.open_artifact("demo-1.zip") as fh:
            assert fh.read() == expected
        assert registry.get("demo-1.zip").state == ArtifactState.DOWNLOADED

    def test_download_does_not_delete_and_can_repeat(self, registry, built_archive, manual_scheduler):
        registry.register(built_archive)
        registry.open_artifact("demo-1.zip").close()
        registry.open_artifact("demo-1.zip").close()

        assert built_archive.exists()
        assert registry.get("demo-1.zip").downloads == 2
        assert manual_scheduler.pending == 1

    @pytest.mark.parametrize("name", ["missing.zip", "demo-1.tar", "../demo-1.zip", "sub/demo-1.zip", ".zip", ""])
    def test_unknown_or_malformed_names_not_found(self, registry, built_archive, name):
        registry.register(built_archive)
        with pytest.raises(ArtifactNotFound):
            registry.open_artifact(name)

    def test_unregistered_file_on_disk_not_served(self, registry, tmp_path, react_vite_files):
        build_archive(react_vite_files, "stray", tmp_path)
        with pytest.raises(ArtifactNotFound):
            registry.open_artifact("stray.zip")

    def test_vanished_file_is_not_found(self, registry, built_archive):
        registry.register(built_archive)
        built_archive.unlink()
        with pytest.raises(ArtifactNotFound):
            registry.open_artifact("demo-1.zip")


class TestExpiry:
    """Available/Downloaded -> Expired -> Deleted."""

    def test_expiry_deletes_file_and_evicts_entry(self, registry, built_archive, manual_scheduler):
        artifact = registry.register(built_archive)
        manual_scheduler.advance(300)

        assert not built_archive.exists()
        assert artifact.state == ArtifactState.DELETED
        assert registry.get("demo-1.zip") is None
        with pytest.raises(ArtifactNotFound):
            registry.open_artifact("demo-1.zip")

    def test_not_expired_before_deadline(self, registry, built_archive, manual_scheduler):
        registry.register(built_archive)
        manual_scheduler.advance(299)
        assert built_archive.exists()
        registry.open_artifact("demo-1.zip").close()

    def test_past_deadline_is_not_found_even_before_timer_fires(self, registry, built_archive, manual_clock):
        registry.register(built_archive)
        manual_clock.now += 301
        with pytest.raises(ArtifactNotFound):
            registry.open_artifact("demo-1.zip")

    def test_expiry_after_download(self, registry, built_archive, manual_scheduler):
        registry.register(built_archive)
        registry.open_artifact("demo-1.zip").close()
        manual_scheduler.advance(300)

        assert not built_archive.exists()
        assert registry.get("demo-1.zip") is None

    def test_expired_entries_do_not_accumulate(self, registry, tmp_path, react_vite_files, manual_scheduler):
        for i in range(5):
            registry.register(build_archive(react_vite_files, f"demo-{i}", tmp_path))
        manual_scheduler.advance(300)

        assert all(registry.get(f"demo-{i}.zip") is None for i in range(5))

    def test_open_handle_survives_expiry(self, registry, built_archive, manual_scheduler):
        expected = built_archive.read_bytes()
        registry.register(built_archive)
        fh = registry.open_artifact("demo-1.zip")
        try:
            manual_scheduler.advance(300)
            assert fh.read() == expected
        finally:
            fh.close()


class TestIdempotentDelete:
    """Deleting twice never raises."""

    def test_delete_file_twice(self, built_archive):
        assert delete_file(built_archive) is True
        assert delete_file(built_archive) is False

    def test_expire_twice_and_after_manual_removal(self, registry, built_archive):
        registry.register(built_archive)
        built_archive.unlink()
        registry.expire("demo-1.zip")
        registry.expire("demo-1.zip")
        assert registry.get("demo-1.zip") is None

    def test_expire_unknown_name_is_noop(self, registry):
        registry.expire("never-registered.zip")


class TestThreadingScheduler:
    """Real timers."""

    def test_real_timer_deletes_artifact(self, tmp_path, react_vite_files):
        scheduler = ThreadingScheduler()
        registry = ArtifactRegistry(tmp_path, ttl_seconds=0.05, scheduler=scheduler)
        path = build_archive(react_vite_files, "timed", tmp_path)
        registry.register(path)

        deadline = time.monotonic() + 5
        while path.exists() and time.monotonic() < deadline:
            time.sleep(0.01)

        assert not path.exists()
        registry.shutdown()

    def test_shutdown_cancels_pending(self, tmp_path, react_vite_files):
        registry = ArtifactRegistry(tmp_path, ttl_seconds=60, scheduler=ThreadingScheduler())
        path = build_archive(react_vite_files, "kept", tmp_path)
        registry.register(path)
        registry.shutdown()
        assert path.exists()


class TestNameValidation:
    @pytest.mark.parametrize("name,ok", [
        ("demo-1.zip", True),
        ("demo.ZIP", False),
        ("a/b.zip", False),
        ("a\\b.zip", False),
        ("..zip", False),
        (None, False),
    ])
    def test_is_valid_artifact_name(self, name, ok):
        assert is_valid_artifact_name(name) is ok
