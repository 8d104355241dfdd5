# =============================================================================
# ARCHIVE BUILDER TESTS
# =============================================================================

import zipfile

import pytest

from projectgen.core.archive import archive_name, build_archive
from projectgen.core.errors import ArchiveBuildError


def _read_zip(path):
    with zipfile.ZipFile(path) as zf:
        return {info.filename: zf.read(info).decode("utf-8") for info in zf.infolist()}


class TestBuildArchive:
    """Zip construction from the file map."""

    def test_round_trip(self, tmp_path, react_vite_files):
        path = build_archive(react_vite_files, "demo-1", tmp_path)
        assert path == tmp_path / "demo-1.zip"
        assert _read_zip(path) == react_vite_files

    def test_paths_preserved_exactly(self, tmp_path):
        files = {"Src/App.JSX": "upper", "src/app.jsx": "lower", "a/b/c/d.txt": "deep", ".env.example": "X=1"}
        assert _read_zip(build_archive(files, "ns", tmp_path)) == files

    def test_uses_deflate(self, tmp_path, react_vite_files):
        path = build_archive(react_vite_files, "ns", tmp_path)
        with zipfile.ZipFile(path) as zf:
            assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in zf.infolist())

    def test_deterministic_bytes(self, tmp_path, react_vite_files):
        first = build_archive(react_vite_files, "one", tmp_path).read_bytes()
        reordered = dict(reversed(list(react_vite_files.items())))
        second = build_archive(reordered, "two", tmp_path).read_bytes()
        assert first == second

    def test_empty_map_builds_empty_archive(self, tmp_path):
        assert _read_zip(build_archive({}, "empty", tmp_path)) == {}

    def test_failure_leaves_no_partial_archive(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")

        with pytest.raises(ArchiveBuildError):
            build_archive({"a.txt": "x"}, "ns", blocker)

        assert not (tmp_path / "blocker" / "ns.zip").exists()
        assert list(tmp_path.glob("**/*.part")) == []

    def test_archive_name(self):
        assert archive_name("aem-shop-1700000000000") == "aem-shop-1700000000000.zip"
