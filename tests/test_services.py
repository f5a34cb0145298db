"""Tests for file operations and metadata sidecars."""
import json
from datetime import datetime, timezone
from io import StringIO
from pathlib import Path

import pytest

from photos_export.core.errors import DirectoryCreateError, DirectoryError
from photos_export.core.models import ExportedResource, ResourceAction
from photos_export.logging.run_log import RunLog
from photos_export.services.file_ops import FileManager
from photos_export.services.naming import NameRegistry
from photos_export.services.sidecar import SidecarWriter

from .fixtures import CAPTURE, STAMP, make_asset


class TestFileManager:
    """Tests for FileManager."""

    @pytest.fixture
    def manager(self, tmp_path: Path) -> FileManager:
        return FileManager(tmp_path / "out")

    def test_build_output_directory(self, manager, tmp_path):
        folder = manager.build_output_directory(datetime(2025, 1, 2, 3, 4, 5))
        assert folder == tmp_path / "out" / "2025" / "01"

    def test_build_output_directory_aware(self, manager):
        moment = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
        local = moment.astimezone()
        folder = manager.build_output_directory(moment)
        assert folder.parts[-2:] == (f"{local.year:04d}", f"{local.month:02d}")

    def test_ensure_directory_creates(self, tmp_path):
        stream = StringIO()
        manager = FileManager(tmp_path, RunLog(stream))
        target = tmp_path / "2025" / "01"

        manager.ensure_directory(target)
        manager.ensure_directory(target)

        assert target.is_dir()
        output = stream.getvalue()
        assert f"fs.dir create path={target}" in output
        assert f"fs.dir exists path={target}" in output

    def test_ensure_directory_rejects_file(self, manager, tmp_path):
        target = tmp_path / "file"
        target.write_text("x")

        with pytest.raises(DirectoryError):
            manager.ensure_directory(target)

    def test_ensure_directory_below_file(self, manager, tmp_path):
        """Test mkdir failures surface as an export error with the OS cause."""
        blocker = tmp_path / "blocker"
        blocker.write_text("x")

        with pytest.raises(DirectoryCreateError) as exc_info:
            manager.ensure_directory(blocker / "out" / "2025")

        assert isinstance(exc_info.value.__cause__, OSError)
        assert exc_info.value.code == 11
        assert str(blocker / "out" / "2025") in str(exc_info.value)

    def test_exists_remove_size(self, manager, tmp_path):
        path = tmp_path / "a.jpg"
        path.write_bytes(b"12345")

        assert manager.exists(path)
        assert manager.size(path) == 5
        manager.remove(path)
        assert not manager.exists(path)
        assert manager.size(path) is None

    def test_remove_missing_raises(self, manager, tmp_path):
        with pytest.raises(OSError):
            manager.remove(tmp_path / "missing.jpg")

    def test_file_info(self, manager, tmp_path):
        path = tmp_path / "a.jpg"
        path.write_bytes(b"123")

        size, modified = manager.file_info(path)

        assert size == 3
        assert modified.tzinfo is not None
        assert manager.file_info(tmp_path / "missing") == (None, None)


class TestSidecarWriter:
    """Tests for the JSON metadata sidecar."""

    @pytest.fixture
    def folder(self, tmp_path: Path) -> Path:
        path = tmp_path / "2025" / "01"
        path.mkdir(parents=True)
        return path

    def exported_files(self, asset, folder):
        entries = []
        for resource, suffix in zip(asset.resources, ("heic", "mov")):
            path = folder / f"{STAMP}.{suffix}"
            path.write_bytes(b"data")
            entries.append(ExportedResource(resource, path, ResourceAction.WRITTEN))
        return entries

    def test_write(self, tmp_path, folder):
        asset = make_asset(extra={"title": "Beach", "raw": b"\x01\x02"}, media_subtypes=8)
        exported = self.exported_files(asset, folder)
        registry = NameRegistry({e.filename for e in exported})
        stream = StringIO()
        writer = SidecarWriter(FileManager(tmp_path, RunLog(stream)), RunLog(stream))

        path = writer.write(asset, CAPTURE, folder, registry, exported)

        assert path == folder / f"{STAMP}.json"
        document = json.loads(path.read_text())
        assert document["localIdentifier"] == "asset-1"
        assert document["mediaType"] == 1
        assert document["mediaSubtypes"] == 8
        assert document["pixelWidth"] == 4032
        assert document["title"] == "Beach"
        assert document["raw"] == "AQI="
        assert len(document["resources"]) == 2
        first = document["exportedFiles"][0]
        assert first["exportedFilename"] == f"{STAMP}.heic"
        assert first["originalFilename"] == "IMG_0001.HEIC"
        assert first["fileSize"] == 4
        assert "fileModificationDate" in first
        assert f"metadata.json.saved path={path} bytes=" in stream.getvalue()

    def test_sidecar_name_unique_in_registry(self, tmp_path, folder):
        asset = make_asset()
        registry = NameRegistry({f"{STAMP}.json"})
        writer = SidecarWriter(FileManager(tmp_path))

        path = writer.write(asset, CAPTURE, folder, registry, [])

        assert path.name != f"{STAMP}.json"
        assert path.name.startswith(STAMP)
        assert path.suffix == ".json"

    def test_core_fields_override_extra(self, tmp_path):
        asset = make_asset(extra={"localIdentifier": "spoofed", "when": datetime(2025, 1, 1, tzinfo=timezone.utc)})
        metadata = SidecarWriter(FileManager(tmp_path)).build_metadata(asset, [])

        assert metadata["localIdentifier"] == "asset-1"
        assert metadata["when"] == "2025-01-01T00:00:00.000Z"
        assert metadata["exportedFiles"] == []
