"""Test doubles and builders shared by the test modules.

The fakes implement the collaborator protocols (asset source, resource
writer, filesystem, reporter) and record how they were called.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from PIL import Image

from photos_export.core.errors import ExportError, ResourceWriteError
from photos_export.core.models import Asset, MediaKind, Resource, ResourceKind


CAPTURE = datetime(2025, 1, 2, 3, 4, 5)
STAMP = "20250102030405"


def make_resource(
    name: str = "IMG_0001.HEIC",
    kind: int = ResourceKind.PHOTO,
    content_type: str = "public.heic",
) -> Resource:
    return Resource(kind=kind, original_filename=name, content_type=content_type)


def make_asset(
    identifier: str = "asset-1",
    capture_date: Optional[datetime] = CAPTURE,
    resources: Optional[tuple[Resource, ...]] = None,
    media_kind: int = MediaKind.IMAGE,
    **kwargs,
) -> Asset:
    """Build an asset; defaults to a live photo (image + paired video)."""
    if resources is None:
        resources = (
            make_resource("IMG_0001.HEIC", ResourceKind.PHOTO, "public.heic"),
            make_resource("IMG_0001.MOV", ResourceKind.PAIRED_VIDEO, "com.apple.quicktime-movie"),
        )
    kwargs.setdefault("pixel_width", 4032)
    kwargs.setdefault("pixel_height", 3024)
    return Asset(
        identifier=identifier,
        capture_date=capture_date,
        media_kind=media_kind,
        resources=tuple(resources),
        **kwargs,
    )


class FakeResourceWriter:
    """Writes a few bytes per resource; fails for configured filenames."""

    def __init__(self, fail_names: Optional[set[str]] = None, payload: bytes = b"data"):
        self.fail_names = set(fail_names or ())
        self.payload = payload
        self.calls: list[tuple[Resource, Path, bool]] = []
        self._lock = threading.Lock()

    def write(self, resource: Resource, destination: Path, network_access_allowed: bool = True) -> None:
        with self._lock:
            self.calls.append((resource, destination, network_access_allowed))
        if resource.original_filename in self.fail_names:
            raise ResourceWriteError(
                "Simulated write failure",
                domain="FakeWriter",
                code=7,
                reason="disk full",
            )
        destination.write_bytes(self.payload)

    @property
    def written_names(self) -> list[str]:
        return [dest.name for _, dest, _ in self.calls]


class FakeFileSystem:
    """In-memory view of which destination files already exist."""

    def __init__(self, existing: Optional[set[Path]] = None, fail_remove: bool = False):
        self.existing = set(existing or ())
        self.fail_remove = fail_remove
        self.removed: list[Path] = []

    def exists(self, path: Path) -> bool:
        return path in self.existing

    def remove(self, path: Path) -> None:
        if self.fail_remove:
            raise PermissionError(13, "Permission denied", str(path))
        self.existing.discard(path)
        self.removed.append(path)

    def size(self, path: Path) -> Optional[int]:
        return 4 if path.exists() else None


class FakeAssetSource:
    """Returns a fixed list of assets and records the requested range."""

    def __init__(self, assets: Optional[list[Asset]] = None, error: Optional[ExportError] = None):
        self.assets = list(assets or [])
        self.error = error
        self.ranges: list[tuple[datetime, datetime]] = []

    def fetch(self, start: datetime, end: datetime) -> Iterator[Asset]:
        self.ranges.append((start, end))
        if self.error is not None:
            raise self.error
        yield from self.assets


@dataclass
class RecordingReporter:
    """Reporter that keeps every message for inspection."""
    messages: list[tuple[str, str]] = field(default_factory=list)

    def _add(self, level: str, message: str) -> None:
        self.messages.append((level, message))

    def info(self, message: str) -> None:
        self._add("info", message)

    def success(self, message: str) -> None:
        self._add("success", message)

    def warning(self, message: str) -> None:
        self._add("warning", message)

    def error(self, message: str) -> None:
        self._add("error", message)

    def debug(self, message: str) -> None:
        self._add("debug", message)

    def of_level(self, level: str) -> list[str]:
        return [m for lvl, m in self.messages if lvl == level]


def create_exif_image(
    path: Path,
    taken: Optional[datetime] = None,
    size: tuple[int, int] = (64, 48),
    make: Optional[str] = None,
    model: Optional[str] = None,
) -> Path:
    """Write a small JPEG, optionally with an EXIF capture date and camera."""
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGB", size, color=(200, 120, 40))
    exif = Image.Exif()
    if taken is not None:
        exif[306] = taken.strftime("%Y:%m:%d %H:%M:%S")
    if make:
        exif[271] = make
    if model:
        exif[272] = model
    img.save(path, "JPEG", exif=exif.tobytes())
    return path
