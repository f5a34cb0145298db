"""Domain models - immutable data classes."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Optional


class MediaKind(IntEnum):
    """Media type of an asset, using the library's raw values."""
    UNKNOWN = 0
    IMAGE = 1
    VIDEO = 2
    AUDIO = 3


class ResourceKind(IntEnum):
    """Kind of a physical resource backing an asset."""
    PHOTO = 1
    VIDEO = 2
    AUDIO = 3
    ALTERNATE_PHOTO = 4
    FULL_SIZE_PHOTO = 5
    FULL_SIZE_VIDEO = 6
    ADJUSTMENT_DATA = 7
    ADJUSTMENT_BASE_PHOTO = 8
    PAIRED_VIDEO = 9
    FULL_SIZE_PAIRED_VIDEO = 10
    ADJUSTMENT_BASE_PAIRED_VIDEO = 11
    ADJUSTMENT_BASE_VIDEO = 12
    PHOTO_PROXY = 19


RESOURCE_KIND_LABELS = {
    ResourceKind.PHOTO: "photo",
    ResourceKind.VIDEO: "video",
    ResourceKind.AUDIO: "audio",
    ResourceKind.ALTERNATE_PHOTO: "alternatePhoto",
    ResourceKind.FULL_SIZE_PHOTO: "fullSizePhoto",
    ResourceKind.FULL_SIZE_VIDEO: "fullSizeVideo",
    ResourceKind.ADJUSTMENT_DATA: "adjustmentData",
}


def resource_kind_label(kind: int) -> str:
    """Human label for a resource kind; unknown values render as ``type<n>``."""
    label = RESOURCE_KIND_LABELS.get(kind)
    return label if label is not None else f"type{int(kind)}"


@dataclass(frozen=True, slots=True)
class Resource:
    """One physical representation of an asset.

    ``source`` is an opaque locator owned by the collaborator that produced
    the resource; the export pipeline never inspects it.
    """
    kind: int
    original_filename: str = ""
    content_type: str = ""
    source: Optional[Path] = None

    @property
    def label(self) -> str:
        return resource_kind_label(self.kind)


@dataclass(frozen=True, slots=True)
class Asset:
    """One media item in the library, passed by value."""
    identifier: str
    capture_date: Optional[datetime] = None
    media_kind: int = MediaKind.UNKNOWN
    media_subtypes: int = 0
    pixel_width: int = 0
    pixel_height: int = 0
    duration: float = 0.0
    resources: tuple[Resource, ...] = field(default_factory=tuple)
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def pixel_size(self) -> str:
        return f"{self.pixel_width}x{self.pixel_height}"

    @property
    def is_video(self) -> bool:
        return self.media_kind == MediaKind.VIDEO

    def summary_fields(self, capture: str) -> str:
        """Key=value summary used in aggregate failure messages."""
        return (
            f"asset={self.identifier} capture={capture} "
            f"mediaType={int(self.media_kind)} subtypes={self.media_subtypes} "
            f"px={self.pixel_size} dur={float(self.duration)}"
        )


@dataclass(frozen=True, slots=True)
class ResourceFailure:
    """Descriptor of a single resource that failed to export."""
    kind: int
    content_type: str
    original_filename: str
    destination_filename: str
    detail: str

    @property
    def label(self) -> str:
        return resource_kind_label(self.kind)

    def summary_line(self) -> str:
        return (
            f"type={self.label} uti={self.content_type} "
            f"name={self.original_filename} dest={self.destination_filename} "
            f"{self.detail}"
        )


class ResourceAction(Enum):
    """How a resource ended up at its destination."""
    WRITTEN = "written"
    EXISTING = "existing"


@dataclass(frozen=True, slots=True)
class ExportedResource:
    """A resource successfully placed at ``path``."""
    resource: Resource
    path: Path
    action: ResourceAction = ResourceAction.WRITTEN

    @property
    def filename(self) -> str:
        return self.path.name


@dataclass(slots=True)
class ExportStats:
    """Mutable statistics for an export run."""
    total_assets: int = 0
    exported_assets: int = 0
    failed_assets: int = 0
    resources_written: int = 0
    resources_existing: int = 0
    resources_failed: int = 0
    removal_errors: int = 0
    sidecars_written: int = 0
    elapsed_seconds: float = 0.0

    @property
    def processed_assets(self) -> int:
        return self.exported_assets + self.failed_assets

    def record_exported(self, exported: list[ExportedResource]) -> None:
        """Record one successfully exported asset."""
        self.exported_assets += 1
        for entry in exported:
            match entry.action:
                case ResourceAction.WRITTEN:
                    self.resources_written += 1
                case ResourceAction.EXISTING:
                    self.resources_existing += 1

    def record_failed(self, failed_resources: int = 0) -> None:
        """Record one asset that did not export."""
        self.failed_assets += 1
        self.resources_failed += failed_resources

    def summary(self) -> dict[str, int]:
        return {
            "total": self.total_assets,
            "exported": self.exported_assets,
            "failed": self.failed_assets,
            "written": self.resources_written,
            "existing": self.resources_existing,
            "resource_failures": self.resources_failed,
            "removal_errors": self.removal_errors,
            "sidecars": self.sidecars_written,
        }
