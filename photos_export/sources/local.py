"""Local folder library - a directory tree treated as a media library.

Files that share a stem inside one directory form a single asset, the way
a camera roll pairs them:

    IMG_0001.HEIC + IMG_0001.MOV  -> live photo with a paired video
    IMG_0002.JPG  + IMG_0002.DNG  -> photo with an alternate (RAW) photo
    IMG_0003.JPG  + IMG_0003.AAE  -> photo with adjustment data
"""
from __future__ import annotations

import logging
import shutil
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Optional

from PIL import Image, ImageFile, UnidentifiedImageError

from ..core.errors import LibraryAccessError, ResourceWriteError
from ..core.models import Asset, MediaKind, Resource, ResourceKind


logger = logging.getLogger(__name__)

# Allow loading truncated images
ImageFile.LOAD_TRUNCATED_IMAGES = True

IMAGE_TYPES = {
    ".jpg": "public.jpeg",
    ".jpeg": "public.jpeg",
    ".heic": "public.heic",
    ".heif": "public.heif",
    ".png": "public.png",
    ".tif": "public.tiff",
    ".tiff": "public.tiff",
    ".gif": "com.compuserve.gif",
    ".webp": "org.webmproject.webp",
    ".dng": "com.adobe.raw-image",
    ".cr2": "com.canon.cr2-raw-image",
}

VIDEO_TYPES = {
    ".mov": "com.apple.quicktime-movie",
    ".mp4": "public.mpeg-4",
    ".m4v": "com.apple.m4v-video",
}

ADJUSTMENT_TYPES = {
    ".aae": "com.apple.photos.apple-adjustment-envelope",
}

RAW_EXTENSIONS = frozenset({".dng", ".cr2"})

SUBTYPE_LIVE_PHOTO = 1 << 3

EXIF_IFD = 0x8769
TAG_DATETIME = 306
TAG_DATETIME_ORIGINAL = 36867
TAG_DATETIME_DIGITIZED = 36868
TAG_MAKE = 271
TAG_MODEL = 272


def is_supported(path: Path) -> bool:
    suffix = path.suffix.lower()
    return suffix in IMAGE_TYPES or suffix in VIDEO_TYPES or suffix in ADJUSTMENT_TYPES


def parse_exif_datetime(value: str) -> Optional[datetime]:
    """Parse EXIF datetime string."""
    formats = [
        "%Y:%m:%d %H:%M:%S",
        "%Y-%m-%d %H:%M:%S",
        "%Y/%m/%d %H:%M:%S",
    ]
    for fmt in formats:
        try:
            return datetime.strptime(value.strip().rstrip("\x00"), fmt)
        except ValueError:
            continue
    return None


def read_image_info(path: Path) -> dict[str, Any]:
    """Read dimensions, capture date and camera from an image.

    Returns an empty dict when the file cannot be decoded.
    """
    try:
        with Image.open(path) as img:
            info: dict[str, Any] = {"width": img.size[0], "height": img.size[1]}
            exif = img.getexif()
    except (OSError, UnidentifiedImageError, ValueError) as e:
        logger.debug("Could not read image info from %s: %s", path, e)
        return {}

    sub = exif.get_ifd(EXIF_IFD)
    for raw in (sub.get(TAG_DATETIME_ORIGINAL), sub.get(TAG_DATETIME_DIGITIZED), exif.get(TAG_DATETIME)):
        if isinstance(raw, str):
            parsed = parse_exif_datetime(raw)
            if parsed:
                info["date_taken"] = parsed
                break

    camera = {}
    if isinstance(exif.get(TAG_MAKE), str):
        camera["make"] = exif[TAG_MAKE].strip()
    if isinstance(exif.get(TAG_MODEL), str):
        camera["model"] = exif[TAG_MODEL].strip()
    if camera:
        info["camera"] = camera
    return info


class LocalFolderSource:
    """Enumerates a directory tree as a media library.

    Implements the AssetSource protocol.
    """

    def __init__(self, root: Path, recursive: bool = True):
        """Initialize the source.

        Args:
            root: Library root directory.
            recursive: Whether to descend into subdirectories.
        """
        self._root = root
        self._recursive = recursive

    def fetch(self, start: datetime, end: datetime) -> Iterator[Asset]:
        """Yield assets captured within [start, end], oldest first.

        Raises:
            LibraryAccessError: If the root cannot be read.
        """
        if not self._root.is_dir():
            raise LibraryAccessError(f"Library not found or not a directory: {self._root}")

        try:
            groups = self._group_files()
        except OSError as e:
            raise LibraryAccessError(f"Cannot read library {self._root}: {e}") from e

        assets = []
        for files in groups.values():
            asset = self._build_asset(files)
            if asset is None or asset.capture_date is None:
                continue
            captured = asset.capture_date.astimezone()
            if start <= captured <= end:
                assets.append(asset)

        assets.sort(key=lambda a: (a.capture_date.astimezone(), a.identifier))
        yield from assets

    def _group_files(self) -> dict[tuple[Path, str], list[Path]]:
        pattern = "**/*" if self._recursive else "*"
        groups: dict[tuple[Path, str], list[Path]] = defaultdict(list)
        for path in sorted(self._root.glob(pattern)):
            if path.is_file() and is_supported(path):
                groups[(path.parent, path.stem.lower())].append(path)
        return groups

    def _build_asset(self, files: list[Path]) -> Optional[Asset]:
        images = sorted(
            (f for f in files if f.suffix.lower() in IMAGE_TYPES),
            key=lambda f: (f.suffix.lower() in RAW_EXTENSIONS, f.name),
        )
        videos = sorted(f for f in files if f.suffix.lower() in VIDEO_TYPES)
        adjustments = sorted(f for f in files if f.suffix.lower() in ADJUSTMENT_TYPES)

        if not images and not videos:
            return None

        resources: list[Resource] = []
        subtypes = 0
        if images:
            media_kind = MediaKind.IMAGE
            primary = images[0]
            resources.append(self._resource(ResourceKind.PHOTO, primary, IMAGE_TYPES))
            for alt in images[1:]:
                resources.append(self._resource(ResourceKind.ALTERNATE_PHOTO, alt, IMAGE_TYPES))
            for video in videos:
                resources.append(self._resource(ResourceKind.PAIRED_VIDEO, video, VIDEO_TYPES))
            if videos:
                subtypes |= SUBTYPE_LIVE_PHOTO
        else:
            media_kind = MediaKind.VIDEO
            primary = videos[0]
            for video in videos:
                resources.append(self._resource(ResourceKind.VIDEO, video, VIDEO_TYPES))

        for adj in adjustments:
            resources.append(self._resource(ResourceKind.ADJUSTMENT_DATA, adj, ADJUSTMENT_TYPES))

        info = read_image_info(primary) if images else {}
        capture_date = info.get("date_taken")
        if capture_date is None:
            try:
                capture_date = datetime.fromtimestamp(primary.stat().st_mtime)
            except OSError as e:
                logger.warning("Skipping %s: %s", primary, e)
                return None

        identifier = primary.relative_to(self._root).with_suffix("").as_posix()
        extra: dict[str, Any] = {"sourcePath": str(primary)}
        if "camera" in info:
            extra["camera"] = info["camera"]

        return Asset(
            identifier=identifier,
            capture_date=capture_date,
            media_kind=media_kind,
            media_subtypes=subtypes,
            pixel_width=info.get("width", 0),
            pixel_height=info.get("height", 0),
            duration=0.0,
            resources=tuple(resources),
            extra=extra,
        )

    @staticmethod
    def _resource(kind: ResourceKind, path: Path, types: dict[str, str]) -> Resource:
        return Resource(
            kind=kind,
            original_filename=path.name,
            content_type=types[path.suffix.lower()],
            source=path,
        )


class LocalFileWriter:
    """Copies a resource's source file to its destination.

    Implements the ResourceWriter protocol. A partially written destination
    is removed before the error is raised.
    """

    def write(
        self,
        resource: Resource,
        destination: Path,
        network_access_allowed: bool = True,
    ) -> None:
        if resource.source is None:
            raise ResourceWriteError("Resource has no source file", code=3)

        try:
            shutil.copy2(resource.source, destination)
        except FileNotFoundError as e:
            destination.unlink(missing_ok=True)
            raise ResourceWriteError(
                f"Source file not found: {resource.source}",
                code=4,
                recovery="Check that the library is fully available locally",
            ) from e
        except OSError as e:
            destination.unlink(missing_ok=True)
            raise ResourceWriteError(
                f"Could not copy {resource.source.name}",
                code=5,
                reason=e.strerror,
            ) from e
