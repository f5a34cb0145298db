"""Deterministic, collision-resistant export filenames.

Every exported file is named after the asset's capture time:

    <YYYYMMDDHHMMSS>[<letter>[<cycle>]].<ext>

The first resource of a timestamp takes the bare stamp. Later resources
that collide within the same asset get a single letter chosen by hashing
metadata that identifies the resource, so re-running an export over the
same library reproduces the same names. Once all 26 letters are taken
the seed is rehashed as ``seed#<cycle>`` and the cycle number follows
the letter (``<ts><letter><cycle>``). This departs deliberately from the
older single-letter scheme: the first cycle already visits every letter,
so a bare letter from a later cycle could never be free and the search
would not terminate. Names from the first cycle are unchanged.
"""
from __future__ import annotations

import os
import threading
from datetime import datetime
from typing import Iterable, Iterator, Optional

from ..core.models import Asset, Resource
from ..core.protocols import ExtensionLookup
from ..engines.content_types import DEFAULT_LOOKUP
from ..engines.hash_engine import ALPHABET_SIZE, hash64, letter_from_hash


SIDECAR_CONTENT_TYPE = "public.json"


class NameRegistry:
    """Filenames already claimed during the export of one asset.

    Not a directory listing: files already on disk are never consulted.
    Create one per asset and discard it afterwards.
    """

    def __init__(self, names: Optional[Iterable[str]] = None):
        self._names: set[str] = set(names or ())
        self._lock = threading.Lock()

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._names))

    def add(self, name: str) -> None:
        with self._lock:
            self._names.add(name)

    def claim(self, name: str) -> bool:
        """Insert ``name`` if free. Returns False if already claimed."""
        with self._lock:
            if name in self._names:
                return False
            self._names.add(name)
            return True


def capture_timestamp(moment: datetime) -> str:
    """Format a capture time as a 14-digit local-time stamp.

    Aware datetimes are converted to the local time zone; naive ones are
    taken as local already.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return (
        f"{moment.year:04d}{moment.month:02d}{moment.day:02d}"
        f"{moment.hour:02d}{moment.minute:02d}{moment.second:02d}"
    )


def resolve_extension(
    original_filename: str,
    content_type: str,
    lookup: ExtensionLookup = DEFAULT_LOOKUP,
) -> str:
    """Lower-cased extension from the original name, else from the content type."""
    original_ext = os.path.splitext(original_filename)[1].lstrip(".")
    if original_ext:
        return original_ext.lower()
    preferred = lookup.preferred_extension(content_type) if content_type else None
    return (preferred or "").lower()


def _with_extension(stem: str, ext: str) -> str:
    return f"{stem}.{ext}" if ext else stem


def assign_filename(
    capture_date: datetime,
    original_filename: str,
    fallback_seed: str,
    content_type: str,
    registry: NameRegistry,
    lookup: ExtensionLookup = DEFAULT_LOOKUP,
) -> str:
    """Pick a filename unique within ``registry`` and claim it.

    Args:
        capture_date: Asset capture time.
        original_filename: Resource's original name (may be empty).
        fallback_seed: Stable resource-identifying string.
        content_type: UTI or MIME type used when the name has no extension.
        registry: Names already taken for this asset; updated in place.
        lookup: Content-type to extension resolver.

    Returns:
        The claimed filename.
    """
    ts = capture_timestamp(capture_date)
    ext = resolve_extension(original_filename, content_type, lookup)

    base = _with_extension(ts, ext)
    if registry.claim(base):
        return base

    seed = fallback_seed if not original_filename else f"{original_filename}|{fallback_seed}"

    attempt = 0
    while True:
        cycle, offset = divmod(attempt, ALPHABET_SIZE)
        hash_input = seed if cycle == 0 else f"{seed}#{cycle}"
        letter = letter_from_hash(hash64(hash_input), offset)
        # Cycle 0 covers all 26 single letters; later cycles are tagged.
        suffix = letter if cycle == 0 else f"{letter}{cycle}"
        candidate = _with_extension(f"{ts}{suffix}", ext)
        if registry.claim(candidate):
            return candidate
        attempt += 1


def resource_seed(asset: Asset, resource: Resource) -> str:
    """Stable metadata string distinguishing resources of one asset."""
    return "|".join([
        f"asset={asset.identifier}",
        f"mediaType={int(asset.media_kind)}",
        f"subtypes={asset.media_subtypes}",
        f"px={asset.pixel_width}x{asset.pixel_height}",
        f"dur={float(asset.duration)}",
        f"resType={int(resource.kind)}",
        f"uti={resource.content_type}",
    ])


def filename_for_resource(
    asset: Asset,
    resource: Resource,
    capture_date: datetime,
    registry: NameRegistry,
    lookup: ExtensionLookup = DEFAULT_LOOKUP,
) -> str:
    return assign_filename(
        capture_date,
        resource.original_filename,
        resource_seed(asset, resource),
        resource.content_type,
        registry,
        lookup,
    )


def sidecar_filename(
    asset: Asset,
    capture_date: datetime,
    registry: NameRegistry,
    lookup: ExtensionLookup = DEFAULT_LOOKUP,
) -> str:
    """Name for the asset's JSON sidecar.

    The original name is left empty so the sidecar never inherits a media
    extension such as ``.heic``.
    """
    return assign_filename(
        capture_date,
        "",
        f"asset={asset.identifier}|metadata",
        SIDECAR_CONTENT_TYPE,
        registry,
        lookup,
    )
