"""Content-type to filename extension lookup.

Resources carry either a uniform type identifier (``public.jpeg``) or a
MIME type (``image/jpeg``). Both resolve to a preferred extension without
the leading dot.
"""
from __future__ import annotations

import mimetypes
from typing import Optional


UTI_EXTENSIONS = {
    "public.jpeg": "jpeg",
    "public.png": "png",
    "public.heic": "heic",
    "public.heif": "heif",
    "public.tiff": "tiff",
    "com.compuserve.gif": "gif",
    "org.webmproject.webp": "webp",
    "com.microsoft.bmp": "bmp",
    "com.adobe.raw-image": "dng",
    "com.canon.cr2-raw-image": "cr2",
    "com.apple.quicktime-movie": "mov",
    "public.mpeg-4": "mp4",
    "com.apple.m4v-video": "m4v",
    "public.avi": "avi",
    "public.mp3": "mp3",
    "com.apple.m4a-audio": "m4a",
    "com.microsoft.waveform-audio": "wav",
    "public.json": "json",
    "public.xml": "xml",
    "com.apple.property-list": "plist",
    "com.apple.photos.apple-adjustment-envelope": "plist",
}

MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/heic": "heic",
    "image/heif": "heif",
    "image/tiff": "tiff",
    "video/mp4": "mp4",
    "video/quicktime": "mov",
    "video/webm": "webm",
    "audio/mpeg": "mp3",
    "audio/mp4": "m4a",
    "application/json": "json",
}


class ContentTypeLookup:
    """Resolves UTIs and MIME types to preferred extensions."""

    def __init__(self, extra: Optional[dict[str, str]] = None):
        self._table = {**UTI_EXTENSIONS, **MIME_EXTENSIONS}
        if extra:
            self._table.update({k.lower(): v.lstrip(".") for k, v in extra.items()})

    def preferred_extension(self, content_type: str) -> Optional[str]:
        """Extension for ``content_type``, or None when unknown."""
        if not content_type:
            return None
        key = content_type.lower().split(";")[0].strip()
        ext = self._table.get(key)
        if ext:
            return ext
        if "/" in key:
            guessed = mimetypes.guess_extension(key)
            if guessed:
                return guessed.lstrip(".")
        return None


DEFAULT_LOOKUP = ContentTypeLookup()
