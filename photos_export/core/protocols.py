"""Protocol definitions (interfaces) for dependency injection."""
from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, Protocol

from .models import Asset, Resource


class AssetSource(Protocol):
    """Enumerates assets from a media library.

    Implementations:
    - LocalFolderSource: treats a directory tree as a library
    """

    @abstractmethod
    def fetch(self, start: datetime, end: datetime) -> Iterator[Asset]:
        """Yield assets captured within [start, end]."""
        ...


class ResourceWriter(Protocol):
    """Writes the bytes of a resource to a destination path.

    The call blocks until the content is on disk. Failures are raised,
    preferably as ResourceWriteError.
    """

    @abstractmethod
    def write(
        self,
        resource: Resource,
        destination: Path,
        network_access_allowed: bool = True,
    ) -> None:
        ...


class ExtensionLookup(Protocol):
    """Maps a content-type identifier to a preferred filename extension."""

    @abstractmethod
    def preferred_extension(self, content_type: str) -> Optional[str]:
        """Extension without a leading dot, or None when unknown."""
        ...


class FileSystem(Protocol):
    """Fallible synchronous filesystem primitives."""

    @abstractmethod
    def exists(self, path: Path) -> bool:
        ...

    @abstractmethod
    def remove(self, path: Path) -> None:
        """Delete a file. Raises OSError on failure."""
        ...

    @abstractmethod
    def size(self, path: Path) -> Optional[int]:
        """Size in bytes, or None if it cannot be read."""
        ...


class Reporter(Protocol):
    """User-facing console output."""

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def debug(self, message: str) -> None: ...
