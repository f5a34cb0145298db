"""File operations service."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from ..core.errors import DirectoryCreateError, DirectoryError
from ..logging.run_log import NullRunLog, RunLog


class FileManager:
    """Filesystem primitives and the export tree layout.

    Implements the FileSystem protocol.
    """

    def __init__(self, output_root: Path, run_log: Optional[RunLog] = None):
        """Initialize file manager.

        Args:
            output_root: Root directory of the export tree.
            run_log: Debug stream for directory events.
        """
        self._output_root = output_root
        self._run_log = run_log or NullRunLog()

    @property
    def output_root(self) -> Path:
        return self._output_root

    def exists(self, path: Path) -> bool:
        return path.exists()

    def remove(self, path: Path) -> None:
        """Delete a file. Raises OSError on failure."""
        path.unlink()

    def size(self, path: Path) -> Optional[int]:
        try:
            return path.stat().st_size
        except OSError:
            return None

    def file_info(self, path: Path) -> tuple[Optional[int], Optional[datetime]]:
        """Return (size in bytes, modification time), or Nones if unreadable."""
        try:
            st = path.stat()
        except OSError:
            return None, None
        return st.st_size, datetime.fromtimestamp(st.st_mtime).astimezone()

    def ensure_directory(self, path: Path) -> None:
        """Ensure directory exists.

        Raises:
            DirectoryError: If ``path`` exists but is not a directory.
            DirectoryCreateError: If the directory cannot be created.
        """
        if path.exists():
            if path.is_dir():
                self._run_log.log(f"fs.dir exists path={path}")
                return
            raise DirectoryError(str(path))

        self._run_log.log(f"fs.dir create path={path}")
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateError(str(path), e.strerror or str(e)) from e

    def build_output_directory(self, capture_date: datetime) -> Path:
        """Folder for an asset: ``<root>/<YYYY>/<MM>``."""
        if capture_date.tzinfo is not None:
            capture_date = capture_date.astimezone()
        return self._output_root / f"{capture_date.year:04d}" / f"{capture_date.month:02d}"
