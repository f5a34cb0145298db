"""Library collaborators that feed the export engine."""
from .local import LocalFolderSource, LocalFileWriter

__all__ = ["LocalFolderSource", "LocalFileWriter"]
