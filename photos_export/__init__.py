"""Media library export engine.

Exports every resource of every asset into a date-partitioned tree with
deterministic, collision-resistant filenames.
"""

__version__ = "1.0.0"

# Core exports
from .core.config import ExportSettings, YearRange
from .core.models import (
    Asset,
    Resource,
    MediaKind,
    ResourceKind,
    ResourceFailure,
    ExportedResource,
    ExportStats,
)
from .core.errors import (
    ExportError,
    ResourceWriteError,
    AssetExportError,
    LibraryAccessError,
)
from .core.protocols import AssetSource, ResourceWriter, ExtensionLookup, FileSystem

# Engine exports
from .engines.hash_engine import hash64, letter_from_hash
from .engines.content_types import ContentTypeLookup

# Service exports
from .services.naming import NameRegistry, assign_filename
from .services.exporter import ResourceExporter
from .services.runner import ExportRunner

# Source exports
from .sources.local import LocalFolderSource, LocalFileWriter

# Logging exports
from .logging.run_log import RunLog, ErrorLedger
from .logging.console import ConsoleReporter

__all__ = [
    # Core
    "ExportSettings",
    "YearRange",
    "Asset",
    "Resource",
    "MediaKind",
    "ResourceKind",
    "ResourceFailure",
    "ExportedResource",
    "ExportStats",
    "ExportError",
    "ResourceWriteError",
    "AssetExportError",
    "LibraryAccessError",
    "AssetSource",
    "ResourceWriter",
    "ExtensionLookup",
    "FileSystem",
    # Engines
    "hash64",
    "letter_from_hash",
    "ContentTypeLookup",
    # Services
    "NameRegistry",
    "assign_filename",
    "ResourceExporter",
    "ExportRunner",
    # Sources
    "LocalFolderSource",
    "LocalFileWriter",
    # Logging
    "RunLog",
    "ErrorLedger",
    "ConsoleReporter",
]
