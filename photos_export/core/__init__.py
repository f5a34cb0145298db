"""Core domain models, errors, configuration and protocols."""
from .protocols import (
    AssetSource,
    ResourceWriter,
    ExtensionLookup,
    FileSystem,
    Reporter,
)
from .models import (
    MediaKind,
    ResourceKind,
    Resource,
    Asset,
    ResourceFailure,
    ResourceAction,
    ExportedResource,
    ExportStats,
    resource_kind_label,
)
from .errors import (
    ExportError,
    ResourceWriteError,
    AssetExportError,
    DirectoryError,
    DirectoryCreateError,
    LibraryAccessError,
    error_details,
)
from .config import ExportSettings, YearRange, ERROR_LOG_NAME

__all__ = [
    # Protocols
    "AssetSource",
    "ResourceWriter",
    "ExtensionLookup",
    "FileSystem",
    "Reporter",
    # Models
    "MediaKind",
    "ResourceKind",
    "Resource",
    "Asset",
    "ResourceFailure",
    "ResourceAction",
    "ExportedResource",
    "ExportStats",
    "resource_kind_label",
    # Errors
    "ExportError",
    "ResourceWriteError",
    "AssetExportError",
    "DirectoryError",
    "DirectoryCreateError",
    "LibraryAccessError",
    "error_details",
    # Config
    "ExportSettings",
    "YearRange",
    "ERROR_LOG_NAME",
]
