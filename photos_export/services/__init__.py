"""Service layer - naming, export pipeline and run orchestration."""
from .naming import (
    NameRegistry,
    assign_filename,
    capture_timestamp,
    filename_for_resource,
    resource_seed,
    sidecar_filename,
)
from .file_ops import FileManager
from .failures import FailureAggregator
from .exporter import ResourceExporter
from .sidecar import SidecarWriter
from .runner import ExportRunner, AssetOutcome

__all__ = [
    # Naming
    "NameRegistry",
    "assign_filename",
    "capture_timestamp",
    "filename_for_resource",
    "resource_seed",
    "sidecar_filename",
    # Files
    "FileManager",
    # Export
    "FailureAggregator",
    "ResourceExporter",
    "SidecarWriter",
    "ExportRunner",
    "AssetOutcome",
]
