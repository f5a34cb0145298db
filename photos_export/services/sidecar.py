"""JSON metadata sidecar written next to an asset's exported files."""
from __future__ import annotations

import base64
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from ..core.models import Asset, ExportedResource
from ..core.protocols import ExtensionLookup
from ..engines.content_types import DEFAULT_LOOKUP
from ..logging.run_log import NullRunLog, RunLog, iso_timestamp
from .file_ops import FileManager
from .naming import NameRegistry, sidecar_filename


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, datetime):
        return iso_timestamp(value)
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_json_safe(v) for v in value]
    return str(value)


class SidecarWriter:
    """Builds and saves the per-asset metadata document."""

    def __init__(
        self,
        file_manager: FileManager,
        run_log: Optional[RunLog] = None,
        lookup: ExtensionLookup = DEFAULT_LOOKUP,
    ):
        self._files = file_manager
        self._run_log = run_log or NullRunLog()
        self._lookup = lookup

    def build_metadata(
        self,
        asset: Asset,
        exported: list[ExportedResource],
    ) -> dict[str, Any]:
        metadata: dict[str, Any] = {str(k): _json_safe(v) for k, v in asset.extra.items()}
        metadata.update({
            "localIdentifier": asset.identifier,
            "mediaType": int(asset.media_kind),
            "mediaSubtypes": asset.media_subtypes,
            "pixelWidth": asset.pixel_width,
            "pixelHeight": asset.pixel_height,
            "duration": float(asset.duration),
        })
        if asset.capture_date is not None:
            metadata["creationDate"] = iso_timestamp(asset.capture_date)

        metadata["resources"] = [
            {
                "type": int(r.kind),
                "originalFilename": r.original_filename,
                "uniformTypeIdentifier": r.content_type,
            }
            for r in asset.resources
        ]

        files = []
        for entry in exported:
            item: dict[str, Any] = {
                "type": int(entry.resource.kind),
                "uniformTypeIdentifier": entry.resource.content_type,
                "originalFilename": entry.resource.original_filename,
                "exportedFilename": entry.filename,
                "path": entry.filename,
            }
            size, modified = self._files.file_info(entry.path)
            if size is not None:
                item["fileSize"] = size
            if modified is not None:
                item["fileModificationDate"] = iso_timestamp(modified)
            files.append(item)
        metadata["exportedFiles"] = files
        return metadata

    def write(
        self,
        asset: Asset,
        capture_date: datetime,
        folder: Path,
        registry: NameRegistry,
        exported: list[ExportedResource],
    ) -> Path:
        """Write the sidecar and return its path.

        The name is claimed from the same registry as the asset's resources,
        so it never collides with them.
        """
        path = folder / sidecar_filename(asset, capture_date, registry, self._lookup)
        document = self.build_metadata(asset, exported)
        path.write_text(
            json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False),
            encoding="utf-8",
        )

        size = self._files.size(path)
        saved = f"metadata.json.saved path={path}"
        self._run_log.log(f"{saved} bytes={size}" if size is not None else saved)
        return path
