"""Resource export pipeline - writes every resource of one asset."""
from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from ..core.errors import error_details
from ..core.models import (
    Asset,
    ExportedResource,
    Resource,
    ResourceAction,
    ResourceFailure,
)
from ..core.protocols import ExtensionLookup, FileSystem, ResourceWriter
from ..engines.content_types import DEFAULT_LOOKUP
from ..logging.run_log import ErrorLedger, NullRunLog, RunLog, iso_timestamp
from .failures import FailureAggregator
from .naming import NameRegistry, capture_timestamp, filename_for_resource


logger = logging.getLogger(__name__)


class ResourceExporter:
    """Exports the resources of an asset into a destination folder.

    Resources are written one at a time in enumeration order. A failing
    resource never stops the loop; failures are aggregated and raised once
    per asset as AssetExportError.

    All dependencies are injected - no global state.
    """

    def __init__(
        self,
        writer: ResourceWriter,
        filesystem: FileSystem,
        ledger: ErrorLedger,
        run_log: Optional[RunLog] = None,
        lookup: ExtensionLookup = DEFAULT_LOOKUP,
        network_access_allowed: bool = True,
    ):
        """Initialize the exporter.

        Args:
            writer: Collaborator that writes resource bytes to disk.
            filesystem: Existence/removal/size primitives.
            ledger: Durable error ledger shared by the run.
            run_log: Debug stream.
            lookup: Content-type to extension resolver.
            network_access_allowed: Passed through to the writer.
        """
        self._writer = writer
        self._fs = filesystem
        self._ledger = ledger
        self._run_log = run_log or NullRunLog()
        self._lookup = lookup
        self._network_access_allowed = network_access_allowed
        self._removal_errors = 0
        self._counter_lock = threading.Lock()

    @property
    def removal_errors(self) -> int:
        """Resources skipped because a pre-existing file could not be removed."""
        return self._removal_errors

    def export_resources(
        self,
        asset: Asset,
        resources: Sequence[Resource],
        folder: Path,
        incremental: bool,
        registry: NameRegistry,
        capture_date: Optional[datetime] = None,
    ) -> list[ExportedResource]:
        """Export ``resources`` of ``asset`` into ``folder``.

        Args:
            asset: Asset the resources belong to.
            resources: Resources in collaborator order.
            folder: Existing destination directory.
            incremental: Keep existing destination files instead of overwriting.
            registry: Fresh name registry for this asset.
            capture_date: Capture time to name files by (default: the asset's).

        Returns:
            (resource, path) entries for every resource written or already present.

        Raises:
            AssetExportError: If one or more resources failed to write.
        """
        capture_date = capture_date or asset.capture_date
        if capture_date is None:
            raise ValueError(f"asset {asset.identifier} has no capture date")
        capture = capture_timestamp(capture_date)
        total = len(resources)

        self._run_log.log(f"asset.resources count={total} asset={asset.identifier}")

        exported: list[ExportedResource] = []
        aggregator = FailureAggregator(asset, capture, total)

        for idx, resource in enumerate(resources):
            label = resource.label
            filename = filename_for_resource(asset, resource, capture_date, registry, self._lookup)
            destination = folder / filename

            if self._fs.exists(destination):
                if incremental:
                    self._run_log.log(
                        f"asset.resource.skip existing asset={asset.identifier} "
                        f"type={label} dest={destination}"
                    )
                    exported.append(ExportedResource(resource, destination, ResourceAction.EXISTING))
                    continue

                if not self._remove_existing(asset, resource, capture, destination):
                    continue

            self._run_log.log(
                f"asset.resource.start asset={asset.identifier} index={idx + 1}/{total} "
                f"type={label} uti={resource.content_type} name={resource.original_filename} "
                f"dest={destination}"
            )

            try:
                self._writer.write(
                    resource,
                    destination,
                    network_access_allowed=self._network_access_allowed,
                )
            except Exception as e:
                failure = ResourceFailure(
                    kind=resource.kind,
                    content_type=resource.content_type,
                    original_filename=resource.original_filename,
                    destination_filename=filename,
                    detail=error_details(e),
                )
                aggregator.record(failure)
                line = self._ledger_line(asset, resource, capture, destination, failure.detail)
                logger.error(line)
                self._run_log.log(f"asset.resource.failed {line}")
                self._ledger.append_line(line)
                continue

            size = self._fs.size(destination)
            done = f"asset.resource.done asset={asset.identifier} type={label} path={destination}"
            self._run_log.log(f"{done} bytes={size}" if size is not None else done)
            exported.append(ExportedResource(resource, destination, ResourceAction.WRITTEN))

        aggregator.raise_if_failed(self._ledger)
        return exported

    def _remove_existing(
        self,
        asset: Asset,
        resource: Resource,
        capture: str,
        destination: Path,
    ) -> bool:
        """Delete a pre-existing destination file before overwriting it.

        A failed removal is logged and ledgered, and the resource is skipped.
        It is counted neither as a success nor as a failure of the asset.
        """
        self._run_log.log(f"asset.resource.overwrite remove dest={destination}")
        try:
            self._fs.remove(destination)
        except OSError as e:
            line = self._ledger_line(
                asset, resource, capture, destination,
                f"removeExistingFailed {error_details(e)}",
            )
            logger.error(line)
            self._run_log.log(f"asset.resource.overwrite failed {line}")
            self._ledger.append_line(line)
            with self._counter_lock:
                self._removal_errors += 1
            return False
        return True

    @staticmethod
    def _ledger_line(
        asset: Asset,
        resource: Resource,
        capture: str,
        destination: Path,
        detail: str,
    ) -> str:
        return (
            f"{iso_timestamp()} asset={asset.identifier} capture={capture} "
            f"resourceType={resource.label} uti={resource.content_type} "
            f"name={resource.original_filename} dest={destination} {detail}"
        )
