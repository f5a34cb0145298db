"""Export driver - walks the library and exports asset by asset."""
from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from ..core.config import ExportSettings
from ..core.errors import AssetExportError, error_details
from ..core.models import Asset, ExportedResource, ExportStats
from ..core.protocols import AssetSource, ExtensionLookup, Reporter, ResourceWriter
from ..engines.content_types import DEFAULT_LOOKUP
from ..logging.console import QuietReporter
from ..logging.run_log import ErrorLedger, NullRunLog, RunLog, iso_timestamp
from .exporter import ResourceExporter
from .file_ops import FileManager
from .naming import NameRegistry
from .sidecar import SidecarWriter


logger = logging.getLogger(__name__)


@dataclass
class AssetOutcome:
    """Result of exporting one asset."""
    asset: Asset
    index: int
    exported: list[ExportedResource] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def failed_resources(self) -> int:
        if isinstance(self.error, AssetExportError):
            return len(self.error.failures)
        return 0


class ExportRunner:
    """Exports every asset in the configured range.

    Each asset gets its own folder lookup and a fresh NameRegistry. One
    asset's failure is logged and counted; it never stops the run. Only
    errors raised while enumerating the library are fatal.

    With ``workers > 1`` assets are exported in parallel; resources of one
    asset are still written sequentially.
    """

    def __init__(
        self,
        settings: ExportSettings,
        source: AssetSource,
        writer: ResourceWriter,
        reporter: Optional[Reporter] = None,
        run_log: Optional[RunLog] = None,
        lookup: ExtensionLookup = DEFAULT_LOOKUP,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the runner.

        Args:
            settings: Run configuration.
            source: Library to enumerate.
            writer: Resource content writer.
            reporter: Console output.
            run_log: Debug stream.
            lookup: Content-type to extension resolver.
            clock: Time source for assets without a capture date.
        """
        self._settings = settings
        self._source = source
        self._reporter = reporter or QuietReporter()
        self._run_log = run_log or NullRunLog()
        self._clock = clock

        self._files = FileManager(settings.export_directory, self._run_log)
        self._ledger = ErrorLedger(settings.error_log_path)
        self._exporter = ResourceExporter(
            writer=writer,
            filesystem=self._files,
            ledger=self._ledger,
            run_log=self._run_log,
            lookup=lookup,
        )
        self._sidecars = SidecarWriter(self._files, self._run_log, lookup)

    @property
    def ledger(self) -> ErrorLedger:
        return self._ledger

    def run(self) -> ExportStats:
        """Run the export.

        Returns:
            Statistics about what was exported.

        Raises:
            ExportError: If the export root is unusable or the library
                cannot be enumerated.
        """
        started = time.monotonic()
        stats = ExportStats()
        export_root = self._settings.export_directory

        self._files.ensure_directory(export_root)
        self._run_log.log(f"run.start cwd={os.getcwd()} exportBase={export_root}")

        start, end = self._settings.resolve_range(self._clock())
        self._run_log.log(f"fetch.range start={iso_timestamp(start)} end={iso_timestamp(end)}")

        assets = list(self._source.fetch(start, end))
        total = len(assets)
        stats.total_assets = total
        self._run_log.log(f"fetch.done total={total}")

        if total == 0:
            self._reporter.info(f"No assets found between {start.year} and {end.year}.")
            return stats

        self._run_log.log(f"iterate.begin total={total}")
        for outcome in self._export_all(assets):
            if outcome.is_success:
                stats.record_exported(outcome.exported)
                if self._settings.metadata:
                    stats.sidecars_written += 1
            else:
                stats.record_failed(outcome.failed_resources)

        stats.removal_errors = self._exporter.removal_errors
        stats.elapsed_seconds = time.monotonic() - started
        self._run_log.log(f"run.done exported={stats.exported_assets} total={total}")
        return stats

    def _export_all(self, assets: list[Asset]):
        total = len(assets)
        workers = self._settings.workers

        if workers <= 1:
            for idx, asset in enumerate(assets, start=1):
                yield self._process(asset, idx, total)
            return

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._process, asset, idx, total)
                for idx, asset in enumerate(assets, start=1)
            ]
            for future in as_completed(futures):
                yield future.result()

    def _process(self, asset: Asset, index: int, total: int) -> AssetOutcome:
        """Export one asset, converting any export error into an outcome."""
        media_label = "video" if asset.is_video else "photo"
        label = f"{index}/{total} {media_label}"
        self._run_log.log(
            f"asset.start index={index} total={total} id={asset.identifier} "
            f"mediaType={int(asset.media_kind)}"
        )
        try:
            exported = self.export_asset(asset)
        except Exception as e:
            self._record_asset_error(asset, index, total, e)
            self._reporter.error(f"{label} {asset.identifier}: {e}")
            return AssetOutcome(asset=asset, index=index, error=e)

        self._reporter.debug(f"{label} {asset.identifier} ✓")
        return AssetOutcome(asset=asset, index=index, exported=exported)

    def export_asset(self, asset: Asset) -> list[ExportedResource]:
        """Export all resources of ``asset`` and, if enabled, its sidecar.

        Raises:
            AssetExportError: If any resource failed.
            ExportError: If the destination folder is unusable.
        """
        capture_date = asset.capture_date
        if capture_date is None:
            capture_date = self._clock()
            message = f"asset={asset.identifier} missing creationDate; using current time"
            logger.warning(message)
            self._reporter.warning(message)

        folder = self._files.build_output_directory(capture_date)
        self._files.ensure_directory(folder)
        self._run_log.log(f"asset.folder asset={asset.identifier} folder={folder}")

        registry = NameRegistry()
        exported = self._exporter.export_resources(
            asset,
            asset.resources,
            folder,
            self._settings.incremental,
            registry,
            capture_date=capture_date,
        )

        if self._settings.metadata:
            self._sidecars.write(asset, capture_date, folder, registry, exported)

        return exported

    def _record_asset_error(self, asset: Asset, index: int, total: int, error: Exception) -> None:
        position = f"index={index}/{total}"
        line = f"{iso_timestamp()} asset={asset.identifier} {position} {error_details(error)}"

        if isinstance(error, AssetExportError):
            line += f" capture={error.capture_timestamp} px={error.pixel_size}"
            if error.failures:
                line += f" failedCount={len(error.failures)}"
                self._ledger.append_block(
                    f"{iso_timestamp()} asset.failed.details asset={asset.identifier} {position}",
                    error.failure_lines,
                )

        self._ledger.append_line(line)
        logger.error("asset.error %s", line)
        self._run_log.log(f"asset.error {line}")
