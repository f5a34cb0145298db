"""Per-asset failure aggregation."""
from __future__ import annotations

from ..core.errors import AssetExportError
from ..core.models import Asset, ResourceFailure
from ..logging.run_log import ErrorLedger, iso_timestamp


class FailureAggregator:
    """Collects resource failures for one asset.

    Failures keep detection order. When at least one was recorded,
    ``raise_if_failed`` writes an ``asset.failed`` block to the ledger and
    raises a single AssetExportError carrying all of them.
    """

    def __init__(self, asset: Asset, capture: str, total: int):
        """Initialize the aggregator.

        Args:
            asset: Asset being exported.
            capture: Its 14-digit capture stamp.
            total: Number of resources the asset has.
        """
        self._asset = asset
        self._capture = capture
        self._total = total
        self._failures: list[ResourceFailure] = []

    @property
    def failures(self) -> tuple[ResourceFailure, ...]:
        return tuple(self._failures)

    @property
    def has_failures(self) -> bool:
        return bool(self._failures)

    @property
    def tally(self) -> str:
        return f"{len(self._failures)}/{self._total}"

    def record(self, failure: ResourceFailure) -> None:
        self._failures.append(failure)

    def build_error(self) -> AssetExportError:
        asset = self._asset
        return AssetExportError(
            asset_identifier=asset.identifier,
            capture_timestamp=self._capture,
            media_kind=int(asset.media_kind),
            media_subtypes=asset.media_subtypes,
            pixel_size=asset.pixel_size,
            duration=float(asset.duration),
            failures=self.failures,
            total=self._total,
            summary=asset.summary_fields(self._capture),
        )

    def raise_if_failed(self, ledger: ErrorLedger) -> None:
        """Raise AssetExportError if any failure was recorded."""
        if not self._failures:
            return

        ledger.append_block(
            f"{iso_timestamp()} asset.failed {self._asset.summary_fields(self._capture)} "
            f"failures={self.tally}",
            [f.summary_line() for f in self._failures],
        )
        raise self.build_error()
