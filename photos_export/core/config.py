"""Export configuration models."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


ERROR_LOG_NAME = "export_errors.log"
MIN_YEAR = 1970
MAX_YEAR = 9999


def default_export_directory() -> Path:
    return Path.home() / "Pictures" / "Exports"


class YearRange(BaseModel):
    """Inclusive range of capture years to export."""
    start_year: int = Field(..., description="First year (inclusive)")
    end_year: int = Field(..., description="Last year (inclusive)")

    @field_validator("start_year", "end_year")
    @classmethod
    def check_year(cls, value: int) -> int:
        if not MIN_YEAR <= value <= MAX_YEAR:
            raise ValueError(
                f"Invalid year '{value}'. Expected a year between {MIN_YEAR} and {MAX_YEAR}."
            )
        return value

    @model_validator(mode="after")
    def check_order(self) -> "YearRange":
        if self.start_year > self.end_year:
            raise ValueError(
                f"Start year {self.start_year} is after end year {self.end_year}"
            )
        return self

    @classmethod
    def single(cls, year: int) -> "YearRange":
        return cls(start_year=year, end_year=year)

    def bounds(self) -> tuple[datetime, datetime]:
        """UTC datetimes spanning Jan 1 00:00:00 to Dec 31 23:59:59."""
        # Bounds are fixed in UTC.
        start = datetime(self.start_year, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        end = datetime(self.end_year, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
        return start, end


class ExportSettings(BaseModel):
    """Configuration for an export run.

    All options can be supplied via CLI flags.
    """
    library: Optional[Path] = Field(
        default=None,
        description="Root of the media library to export from"
    )
    export_directory: Path = Field(
        default_factory=default_export_directory,
        description="Root of the date-partitioned export tree"
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Append the debug stream to this file"
    )
    debug: bool = Field(default=False, description="Write the debug stream")
    incremental: bool = Field(
        default=False,
        description="Skip resources whose destination file already exists"
    )
    metadata: bool = Field(default=False, description="Write a JSON sidecar per asset")
    year_range: Optional[YearRange] = Field(
        default=None,
        description="Capture years to export (default: current year)"
    )
    workers: int = Field(default=1, ge=1, description="Assets exported in parallel")
    quiet: bool = Field(default=False, description="Suppress non-essential output")

    @field_validator("library", "log_file")
    @classmethod
    def expand_optional_path(cls, value: Optional[Path]) -> Optional[Path]:
        if value is None:
            return None
        return value.expanduser().resolve()

    @field_validator("export_directory")
    @classmethod
    def expand_export_directory(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    @property
    def error_log_path(self) -> Path:
        return self.export_directory / ERROR_LOG_NAME

    def resolve_range(self, now: Optional[datetime] = None) -> tuple[datetime, datetime]:
        """Capture-date bounds for this run."""
        if self.year_range is not None:
            return self.year_range.bounds()
        year = (now or datetime.now()).year
        return YearRange.single(year).bounds()
