"""Exception hierarchy for the export engine."""
from __future__ import annotations

from typing import Optional

from .models import ResourceFailure


class ExportError(Exception):
    """Base class for all export errors.

    ``domain`` and ``code`` identify the error in ledger detail strings.
    """
    domain = "PhotosExport"
    code = 0


class ResourceWriteError(ExportError):
    """Structured failure reported by a resource writer.

    Mirrors the shape of library errors: a domain, a numeric code and a
    description, plus optional failure reason and recovery suggestion.
    The underlying error, if any, is carried as ``__cause__``.
    """

    def __init__(
        self,
        description: str,
        *,
        domain: str = "PhotosExport",
        code: int = 0,
        reason: Optional[str] = None,
        recovery: Optional[str] = None,
    ):
        super().__init__(description)
        self.description = description
        self.domain = domain
        self.code = code
        self.reason = reason
        self.recovery = recovery


class DirectoryError(ExportError):
    """A path that must be a directory exists as something else."""
    code = 10

    def __init__(self, path: str):
        super().__init__(f"Path exists but is not a directory: {path}")
        self.path = path


class DirectoryCreateError(ExportError):
    """A directory could not be created. The OSError is the ``__cause__``."""
    code = 11

    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not create directory {path}: {reason}")
        self.path = path


class LibraryAccessError(ExportError):
    """The media library refused access. Fatal to the whole run."""
    code = 1


class AssetExportError(ExportError):
    """One or more resources of an asset failed to export."""
    code = 20

    def __init__(
        self,
        *,
        asset_identifier: str,
        capture_timestamp: str,
        media_kind: int,
        media_subtypes: int,
        pixel_size: str,
        duration: float,
        failures: tuple[ResourceFailure, ...],
        total: int,
        summary: str,
    ):
        self.asset_identifier = asset_identifier
        self.capture_timestamp = capture_timestamp
        self.media_kind = media_kind
        self.media_subtypes = media_subtypes
        self.pixel_size = pixel_size
        self.duration = duration
        self.failures = failures
        self.total = total
        failed = "; ".join(f.summary_line() for f in failures)
        super().__init__(
            f"One or more resources failed to export ({self.tally}) {summary}. "
            f"Failed: {failed}"
        )

    @property
    def tally(self) -> str:
        """Machine-parseable ``failed/total`` count."""
        return f"{len(self.failures)}/{self.total}"

    @property
    def failure_lines(self) -> list[str]:
        return [f.summary_line() for f in self.failures]


def _error_identity(exc: BaseException) -> tuple[str, int, str]:
    """Return (domain, code, description) for any exception."""
    if isinstance(exc, ExportError):
        return exc.domain, exc.code, str(exc)
    if isinstance(exc, OSError):
        return "OSError", exc.errno or 0, exc.strerror or str(exc)
    return type(exc).__name__, 0, str(exc)


def error_details(exc: BaseException) -> str:
    """Format an exception as a single ``key=value`` detail string."""
    domain, code, desc = _error_identity(exc)
    parts = [f"domain={domain}", f"code={code}"]
    if desc:
        parts.append(f"desc={desc}")

    underlying = exc.__cause__
    if underlying is not None:
        under_domain, under_code, under_desc = _error_identity(underlying)
        parts.append(f"underlying={under_domain}({under_code})")
        if under_desc:
            parts.append(f"underDesc={under_desc}")

    if isinstance(exc, ResourceWriteError):
        if exc.reason:
            parts.append(f"reason={exc.reason}")
        if exc.recovery:
            parts.append(f"recovery={exc.recovery}")

    return " ".join(parts)
