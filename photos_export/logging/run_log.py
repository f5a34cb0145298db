"""Run log sinks: the debug line stream and the durable error ledger.

Both sinks serialize writers with a lock so that concurrent callers never
interleave the content of a single line (or, for the ledger, a block).
"""
from __future__ import annotations

import logging
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO


logger = logging.getLogger(__name__)


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2025-01-02T03:04:05.123Z``."""
    moment = moment or datetime.now(timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class RunLog:
    """Append-only debug stream, one timestamped line per event.

    Writes either to a file (opened in append mode, created if missing) or
    to an existing text stream such as stderr.
    """

    def __init__(self, stream: TextIO, owns_stream: bool = False):
        self._stream = stream
        self._owns_stream = owns_stream
        self._lock = threading.Lock()

    @classmethod
    def to_file(cls, path: Path) -> "RunLog":
        path.parent.mkdir(parents=True, exist_ok=True)
        return cls(path.open("a", encoding="utf-8"), owns_stream=True)

    @classmethod
    def to_stderr(cls) -> "RunLog":
        return cls(sys.stderr)

    @property
    def enabled(self) -> bool:
        return True

    def log(self, message: str) -> None:
        """Write one line. Failures are reported but never raised."""
        line = f"{iso_timestamp()} {message}\n"
        with self._lock:
            try:
                self._stream.write(line)
                self._stream.flush()
            except (OSError, ValueError) as e:
                logger.debug("Debug log write failed: %s", e)

    def close(self) -> None:
        with self._lock:
            if self._owns_stream and not self._stream.closed:
                self._stream.close()

    def __enter__(self) -> "RunLog":
        return self

    def __exit__(self, *args) -> None:
        self.close()


class NullRunLog(RunLog):
    """Debug stream that discards everything."""

    def __init__(self):
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return False

    def log(self, message: str) -> None:
        pass

    def close(self) -> None:
        pass


class ErrorLedger:
    """Durable, append-only error file under the export root.

    The file is created on the first append, so a run without failures
    leaves no ledger behind. Only failures and removal errors belong here.
    """

    def __init__(self, path: Path):
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def append_line(self, line: str) -> None:
        with self._lock:
            self._write([line])

    def append_block(self, header: str, lines: list[str]) -> None:
        """Append a header followed by indented lines as one unit."""
        with self._lock:
            self._write([header, *(f"  {line}" for line in lines)])

    def read_lines(self) -> list[str]:
        if not self._path.exists():
            return []
        return self._path.read_text(encoding="utf-8").splitlines()

    def _write(self, lines: list[str]) -> None:
        payload = "".join(f"{line}\n" for line in lines)
        try:
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(payload)
        except OSError as e:
            logger.error("Could not append to error ledger %s: %s", self._path, e)
