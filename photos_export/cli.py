"""Command line entry point."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .core.config import ExportSettings, YearRange
from .core.errors import ExportError, LibraryAccessError
from .logging.console import ConsoleReporter, setup_logging
from .logging.run_log import NullRunLog, RunLog
from .services.file_ops import FileManager
from .services.runner import ExportRunner
from .sources.local import LocalFileWriter, LocalFolderSource


class SettingsError(ValueError):
    """Invalid combination of command line values."""


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photos-export",
        description="Export a media library into a YYYY/MM folder tree.",
    )
    parser.add_argument(
        "--library",
        type=Path,
        required=True,
        help="Library root directory to export from",
    )
    parser.add_argument(
        "--export-directory",
        type=Path,
        default=None,
        help="Export root (default: ~/Pictures/Exports)",
    )
    parser.add_argument(
        "--incremental",
        action="store_true",
        help="Keep files that already exist instead of overwriting them",
    )
    parser.add_argument(
        "--metadata",
        action="store_true",
        help="Write a JSON metadata sidecar for every asset",
    )
    parser.add_argument(
        "--year",
        type=int,
        default=None,
        help="Export a single capture year (default: current year)",
    )
    parser.add_argument(
        "--start-year",
        type=int,
        default=None,
        help="First capture year to export",
    )
    parser.add_argument(
        "--end-year",
        type=int,
        default=None,
        help="Last capture year to export",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Append the debug log to this file",
    )
    parser.add_argument(
        "-j", "--workers",
        type=int,
        default=1,
        help="Number of assets exported in parallel (default: 1)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write the debug log to stderr (or --log-file)",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )
    return parser


def _year_range(args: argparse.Namespace) -> Optional[YearRange]:
    start = args.start_year if args.start_year is not None else args.year
    end = args.end_year if args.end_year is not None else args.year
    if start is None and end is None:
        return None
    start = start if start is not None else end
    end = end if end is not None else start
    return YearRange(start_year=start, end_year=end)


def parse_settings(argv: Optional[list[str]] = None) -> ExportSettings:
    """Parse command line arguments into settings.

    Raises:
        SettingsError: If values parse but are invalid.
        SystemExit: If argparse rejects the command line.
    """
    args = create_parser().parse_args(argv)
    try:
        values = {
            "library": args.library,
            "log_file": args.log_file,
            "debug": args.debug,
            "incremental": args.incremental,
            "metadata": args.metadata,
            "year_range": _year_range(args),
            "workers": args.workers,
            "quiet": args.quiet,
        }
        if args.export_directory is not None:
            values["export_directory"] = args.export_directory
        return ExportSettings(**values)
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise SettingsError(messages) from e


def _open_run_log(settings: ExportSettings, reporter: ConsoleReporter) -> RunLog:
    """Open the debug stream.

    Raises:
        DirectoryCreateError: If the log file's directory cannot be created.
    """
    if settings.log_file is not None:
        log_dir = settings.log_file.parent
        FileManager(log_dir).ensure_directory(log_dir)
        try:
            return RunLog.to_file(settings.log_file)
        except OSError as e:
            reporter.warning(
                f"Cannot open debug log {settings.log_file} ({e.strerror or e}); continuing without it"
            )
            return NullRunLog()
    if settings.debug:
        return RunLog.to_stderr()
    return NullRunLog()


def main(argv: Optional[list[str]] = None) -> int:
    """Run the exporter. Returns the process exit code."""
    try:
        settings = parse_settings(argv)
    except SettingsError as e:
        print(f"Invalid arguments: {e}", file=sys.stderr)
        create_parser().print_usage(sys.stderr)
        return 2

    setup_logging(debug=settings.debug)
    reporter = ConsoleReporter(verbose=settings.debug, quiet=settings.quiet)
    reporter.print_header(f"Exporting {settings.library} to {settings.export_directory}")

    if settings.debug:
        config = {
            "Library": settings.library,
            "Export base": settings.export_directory,
            "Errors log": settings.error_log_path,
            "Incremental": settings.incremental,
            "Metadata": settings.metadata,
            "Workers": settings.workers,
        }
        if settings.log_file is not None:
            config["Debug log"] = settings.log_file
        reporter.print_config(config)

    run_log: RunLog = NullRunLog()
    try:
        run_log = _open_run_log(settings, reporter)
        runner = ExportRunner(
            settings=settings,
            source=LocalFolderSource(settings.library),
            writer=LocalFileWriter(),
            reporter=reporter,
            run_log=run_log,
        )
        stats = runner.run()
    except LibraryAccessError as e:
        reporter.error(f"Fatal: {e}")
        reporter.info("Hint: check that the library folder exists and is readable, then re-run.")
        return 1
    except (ExportError, OSError) as e:
        reporter.error(f"Fatal: {e}")
        return 1
    finally:
        run_log.close()

    reporter.print_stats(stats)
    reporter.success(
        f"Export complete: {stats.exported_assets} of {stats.total_assets} assets "
        f"exported to {settings.export_directory}"
    )
    if runner.ledger.exists():
        reporter.warning(f"Errors logged to: {runner.ledger.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
