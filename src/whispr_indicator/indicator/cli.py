"""CLI entry point for the terminal indicator.

This module handles command-line argument parsing, logging setup and the main
entry point.
"""

from __future__ import annotations

import argparse
import json
import logging
import logging.handlers
import sys
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

from rich.console import Console

from ..utils import default_config, load_config
from .app import IndicatorApp
from .exceptions import ConfigError

logger = logging.getLogger(__name__)

LOG_DIR = Path.home() / ".cache" / "whispr-indicator"


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log line
        """
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "event": record.getMessage(),
            "context": {
                "module": record.module,
                "function": record.funcName,
                "line": record.lineno,
            },
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_context"):
            log_data["context"].update(record.extra_context)

        return json.dumps(log_data, default=str)


def _setup_logging(log_file: Path, debug: bool) -> None:
    """Setup structured JSON logging to file.

    Args:
        log_file: Path to log file
        debug: Enable debug level logging
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # The terminal belongs to the Live display; log only to the file
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Create rotating file handler (10MB max, 3 backups)
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(JSONFormatter())
    file_handler.setLevel(logging.DEBUG if debug else logging.INFO)

    root_logger.addHandler(file_handler)

    logger.info(
        "Logging initialized",
        extra={"extra_context": {"log_file": str(log_file), "debug": debug}},
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="whispr-indicator",
        description="Terminal indicator for the Whispr recorder",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to an indicator config JSON file (default: built-in settings)",
    )

    parser.add_argument(
        "--state-dir",
        type=Path,
        default=None,
        help="Directory holding overlay.json and tray.json "
        "(default: $XDG_STATE_HOME/whispr)",
    )

    parser.add_argument(
        "--poll",
        action="store_true",
        help="Poll the state documents instead of watching the directory",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the indicator.

    Returns:
        Exit code (0=success, 1=error, 130=SIGINT)
    """
    args = _parse_args(argv)

    log_file = LOG_DIR / "indicator.log"
    _setup_logging(log_file, args.debug)

    try:
        config = load_config(args.config.resolve()) if args.config else default_config()
    except ConfigError as err:
        Console().print(f"[red]Error loading config: {err}[/red]")
        logger.error("Failed to load config", extra={"extra_context": {"error": str(err)}})
        return 1

    if args.state_dir is not None:
        config = replace(config, state_dir=args.state_dir.expanduser().resolve())
    if args.poll:
        config = replace(config, force_polling=True)

    logger.info(
        "Indicator starting",
        extra={
            "extra_context": {
                "state_dir": str(config.state_dir),
                "force_polling": config.force_polling,
                "debug": args.debug,
            }
        },
    )

    exit_code = IndicatorApp(config).run()
    logger.info("Indicator exited", extra={"extra_context": {"exit_code": exit_code}})
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
