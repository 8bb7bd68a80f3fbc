"""Command line entry point for the Strava club rides collector."""
import argparse
import json
import logging
import sys
from typing import List, Optional

from app import App
from settings import Settings
from storage.json_storage import JsonEventStorage

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord('', 0, '', 0, '', (), None)).keys()
) | {'message', 'asctime'}


class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure the root logger with the JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Collect upcoming Strava club rides or serve the saved ones."
    )
    parser.add_argument(
        '-s', '--server',
        action='store_true',
        help="serve the event viewer instead of collecting events"
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run collection mode or server mode.

    Returns:
        Process exit code
    """
    args = parse_args(argv)
    logger = logging.getLogger(__name__)

    try:
        settings = Settings.from_env()
        setup_logging(settings.effective_log_level)

        if args.server:
            logger.info("Starting in server mode")
            from server.web import start_server

            start_server(
                JsonEventStorage(settings.output_dir),
                settings.public_dir,
                port=settings.port
            )
            return 0

        logger.info("Starting in scraper mode")
        return 0 if App(settings).run() else 1

    except Exception as e:
        logger.error(
            f"Error in main function: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return 1


def cli() -> None:
    sys.exit(main())


if __name__ == '__main__':
    cli()
