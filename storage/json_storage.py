"""JSON file storage for collected event occurrences."""
import json
import logging
import os
from typing import Any, Dict, List, Optional

from werkzeug.utils import safe_join

from processor.event_processor import build_event_records
from processor.models import ClubEvent

logger = logging.getLogger(__name__)


def save_events_to_file(events: List[ClubEvent], file_path: str) -> bool:
    """
    Write events as a JSON array with one element per occurrence.

    Parent directories are created and an existing file is overwritten.

    Args:
        events: Events to save
        file_path: Destination path

    Returns:
        True on success, False if the file could not be written
    """
    logger.info(f"Saving {len(events)} events to file: {file_path}")

    try:
        records = build_event_records(events)
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Error saving events to file {file_path}: {e}")
        return False

    logger.info(f"Successfully saved {len(records)} event occurrences to {file_path}")
    return True


class JsonEventStorage:
    """Reads and writes the dated event files of an output directory."""

    def __init__(self, output_dir: str):
        """
        Initialize storage for a directory.

        Args:
            output_dir: Directory holding the event JSON files
        """
        self.output_dir = output_dir

    def ensure_output_dir(self) -> None:
        os.makedirs(self.output_dir, exist_ok=True)

    def path_for(self, prefix: str, date_str: str) -> str:
        """Return the file path for ``<prefix>-events-<date>.json``."""
        return os.path.join(self.output_dir, f"{prefix}-events-{date_str}.json")

    def save_events(self, events: List[ClubEvent], prefix: str, date_str: str) -> bool:
        return save_events_to_file(events, self.path_for(prefix, date_str))

    def list_files(self) -> List[str]:
        """
        List the JSON files of the output directory, newest first.

        File names embed an ISO date, so reverse lexical order puts the
        most recent files first.

        Returns:
            File names (not paths)
        """
        self.ensure_output_dir()
        files = sorted(
            (name for name in os.listdir(self.output_dir) if name.endswith('.json')),
            reverse=True
        )
        logger.info(f"Found {len(files)} JSON files in output directory")
        return files

    def resolve(self, filename: str) -> Optional[str]:
        """Return the path of filename inside the output directory, or None if it escapes it."""
        return safe_join(self.output_dir, filename)

    def load_events(self, filename: str) -> List[Dict[str, Any]]:
        """
        Load the records of one event file.

        Args:
            filename: Name of a file in the output directory

        Returns:
            Records stored in the file

        Raises:
            FileNotFoundError: If the file does not exist or lies outside
                the output directory
            ValueError: If the file does not contain valid JSON
        """
        file_path = self.resolve(filename)
        if file_path is None or not os.path.isfile(file_path):
            raise FileNotFoundError(filename)

        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
