"""Event processor for filtering, reporting and flattening club events."""
import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from processor.models import ClubEvent

logger = logging.getLogger(__name__)

END_DATE_FORMAT = '%Y-%m-%dT%H:%M:%SZ'


def parse_occurrence(occurrence: str) -> Optional[datetime]:
    """
    Parse an ISO 8601 occurrence timestamp as a UTC datetime.

    Args:
        occurrence: Timestamp such as ``2024-05-01T10:00:00Z``

    Returns:
        Timezone-aware datetime in UTC, or None if it cannot be parsed
    """
    if not occurrence:
        return None
    value = occurrence.strip()
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def build_event_records(events: List[ClubEvent]) -> List[Dict[str, Any]]:
    """
    Flatten events into one record per occurrence, sorted by start date.

    Start time and end date are normalised to UTC; the end date is
    estimated as one day after the start.

    Args:
        events: Events to flatten

    Returns:
        List of JSON-serialisable dicts
    """
    records = []
    for event in events:
        for occurrence in event.upcoming_occurrences:
            occurs_at = parse_occurrence(occurrence)
            if occurs_at is None:
                logger.warning(
                    f"Skipping invalid occurrence {occurrence!r} of event {event.id}"
                )
                continue
            records.append({
                'id': event.id,
                'title': event.title,
                'description': event.description,
                'start_date': occurrence,
                'end_date': (occurs_at + timedelta(days=1)).strftime(END_DATE_FORMAT),
                'start_time': occurs_at.strftime('%H:%M'),
                'club_id': event.club_id,
                'club_name': event.display_club,
                'distance': event.display_distance,
                'elevation_gain': event.elevation_gain,
                'address': event.address,
                'link': event.link
            })

    records.sort(key=lambda record: record['start_date'])
    return records


class EventProcessor:
    """Filter events by city and date window and shape them for output."""

    def __init__(self, city: str = 'berlin', days_ahead: int = 7):
        """
        Initialize the processor.

        Args:
            city: Case-insensitive city name matched against description and address
            days_ahead: Size of the date window starting now, in days
        """
        self.city = city.lower()
        self.days_ahead = days_ahead

    def filter_events(
        self,
        events: List[ClubEvent],
        now: Optional[datetime] = None
    ) -> List[ClubEvent]:
        """
        Keep events in the city with an occurrence inside the date window.

        Args:
            events: Events to filter
            now: Start of the window (default: current UTC time)

        Returns:
            Matching events in their original order
        """
        start = now or datetime.now(timezone.utc)
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        end = start + timedelta(days=self.days_ahead)
        logger.info(
            f"Filtering {len(events)} events for {self.city} between "
            f"{start:%Y-%m-%d} and {end:%Y-%m-%d}"
        )

        filtered = [
            event for event in events
            if self._in_city(event) and self._has_occurrence_between(event, start, end)
        ]

        logger.info(
            f"Found {len(filtered)} events in {self.city} within the next "
            f"{self.days_ahead} days"
        )
        for event in filtered:
            logger.debug(
                f"- {event.title} (Club ID: {event.club_id}, "
                f"Distance: {event.display_distance})"
            )
        return filtered

    def format_events(self, events: List[ClubEvent]) -> str:
        """
        Render occurrences grouped by day as a plain text report.

        Args:
            events: Events to render

        Returns:
            Report text, empty when there is nothing to show
        """
        logger.info(f"Formatting {len(events)} events for display")
        days: Dict[str, List[tuple]] = defaultdict(list)

        for event in events:
            for occurrence in event.upcoming_occurrences:
                occurs_at = parse_occurrence(occurrence)
                if occurs_at is None:
                    logger.error(
                        f"Error formatting date for event \"{event.title}\" "
                        f"(ID: {event.id}): {occurrence}"
                    )
                    continue
                days[occurs_at.strftime('%Y-%m-%d')].append((occurs_at, event))

        logger.info(f"Events grouped into {len(days)} days")

        lines = []
        for day in sorted(days):
            day_date = days[day][0][0]
            lines.append(
                f"\n===== {day_date:%A, %B} {day_date.day}, {day_date.year} =====\n"
            )
            for occurs_at, event in days[day]:
                lines.append(event.title)
                lines.append(f"Time: {occurs_at:%H:%M}")
                lines.append(f"Distance: {event.display_distance}")
                lines.append(f"Club: {event.display_club}")
                lines.append(f"Link: {event.link}\n")

        return '\n'.join(lines)

    def _in_city(self, event: ClubEvent) -> bool:
        description = (event.description or '').lower()
        address = (event.address or '').lower()
        return self.city in description or self.city in address

    def _has_occurrence_between(
        self,
        event: ClubEvent,
        start: datetime,
        end: datetime
    ) -> bool:
        for occurrence in event.upcoming_occurrences:
            occurs_at = parse_occurrence(occurrence)
            if occurs_at is not None and start <= occurs_at <= end:
                return True
        return False
