"""Per-club event fetching with retry and linear backoff."""
import asyncio
import logging
from typing import Dict, List, Optional

import requests

from processor.models import Club, ClubEvent
from scraper.strava_client import StravaClient

logger = logging.getLogger(__name__)


class ClubEventFetcher:
    """
    Fetch one club's events, retrying transient failures.

    A fetch never raises: a club without events (404) and a club whose
    requests or responses kept failing both come back as an empty list.
    Unparseable responses are retried like transient HTTP errors.
    """

    MAX_ATTEMPTS = 3
    RETRY_DELAY_SECONDS = 1.0

    def __init__(
        self,
        client: StravaClient,
        club_names: Optional[Dict[int, str]] = None,
        retry_delay: float = RETRY_DELAY_SECONDS
    ):
        """
        Initialize the fetcher.

        Args:
            client: API client performing the HTTP call
            club_names: Club id to name lookup, built before fetching starts
            retry_delay: Base delay in seconds; attempt n waits n * retry_delay
        """
        self.client = client
        self.club_names = dict(club_names or {})
        self.retry_delay = retry_delay

    async def fetch(self, access_token: str, club: Club) -> List[ClubEvent]:
        """
        Fetch the upcoming events of a club.

        Args:
            access_token: OAuth access token
            club: Club to fetch events for

        Returns:
            List of ClubEvent objects, empty when the club has no events
            or every attempt failed
        """
        if not access_token:
            raise ValueError("access_token must not be empty")
        if club.id is None:
            raise ValueError(f"Club '{club.name}' has no id")

        attempts = 0
        while True:
            try:
                raw_events = await asyncio.to_thread(
                    self.client.get_club_events, access_token, club.id
                )
                events = [ClubEvent.from_api(item) for item in raw_events]
                break
            except (requests.RequestException, TypeError, KeyError,
                    AttributeError, ValueError) as e:
                status = self._status_of(e)
                if status == 404:
                    logger.info(f"Club {club.id} might not have any upcoming events")
                    return []

                attempts += 1
                if attempts >= self.MAX_ATTEMPTS:
                    logger.error(
                        f"Failed to get events for club {club.id} after "
                        f"{self.MAX_ATTEMPTS} attempts",
                        extra={'club_id': club.id, 'status': status}
                    )
                    logger.info(f"Continuing without events from club {club.id}")
                    return []

                delay = attempts * self.retry_delay
                logger.info(
                    f"Retry {attempts}/{self.MAX_ATTEMPTS} for club {club.id} "
                    f"in {delay:g}s: {e}"
                )
                await asyncio.sleep(delay)

        self._attach_club_name(events, club.id)

        logger.info(f"Received {len(events)} events for club {club.id}")
        if events and events[0].upcoming_occurrences:
            logger.debug(
                f"First event: \"{events[0].title}\" on "
                f"{events[0].upcoming_occurrences[0]}"
            )
        return events

    def _attach_club_name(self, events: List[ClubEvent], club_id: int) -> None:
        club_name = self.club_names.get(club_id)
        if not club_name:
            return
        for event in events:
            event.club_name = club_name

    @staticmethod
    def _status_of(error: Exception) -> Optional[int]:
        response = getattr(error, 'response', None)
        if response is not None:
            return response.status_code
        return None
