"""Collect events from many clubs with bounded concurrency."""
import logging
from typing import List

from processor.models import Club, ClubEvent
from scraper.batch_scheduler import run_batches
from scraper.event_fetcher import ClubEventFetcher

logger = logging.getLogger(__name__)


class EventService:
    """Drives the per-club fetcher over all clubs, concurrency clubs at a time."""

    def __init__(self, fetcher: ClubEventFetcher, concurrency: int = 3):
        self.fetcher = fetcher
        self.concurrency = concurrency
        logger.info(f"Initialized event service with concurrency: {concurrency}")

    async def collect(self, access_token: str, clubs: List[Club]) -> List[ClubEvent]:
        """
        Fetch events from every club.

        Args:
            access_token: OAuth access token
            clubs: Clubs to fetch, in the order results should appear

        Returns:
            Events of all clubs, concatenated in club order
        """
        logger.info(
            f"Fetching events from {len(clubs)} clubs with concurrency "
            f"{self.concurrency}"
        )

        async def fetch_club(club: Club) -> List[ClubEvent]:
            logger.info(f"Processing club: {club.name} (ID: {club.id})")
            events = await self.fetcher.fetch(access_token, club)
            logger.info(f"Retrieved {len(events)} events from {club.name}")
            return events

        events = await run_batches(clubs, self.concurrency, fetch_club)
        logger.info("Completed fetching events from all clubs")
        return events
