"""Collection mode: fetch, filter, report and save club events."""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional

import requests

from processor.club_filter import filter_clubs, load_club_config
from processor.event_processor import EventProcessor
from processor.models import build_club_name_lookup
from scraper.event_fetcher import ClubEventFetcher
from scraper.event_service import EventService
from scraper.strava_auth import get_access_token
from scraper.strava_client import StravaClient
from settings import Settings
from storage.json_storage import JsonEventStorage

logger = logging.getLogger(__name__)

TROUBLESHOOTING_TIPS = (
    "1. Check that your .env file contains the correct Strava API credentials",
    "2. Ensure your refresh token is valid and not expired",
    "3. Verify that you have permission to access club events",
)


class App:
    """Runs one collection pass over the athlete's clubs."""

    def __init__(self, settings: Settings):
        self.settings = settings
        logger.info("Strava Club Rides Scraper initialized")

    def run(self, now: Optional[datetime] = None) -> bool:
        """
        Run the collection pass.

        Args:
            now: Reference time for the date window and file names
                (default: current UTC time)

        Returns:
            True if the run completed, False if it failed
        """
        settings = self.settings
        now = now or datetime.now(timezone.utc)
        start_time = time.time()

        try:
            logger.info("Authenticating with Strava API")
            access_token = get_access_token(
                settings.client_id,
                settings.client_secret,
                settings.refresh_token,
                timeout=settings.timeout_seconds
            )

            client = StravaClient(
                base_url=settings.base_url,
                timeout=settings.timeout_seconds
            )
            all_clubs = client.list_clubs(access_token)
            logger.info(f"Found {len(all_clubs)} clubs total")

            clubs = filter_clubs(all_clubs, load_club_config(settings.club_config_path))
            logger.info(f"Working with {len(clubs)} selected clubs")
            for club in clubs:
                logger.info(f"- {club.name} (ID: {club.id}, Members: {club.member_count})")

            fetcher = ClubEventFetcher(client, build_club_name_lookup(all_clubs))
            service = EventService(fetcher, concurrency=settings.concurrency)
            all_events = asyncio.run(service.collect(access_token, clubs))
            logger.info(f"Total events fetched: {len(all_events)}")

            processor = EventProcessor(
                city=settings.filter_city,
                days_ahead=settings.days_ahead
            )
            city_events = processor.filter_events(all_events, now=now)

            storage = JsonEventStorage(settings.output_dir)
            date_str = now.strftime('%Y-%m-%d')

            if not city_events:
                logger.info(
                    f"No events found in {settings.filter_city} for the next "
                    f"{settings.days_ahead} days"
                )
            else:
                print(f"\n=== {settings.filter_city.upper()} RIDES FOR THE NEXT "
                      f"{settings.days_ahead} DAYS ===")
                print(processor.format_events(city_events))
                storage.save_events(city_events, settings.filter_city.lower(), date_str)

            storage.save_events(all_events, 'all', date_str)

        except Exception as e:
            logger.error(
                f"Error running Strava Club Rides Scraper: {e}",
                extra={
                    'duration_seconds': round(time.time() - start_time, 2),
                    'error_type': type(e).__name__
                },
                exc_info=True
            )
            http_error = e if isinstance(e, requests.HTTPError) else e.__cause__
            if isinstance(http_error, requests.HTTPError) and http_error.response is not None:
                logger.error(f"API Error Details: Status {http_error.response.status_code}")
            logger.info("Troubleshooting tips:")
            for tip in TROUBLESHOOTING_TIPS:
                logger.info(tip)
            return False

        logger.info(
            "Strava Club Rides Scraper completed successfully",
            extra={
                'duration_seconds': round(time.time() - start_time, 2),
                'events_fetched': len(all_events),
                'city_events': len(city_events)
            }
        )
        return True
