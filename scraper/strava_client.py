"""HTTP client for the Strava v3 club endpoints."""
import logging
from typing import Any, Dict, List

import requests

from processor.models import Club

logger = logging.getLogger(__name__)


class StravaClient:
    """Thin wrapper around the Strava club and group event endpoints."""

    BASE_URL = "https://www.strava.com/api/v3"

    def __init__(self, base_url: str = BASE_URL, timeout: int = 30):
        """
        Initialize the API client.

        Args:
            base_url: Strava API base URL
            timeout: HTTP request timeout in seconds (default: 30)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def list_clubs(self, access_token: str) -> List[Club]:
        """
        Fetch the clubs the authenticated athlete is a member of.

        Args:
            access_token: OAuth access token

        Returns:
            List of Club objects

        Raises:
            requests.RequestException: If the request fails
        """
        url = f"{self.base_url}/athlete/clubs"
        logger.info(f"Requesting clubs from {url}")

        try:
            response = requests.get(
                url,
                headers=self._auth_headers(access_token),
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            logger.error(
                f"API Error: {e.response.status_code} - {e.response.text}. "
                "This could be due to invalid credentials, expired token, "
                "or rate limiting"
            )
            raise

        clubs = [Club.from_api(item) for item in response.json()]
        logger.info(f"Received {len(clubs)} clubs from Strava API")
        return clubs

    def get_club_events(self, access_token: str, club_id: int) -> List[Dict[str, Any]]:
        """
        Fetch the raw upcoming group events of one club.

        Args:
            access_token: OAuth access token
            club_id: Strava club id

        Returns:
            List of raw event dicts as returned by the API

        Raises:
            requests.HTTPError: On any non-2xx response, including 404
            requests.RequestException: On connection errors and timeouts
        """
        url = f"{self.base_url}/clubs/{club_id}/group_events"
        logger.debug(f"Requesting events from {url}")

        response = requests.get(
            url,
            headers=self._auth_headers(access_token),
            timeout=self.timeout
        )
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _auth_headers(access_token: str) -> Dict[str, str]:
        return {'Authorization': f"Bearer {access_token}"}
