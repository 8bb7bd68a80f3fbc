"""Strava OAuth refresh-token exchange."""
import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

TOKEN_URL = "https://www.strava.com/oauth/token"


class AuthenticationError(Exception):
    """Raised when an access token cannot be obtained."""


def get_access_token(
    client_id: Optional[str],
    client_secret: Optional[str],
    refresh_token: Optional[str],
    timeout: int = 30
) -> str:
    """
    Exchange a refresh token for a short-lived access token.

    Args:
        client_id: Strava API application client id
        client_secret: Strava API application client secret
        refresh_token: Long-lived refresh token of the athlete
        timeout: HTTP request timeout in seconds

    Returns:
        Access token string

    Raises:
        AuthenticationError: If a credential is missing or Strava rejects
            the exchange
    """
    logger.info("Attempting to get access token from refresh token")

    if not client_id or not client_secret or not refresh_token:
        raise AuthenticationError(
            "Missing required environment variables. Please check your .env file."
        )

    try:
        response = requests.post(
            TOKEN_URL,
            json={
                'client_id': client_id,
                'client_secret': client_secret,
                'refresh_token': refresh_token,
                'grant_type': 'refresh_token'
            },
            timeout=timeout
        )
        response.raise_for_status()
    except requests.HTTPError as e:
        logger.error(
            f"Token exchange rejected: {e}",
            extra={
                'status': e.response.status_code,
                'response_body': e.response.text
            }
        )
        raise AuthenticationError(
            f"Strava rejected the token exchange ({e.response.status_code})"
        ) from e
    except requests.RequestException as e:
        logger.error(f"Error getting access token: {e}")
        raise AuthenticationError(f"Token exchange failed: {e}") from e

    access_token = response.json().get('access_token')
    if not access_token:
        raise AuthenticationError("Token response did not contain an access token")

    logger.info("Successfully obtained new access token")
    return access_token
