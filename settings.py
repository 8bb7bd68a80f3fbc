"""Runtime configuration read from the environment and an optional .env file."""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv


@dataclass
class Settings:
    """Application settings."""
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None
    base_url: str = 'https://www.strava.com/api/v3'
    concurrency: int = 3
    debug: bool = False
    log_level: str = 'INFO'
    days_ahead: int = 7
    filter_city: str = 'berlin'
    output_dir: str = 'output'
    club_config_path: str = 'club_config.json'
    public_dir: str = 'public'
    port: int = 3000
    timeout_seconds: int = 30

    @property
    def effective_log_level(self) -> str:
        return 'DEBUG' if self.debug else self.log_level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Build settings from environment variables.

        When environ is not given, a ``.env`` file in the working directory
        is loaded into ``os.environ`` first.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            Settings

        Raises:
            ValueError: If a numeric variable is not an integer
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        concurrency = int(environ.get('CONCURRENCY', '3'))
        if concurrency < 1:
            raise ValueError(f"CONCURRENCY must be at least 1, got {concurrency}")

        return cls(
            client_id=environ.get('STRAVA_CLIENT_ID'),
            client_secret=environ.get('STRAVA_CLIENT_SECRET'),
            refresh_token=environ.get('STRAVA_REFRESH_TOKEN'),
            base_url=environ.get('STRAVA_BASE_URL', cls.base_url),
            concurrency=concurrency,
            debug=environ.get('DEBUG', 'false').lower() == 'true',
            log_level=environ.get('LOG_LEVEL', 'INFO'),
            days_ahead=int(environ.get('DAYS_AHEAD', '7')),
            filter_city=environ.get('FILTER_CITY', 'berlin'),
            output_dir=environ.get('OUTPUT_DIR', 'output'),
            club_config_path=environ.get('CLUB_CONFIG_PATH', 'club_config.json'),
            public_dir=environ.get('PUBLIC_DIR', 'public'),
            port=int(environ.get('PORT', '3000')),
            timeout_seconds=int(environ.get('TIMEOUT_SECONDS', '30'))
        )
