"""Club whitelist/blacklist loaded from a JSON configuration file."""
import json
import logging
from dataclasses import dataclass, field
from typing import List

from processor.models import Club

logger = logging.getLogger(__name__)


@dataclass
class ClubFilterConfig:
    """Which clubs to collect events from."""
    use_whitelist: bool = False
    include_list: List[str] = field(default_factory=list)
    exclude_list: List[str] = field(default_factory=list)


def load_club_config(path: str) -> ClubFilterConfig:
    """
    Load the club configuration file.

    The file holds ``use_whitelist``, ``include_list`` and ``exclude_list``.
    A missing or malformed file yields a configuration that keeps every club.

    Args:
        path: Path of the JSON configuration file

    Returns:
        ClubFilterConfig
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning(f"Club configuration {path} not found, using all clubs")
        return ClubFilterConfig()
    except (OSError, ValueError) as e:
        logger.error(f"Error loading club configuration {path}: {e}")
        return ClubFilterConfig()

    if not isinstance(data, dict):
        logger.error(
            f"Club configuration {path} must be a JSON object, using all clubs"
        )
        return ClubFilterConfig()

    config = ClubFilterConfig(
        use_whitelist=bool(data.get('use_whitelist', False)),
        include_list=list(data.get('include_list', [])),
        exclude_list=list(data.get('exclude_list', []))
    )
    logger.debug(f"Loaded club configuration from {path}")
    return config


def filter_clubs(clubs: List[Club], config: ClubFilterConfig) -> List[Club]:
    """
    Apply the whitelist or blacklist to a list of clubs.

    Args:
        clubs: All clubs of the athlete
        config: Filter configuration

    Returns:
        Clubs to collect events from, in their original order
    """
    if config.use_whitelist:
        included = set(config.include_list)
        filtered = [club for club in clubs if club.name in included]
        logger.info(f"Filtered down to {len(filtered)} whitelisted clubs")
        return filtered

    excluded = set(config.exclude_list)
    filtered = [club for club in clubs if club.name not in excluded]
    logger.info(f"Filtered out {len(clubs) - len(filtered)} blacklisted clubs")
    return filtered
