"""Data models for clubs and club events."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Club:
    """Club the authenticated athlete is a member of."""
    id: int
    name: str
    member_count: int = 0
    city: Optional[str] = None
    country: Optional[str] = None
    url: Optional[str] = None
    sport_type: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Club':
        """Build a Club from a raw ``/athlete/clubs`` entry."""
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            member_count=data.get('member_count', 0),
            city=data.get('city'),
            country=data.get('country'),
            url=data.get('url'),
            sport_type=data.get('sport_type')
        )


@dataclass
class ClubEvent:
    """Group event published by a club, with its upcoming occurrences."""
    id: int
    title: str = ''
    description: str = ''
    club_id: Optional[int] = None
    club_name: Optional[str] = None
    sport_type: Optional[str] = None
    distance: Optional[float] = None
    elevation_gain: Optional[float] = None
    terrain_type: Optional[str] = None
    upcoming_occurrences: List[str] = field(default_factory=list)
    address: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'ClubEvent':
        """Build a ClubEvent from a raw ``/group_events`` entry."""
        return cls(
            id=data['id'],
            title=data.get('title') or '',
            description=data.get('description') or '',
            club_id=data.get('club_id'),
            club_name=data.get('club_name'),
            sport_type=data.get('sport_type'),
            distance=data.get('distance'),
            elevation_gain=data.get('elevation_gain'),
            terrain_type=data.get('terrain_type'),
            upcoming_occurrences=list(data.get('upcoming_occurrences') or []),
            address=data.get('address')
        )

    @property
    def link(self) -> str:
        return f"https://www.strava.com/clubs/{self.club_id}/group_events/{self.id}"

    @property
    def display_club(self) -> str:
        return self.club_name or f"Club #{self.club_id}"

    @property
    def display_distance(self) -> str:
        if self.distance:
            return f"{self.distance / 1000:.1f} km"
        return 'Distance not specified'


def build_club_name_lookup(clubs: List[Club]) -> Dict[int, str]:
    """Map club id to club name for attaching names to fetched events."""
    return {club.id: club.name for club in clubs}
