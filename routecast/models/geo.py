"""Geographic primitives shared across the routing and weather code."""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Coordinate:
    """A (longitude, latitude) pair in decimal degrees.

    Ordering follows GeoJSON, which is what the directions provider returns.
    """

    lng: float
    lat: float

    def __post_init__(self) -> None:
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude must be between -180 and 180 degrees, got {self.lng}")
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude must be between -90 and 90 degrees, got {self.lat}")

    @classmethod
    def from_pair(cls, pair) -> "Coordinate":
        """Build from a GeoJSON-style ``[lng, lat]`` pair."""
        lng, lat = pair[0], pair[1]
        return cls(lng=float(lng), lat=float(lat))

    def as_list(self) -> List[float]:
        return [self.lng, self.lat]

    def __str__(self) -> str:
        return f"({self.lat}, {self.lng})"


@dataclass(frozen=True)
class Waypoint:
    """A named stop along the route (origin, via point or destination)."""

    name: str
    coordinates: Coordinate
