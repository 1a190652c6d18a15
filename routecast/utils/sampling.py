"""RouteCast Checkpoint Planning.

Decides where along a route geometry weather should be sampled and when the
traveller is expected to be there. Arrival times are interpolated by the
fraction of route distance covered, not by coordinate index, because points
on a directions polyline are not evenly spaced in time.

A new checkpoint is placed whenever either the time or the distance since the
previous checkpoint reaches its threshold. The trip end is always represented
exactly once.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Sequence

from routecast.models.geo import Coordinate, Waypoint
from routecast.utils.geometry import haversine_km, nearest_waypoint, route_length_km

logger = logging.getLogger(__name__)

START_LABEL = "Start"
END_LABEL = "End"
EN_ROUTE_LABEL = "En route"


class PlannedCheckpoint:
    """A sample position along a route, before weather is attached."""

    def __init__(
        self,
        index: int,
        coordinates: Coordinate,
        arrival_time: datetime,
        location: str,
        distance_km: float,
    ):
        self.index = index
        self.coordinates = coordinates
        self.arrival_time = arrival_time
        self.location = location
        self.distance_km = distance_km

    def __repr__(self) -> str:
        return (
            f"PlannedCheckpoint(index={self.index}, location={self.location!r}, "
            f"arrival_time={self.arrival_time.isoformat()}, distance_km={self.distance_km:.2f})"
        )


def plan_checkpoints(
    geometry: Sequence[Coordinate],
    departure_time: datetime,
    total_duration_s: float,
    waypoints: Sequence[Waypoint] = (),
    interval_minutes: float = 15.0,
    interval_km: float = 10.0,
    merge_minutes: float = 5.0,
    merge_km: float = 2.0,
) -> List[PlannedCheckpoint]:
    """Plan checkpoint positions along a route.

    Args:
        geometry: Route coordinates in travel order
        departure_time: When the trip starts
        total_duration_s: Expected trip duration in seconds
        waypoints: Named stops; first is the origin, last the destination
        interval_minutes: Time since the last checkpoint that triggers a new one
        interval_km: Distance since the last checkpoint that triggers a new one
        merge_minutes: Time window in which the last checkpoint and the trip
            end are considered the same sample
        merge_km: Distance window for the same check

    Returns:
        Planned checkpoints in route order (empty if geometry is empty)
    """
    if not geometry:
        return []

    start_label = waypoints[0].name if waypoints else START_LABEL
    end_label = waypoints[-1].name if waypoints else END_LABEL

    planned = [PlannedCheckpoint(0, geometry[0], departure_time, start_label, 0.0)]

    if len(geometry) == 1:
        return planned

    duration = timedelta(seconds=total_duration_s)
    interval = timedelta(minutes=interval_minutes)
    total_km = route_length_km(geometry)

    cumulative_km = 0.0
    last_time = departure_time
    last_km = 0.0

    for idx in range(1, len(geometry)):
        cumulative_km += haversine_km(geometry[idx - 1], geometry[idx])
        fraction = min(cumulative_km / total_km, 1.0) if total_km > 0 else 0.0
        arrival = departure_time + duration * fraction

        if arrival - last_time >= interval or cumulative_km - last_km >= interval_km:
            nearest = nearest_waypoint(geometry[idx], waypoints)
            planned.append(
                PlannedCheckpoint(
                    idx,
                    geometry[idx],
                    arrival,
                    nearest.name if nearest else EN_ROUTE_LABEL,
                    cumulative_km,
                )
            )
            last_time = arrival
            last_km = cumulative_km

    end = PlannedCheckpoint(
        len(geometry) - 1,
        geometry[-1],
        departure_time + duration,
        end_label,
        total_km,
    )

    last = planned[-1]
    redundant = (
        len(planned) > 1
        and abs(end.arrival_time - last.arrival_time) <= timedelta(minutes=merge_minutes)
        and haversine_km(last.coordinates, end.coordinates) <= merge_km
    )
    if redundant:
        # Keep a single sample at the trip end, with the exact arrival time
        planned[-1] = end
    else:
        planned.append(end)

    logger.debug(
        f"Planned {len(planned)} checkpoints over {total_km:.1f} km "
        f"and {total_duration_s:.0f} s"
    )
    return planned
