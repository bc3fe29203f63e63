"""Great-circle distance, bearing and point-to-segment distance."""

import math

from route_eta.core.models import Coordinate

# Spherical Earth, equatorial radius (meters)
EARTH_RADIUS_M = 6_378_137.0


def distance(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance in meters between two coordinates."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lon) - math.radians(a.lon)

    h = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_M * c


def bearing(a: Coordinate, b: Coordinate) -> float:
    """Initial bearing from a to b in degrees [0, 360), 0 = north, clockwise.

    Meaningless when a == b.
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlon = math.radians(b.lon) - math.radians(a.lon)

    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def distance_to_segment(p: Coordinate, seg_start: Coordinate, seg_end: Coordinate) -> float:
    """Distance in meters from p to the segment [seg_start, seg_end].

    Flat-angle approximation: when p projects inside the segment the offset is
    sin(bearing difference) * distance from the start, otherwise the distance
    to the nearer endpoint. Only accurate for short segments.
    """
    if coordinates_equal(seg_start, seg_end):
        return distance(seg_start, p)

    seg_len = distance(seg_start, seg_end)
    to_start = distance(seg_start, p)
    to_end = distance(seg_end, p)

    # Beyond the end / before the start
    if to_start > seg_len:
        return to_end
    if to_end > seg_len:
        return to_start

    angle = abs(bearing(seg_start, seg_end) - bearing(seg_start, p))
    # Over 180° when the bearings straddle north
    return abs(math.sin(math.radians(angle))) * to_start


def coordinates_equal(a: Coordinate, b: Coordinate) -> bool:
    return a.lat == b.lat and a.lon == b.lon
