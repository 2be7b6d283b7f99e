#Purpose: Distance resolution used by feature extraction.
#One capability, two implementations selectable at construction:
#HaversineDistanceResolver - pure great-circle math, no network, deterministic
#ProviderDistanceResolver  - driving distance from the provider, Haversine on any failure
#Output: miles (plus where the number came from, for diagnostics).

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .distance_client import METERS_PER_MILE, DistanceMatrixClient, ProviderUnavailable

logger = logging.getLogger(__name__)

#internal coordinate type :(lat,lon)
LatLon = Tuple[float, float]

EARTH_RADIUS_MILES = 3959.0

SOURCE_PROVIDER = "provider"
SOURCE_HAVERSINE = "haversine"


class InvalidCoordinate(ValueError):
    """A coordinate is not a finite number. This is a caller bug, not a provider failure."""
    pass


@dataclass(frozen=True)
class DistanceResult:
    """
    Outcome of one distance lookup.
    fallback_reason is set only when the provider was tried and failed.
    """
    miles: float
    source: str
    duration_s: Optional[float] = None
    fallback_reason: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.fallback_reason is not None


def _coordinate(value, name: str) -> float:
    if isinstance(value, bool):
        raise InvalidCoordinate(f"{name} must be numeric, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidCoordinate(f"{name} must be numeric, got {value!r}") from None
    if not math.isfinite(number):
        raise InvalidCoordinate(f"{name} must be finite, got {value!r}")
    return number


def validate_pair(origin: LatLon, destination: LatLon) -> Tuple[LatLon, LatLon]:
    return (
        (_coordinate(origin[0], "origin latitude"), _coordinate(origin[1], "origin longitude")),
        (_coordinate(destination[0], "destination latitude"), _coordinate(destination[1], "destination longitude")),
    )


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in miles."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


class DistanceResolver:
    """
    Base interface. Subclasses implement resolve(); distance() is the plain-miles view.
    """

    def resolve(self, origin: LatLon, destination: LatLon) -> DistanceResult:
        raise NotImplementedError

    def distance(self, lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        return self.resolve((lat1, lon1), (lat2, lon2)).miles


class HaversineDistanceResolver(DistanceResolver):
    """Offline resolver: straight-line distance only."""

    def resolve(self, origin: LatLon, destination: LatLon) -> DistanceResult:
        (lat1, lon1), (lat2, lon2) = validate_pair(origin, destination)
        return DistanceResult(miles=haversine_miles(lat1, lon1, lat2, lon2), source=SOURCE_HAVERSINE)


class ProviderDistanceResolver(DistanceResolver):
    """
    Remote-then-fallback resolver.

    Never raises for provider trouble: transport errors, timeouts and non-OK statuses
    are logged and answered with the Haversine distance instead.
    """

    def __init__(self, client: DistanceMatrixClient, fallback: Optional[DistanceResolver] = None):
        self.client = client
        self.fallback = fallback or HaversineDistanceResolver()

    def resolve(self, origin: LatLon, destination: LatLon) -> DistanceResult:
        origin, destination = validate_pair(origin, destination)

        try:
            route = self.client.compute_distance(origin, destination)
        except ProviderUnavailable as e:
            logger.warning(f"Distance provider unavailable for {origin} -> {destination}, using Haversine: {e}")
            fallback = self.fallback.resolve(origin, destination)
            return DistanceResult(
                miles=fallback.miles,
                source=fallback.source,
                duration_s=fallback.duration_s,
                fallback_reason=str(e),
            )

        return DistanceResult(
            miles=route["distance"] / METERS_PER_MILE,
            source=SOURCE_PROVIDER,
            duration_s=route["duration"],
        )


def build_distance_resolver(
    api_key: Optional[str] = None,
    *,
    offline: bool = False,
    use_cache: bool = True,
    timeout: float = 5,
) -> DistanceResolver:
    """
    Pick the resolver implementation.

    offline=True gives the pure Haversine resolver (tests, batch runs without a key).
    Otherwise the provider client is built (reads GOOGLE_MAPS_API_KEY when api_key
    is None) and optionally wrapped in the in-memory distance cache.
    """
    if offline:
        return HaversineDistanceResolver()

    resolver: DistanceResolver = ProviderDistanceResolver(DistanceMatrixClient(api_key=api_key, timeout=timeout))
    if use_cache:
        from .distance_cache import CachingDistanceResolver
        resolver = CachingDistanceResolver(resolver)
    return resolver
