#Marks routing as a package.
#Re-exports the distance resolution API (DistanceMatrixClient, the resolvers, the cache)
#so other modules import from routing without knowing internal file names.
#No business logic.

from .distance_client import DistanceMatrixClient, ProviderUnavailable
from .distance_resolver import (
    DistanceResolver,
    DistanceResult,
    HaversineDistanceResolver,
    InvalidCoordinate,
    ProviderDistanceResolver,
    build_distance_resolver,
    haversine_miles,
)
from .distance_cache import CachingDistanceResolver

__all__ = [
           "DistanceMatrixClient",
           "ProviderUnavailable",
             "DistanceResolver",
             "DistanceResult",
             "HaversineDistanceResolver",
             "ProviderDistanceResolver",
             "CachingDistanceResolver",
             "InvalidCoordinate",
             "build_distance_resolver",
             "haversine_miles",
             ]
