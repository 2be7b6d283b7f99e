import pytest

from rides.datasets import load_datasets
from routing.distance_client import ProviderUnavailable
from routing.distance_resolver import HaversineDistanceResolver


HISTORICAL_CSV = """Ride ID,Origin Latitude,Origin Longitude,Destination Latitude,Destination Longitude,Distance (miles),Time of Day (24hr),Day of Week
R0001,40.83091,-77.15878,41.35899,-77.0563,9.15,12:00,Saturday"""

USERS_CSV = """User ID,Current Latitude,Current Longitude,Historical Ride Acceptance Rate
U001,40.81395,-76.34354,0.81
U002,41.34000,-76.70000,0.40"""

RIDES_CSV = """Ride ID,Origin Latitude,Origin Longitude,Destination Latitude,Destination Longitude,Distance (miles),Scheduled Time (24hr)
A001,41.34901,-76.70262,40.61252,-77.15565,6.15,13:15
A002,40.82000,-76.35000,40.90000,-76.40000,4.50,07:30
A003,40.99812,-76.90123,41.21456,-77.00245,14.87,23:30"""


class MockDistanceClient:
    """
    Stands in for DistanceMatrixClient. Answers with fixed meters/seconds,
    or raises ProviderUnavailable when told to fail.
    """
    def __init__(self, meters=16093.4, seconds=900.0, fail=False):
        self.meters = meters
        self.seconds = seconds
        self.fail = fail
        self.calls = []

    def compute_distance(self, origin, destination):
        self.calls.append((origin, destination))
        if self.fail:
            raise ProviderUnavailable("element status ZERO_RESULTS")
        return {"distance": self.meters, "duration": self.seconds}


@pytest.fixture
def datasets():
    return load_datasets(HISTORICAL_CSV, USERS_CSV, RIDES_CSV)


@pytest.fixture
def haversine_resolver():
    return HaversineDistanceResolver()
