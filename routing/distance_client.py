#Purpose: The distance provider "adapter/client".
#Sole responsibility: talk to the Google Distance Matrix API via HTTP and return normalized outputs.
#Encapsulates provider-specific details:
#coordinate formatting ("lat,lon")
#query parameters (driving mode, imperial units, api key)
#timeouts and error handling (every non-success outcome becomes ProviderUnavailable)
#parsing response JSON into our internal shape
#It should not contain fallback logic or scoring.


from dotenv import load_dotenv
import os
from typing import Dict, Tuple
import requests

# Read provider settings from environment
# Example in .env:
# GOOGLE_MAPS_API_KEY=...
# DISTANCE_MATRIX_URL=https://maps.googleapis.com/maps/api/distancematrix/json
load_dotenv()
DEFAULT_DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"

METERS_PER_MILE = 1609.34

# Internal coordinate type: (lat, lon)
LatLon = Tuple[float, float]


class ProviderUnavailable(Exception):
    """The distance provider could not answer for this pair (transport, HTTP or status failure)."""
    pass


class DistanceMatrixClient:
    """
    Distance Matrix Adapter / Client

    Sole responsibility:
    - Talk to the provider via HTTP
    - Convert internal (lat, lon) -> provider "lat,lon"
    - Return normalized outputs (meters, seconds)
    """
    def __init__(self, api_key: str = None, mode: str = "driving", timeout: float = 5):
        self.api_key = api_key or os.getenv("GOOGLE_MAPS_API_KEY")
        self.base_url = os.getenv("DISTANCE_MATRIX_URL") or DEFAULT_DISTANCE_MATRIX_URL
        self.timeout = timeout #seconds to wait for the provider before giving up
        self.mode = mode #the mode of transportation (driving, walking, bicycling)

        if not self.api_key:
            raise ValueError("Google Maps API key is required. Please set GOOGLE_MAPS_API_KEY in the .env file.")

    def format_coordinate(self, coord: LatLon) -> str:
        """Convert (lat, lon) to the provider format 'lat,lon'."""
        lat, lon = coord
        return f"{lat},{lon}"

    def compute_distance(self, origin: LatLon, destination: LatLon) -> Dict[str, float]:
        """
        Calls the distance matrix endpoint for a single origin/destination pair.

        Returns:
            {
                "distance": float, # in meters
                "duration": float, # in seconds
            }

        Raises ProviderUnavailable for a transport failure, an HTTP error status,
        a non-OK response status, a non-OK element status or a malformed payload.
        """
        params = {
            "origins": self.format_coordinate(origin),
            "destinations": self.format_coordinate(destination),
            "mode": self.mode,
            "units": "imperial", # display text in miles; the numeric value is always meters
            "key": self.api_key,
        }

        try:
            response = requests.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise ProviderUnavailable(f"request failed: {e}") from e
        except ValueError as e:
            raise ProviderUnavailable(f"invalid JSON in response: {e}") from e

        #validating provider response
        if not isinstance(data, dict):
            raise ProviderUnavailable(f"malformed payload: expected an object, got {type(data).__name__}")
        if data.get("status") != "OK":
            raise ProviderUnavailable(f"provider status {data.get('status')}: {data.get('error_message', 'Unknown error')}")

        try:
            element = data["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError):
            raise ProviderUnavailable("response has no rows/elements") from None

        if not isinstance(element, dict):
            raise ProviderUnavailable(f"malformed payload: element is {type(element).__name__}")
        if element.get("status") != "OK":
            raise ProviderUnavailable(f"element status {element.get('status')}")

        try:
            #Normalize output to internal format
            return {
                "distance": float(element["distance"]["value"]),
                "duration": float(element["duration"]["value"]),
            }
        except (KeyError, TypeError, ValueError):
            raise ProviderUnavailable("element is missing distance/duration values") from None
