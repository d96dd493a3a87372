"""Map links and static map images for delivery addresses.

Map artifacts are optional enrichment: any failure yields whatever could be
built (usually just the link) instead of failing the request.
"""

import logging
from dataclasses import dataclass
from urllib.parse import quote, urlencode

import httpx

from parcel_notify.exceptions import MapArtifactError
from parcel_notify.models.submission import NOT_SPECIFIED

logger = logging.getLogger(__name__)

GOOGLE_MAPS_SEARCH_URL = "https://www.google.com/maps/search/"
MAPBOX_GEOCODING_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places"
MAPBOX_STATIC_URL = "https://api.mapbox.com/styles/v1/mapbox/streets-v11/static"

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class MapArtifacts:
    """Links rendered next to an address in an email."""

    image_url: str | None = None
    link_url: str | None = None

    @property
    def empty(self) -> bool:
        return self.image_url is None and self.link_url is None


def clean_address(address: str | None) -> str | None:
    """Strip an address, returning None for blank or placeholder values."""
    if address is None:
        return None
    address = address.strip()
    if not address or address == NOT_SPECIFIED:
        return None
    return address


def google_maps_link(address: str | None) -> str | None:
    """Clickable Google Maps search link for an address."""
    address = clean_address(address)
    if address is None:
        return None
    return f"{GOOGLE_MAPS_SEARCH_URL}?{urlencode({'api': 1, 'query': address})}"


def static_map_url(
    longitude: float,
    latitude: float,
    access_token: str,
    width: int = 600,
    height: int = 300,
    zoom: int = 12,
) -> str:
    """Mapbox static image URL with a red pin at the given coordinates."""
    if width <= 0 or height <= 0:
        raise MapArtifactError(f"Invalid map size {width}x{height}")
    position = f"{longitude:.6f},{latitude:.6f}"
    return (
        f"{MAPBOX_STATIC_URL}/pin-l+ff0000({position})/{position},{zoom}/"
        f"{width}x{height}@2x?{urlencode({'access_token': access_token})}"
    )


class MapLinker:
    """Geocodes addresses and builds map artifacts for them."""

    def __init__(
        self,
        access_token: str | None = None,
        width: int = 600,
        height: int = 300,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.access_token = access_token
        self.width = width
        self.height = height
        self.timeout = timeout

    async def geocode(self, address: str) -> tuple[float, float]:
        """Resolve an address to (longitude, latitude).

        Raises:
            MapArtifactError: If the address cannot be resolved.
        """
        if not self.access_token:
            raise MapArtifactError("Mapbox token not configured")

        url = f"{MAPBOX_GEOCODING_URL}/{quote(address, safe='')}.json"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    url,
                    params={"access_token": self.access_token, "limit": 1},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise MapArtifactError(f"Geocoding request failed: {e}") from e
        except ValueError as e:
            raise MapArtifactError("Geocoding response is not valid JSON") from e

        try:
            features = data.get("features") or []
            if not features:
                raise MapArtifactError(f"No geocoding match for {address!r}")

            center = features[0].get("center") or []
            if len(center) != 2:
                raise MapArtifactError("Geocoding response missing coordinates")
            return float(center[0]), float(center[1])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise MapArtifactError(f"Malformed geocoding response: {e}") from e

    async def address_to_map_artifacts(self, address: str | None) -> MapArtifacts:
        """Build a map link and, when geocoding succeeds, a map image."""
        address = clean_address(address)
        if address is None:
            return MapArtifacts()

        link_url = google_maps_link(address)
        if not self.access_token:
            return MapArtifacts(link_url=link_url)

        try:
            longitude, latitude = await self.geocode(address)
            image_url = static_map_url(
                longitude, latitude, self.access_token, self.width, self.height
            )
        except MapArtifactError as e:
            logger.warning(f"Map image unavailable: {e}")
            return MapArtifacts(link_url=link_url)

        return MapArtifacts(image_url=image_url, link_url=link_url)
