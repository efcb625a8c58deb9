"""
Store Locations

Static city lookup used to place verified stores on the platform map.
Stores in cities missing from the table are left off the map.
"""

from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from marketplace_analytics.domain.read_models import StoreLocation
from marketplace_analytics.domain.records import StoreRecord

logger = structlog.get_logger(__name__)

# (city, state) -> (lat, lng); state "" is the city-only fallback
CITY_COORDINATES: Dict[Tuple[str, str], Tuple[float, float]] = {
    ("new york", "ny"): (40.7128, -74.0060),
    ("los angeles", "ca"): (34.0522, -118.2437),
    ("san francisco", "ca"): (37.7749, -122.4194),
    ("san diego", "ca"): (32.7157, -117.1611),
    ("chicago", "il"): (41.8781, -87.6298),
    ("houston", "tx"): (29.7604, -95.3698),
    ("austin", "tx"): (30.2672, -97.7431),
    ("dallas", "tx"): (32.7767, -96.7970),
    ("phoenix", "az"): (33.4484, -112.0740),
    ("philadelphia", "pa"): (39.9526, -75.1652),
    ("seattle", "wa"): (47.6062, -122.3321),
    ("portland", "or"): (45.5152, -122.6784),
    ("denver", "co"): (39.7392, -104.9903),
    ("boston", "ma"): (42.3601, -71.0589),
    ("miami", "fl"): (25.7617, -80.1918),
    ("atlanta", "ga"): (33.7490, -84.3880),
    ("nashville", "tn"): (36.1627, -86.7816),
    ("minneapolis", "mn"): (44.9778, -93.2650),
    ("detroit", "mi"): (42.3314, -83.0458),
    ("washington", "dc"): (38.9072, -77.0369),
    ("toronto", "on"): (43.6532, -79.3832),
    ("vancouver", "bc"): (49.2827, -123.1207),
    ("mexico city", "cdmx"): (19.4326, -99.1332),
    ("guadalajara", "jal"): (20.6597, -103.3496),
    ("monterrey", "nl"): (25.6866, -100.3161),
    ("london", ""): (51.5074, -0.1278),
    ("paris", ""): (48.8566, 2.3522),
    ("berlin", ""): (52.5200, 13.4050),
    ("madrid", ""): (40.4168, -3.7038),
    ("tokyo", ""): (35.6762, 139.6503),
}


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def lookup_coordinates(city: Optional[str], state: Optional[str] = None) -> Optional[Tuple[float, float]]:
    city_key = _normalize(city)
    if not city_key:
        return None
    exact = CITY_COORDINATES.get((city_key, _normalize(state)))
    if exact is not None:
        return exact
    fallback = CITY_COORDINATES.get((city_key, ""))
    if fallback is not None:
        return fallback
    # Unique city name match regardless of state
    matches = [coords for (name, _state), coords in CITY_COORDINATES.items() if name == city_key]
    return matches[0] if len(matches) == 1 else None


def store_locations(stores: Iterable[StoreRecord]) -> List[StoreLocation]:
    """Verified stores with a known location, in input order."""
    locations = []
    unplaced = 0
    for store in stores:
        if not store.is_active:
            continue
        coordinates = lookup_coordinates(store.city, store.state)
        if coordinates is None:
            unplaced += 1
            continue
        lat, lng = coordinates
        locations.append(
            StoreLocation(id=store.id, name=store.name, city=store.city or "", state=store.state, lat=lat, lng=lng)
        )
    if unplaced:
        logger.debug("Stores without known coordinates", count=unplaced)
    return locations
