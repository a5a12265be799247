"""Geographic projection helpers"""
from functools import lru_cache
from typing import Tuple

from pyproj import Transformer


@lru_cache(maxsize=16)
def _utm_transformer(epsg: int) -> Transformer:
    return Transformer.from_crs("EPSG:4326", f"EPSG:{epsg}", always_xy=True)


class GeoUtils:
    """Utilities for converting WGS84 coordinates to planar UTM coordinates"""

    LATITUDE_BANDS = "CDEFGHJKLMNPQRSTUVWX"

    @staticmethod
    def utm_zone(lat: float, lon: float) -> int:
        """
        UTM zone number for a coordinate, including the Norway/Svalbard exceptions

        Args:
            lat, lon: Coordinate in degrees

        Returns:
            Zone number 1-60
        """
        # Wrap longitude into [-180, 180)
        lon = (lon + 180.0) % 360.0 - 180.0
        zone = int((lon + 180.0) // 6.0) + 1

        if 56.0 <= lat < 64.0 and 3.0 <= lon < 12.0:
            zone = 32

        if 72.0 <= lat < 84.0:
            if 0.0 <= lon < 9.0:
                zone = 31
            elif 9.0 <= lon < 21.0:
                zone = 33
            elif 21.0 <= lon < 33.0:
                zone = 35
            elif 33.0 <= lon < 42.0:
                zone = 37

        return min(zone, 60)

    @staticmethod
    def utm_band(lat: float) -> str:
        """Latitude band letter, 'Z' outside the UTM limits"""
        if lat < -80.0 or lat > 84.0:
            return "Z"
        index = min(int((lat + 80.0) // 8.0), len(GeoUtils.LATITUDE_BANDS) - 1)
        return GeoUtils.LATITUDE_BANDS[index]

    @staticmethod
    def utm_epsg(lat: float, lon: float) -> int:
        """EPSG code of the WGS84 / UTM zone containing the coordinate"""
        base = 32600 if lat >= 0 else 32700
        return base + GeoUtils.utm_zone(lat, lon)

    @staticmethod
    def lat_lon_to_utm(lat: float, lon: float) -> Tuple[float, float, str]:
        """
        Project a WGS84 coordinate onto its UTM zone

        Args:
            lat, lon: Coordinate in degrees

        Returns:
            Tuple of (easting, northing, zone designator such as '34U')
        """
        transformer = _utm_transformer(GeoUtils.utm_epsg(lat, lon))
        easting, northing = transformer.transform(lon, lat)
        zone = f"{GeoUtils.utm_zone(lat, lon)}{GeoUtils.utm_band(lat)}"
        return easting, northing, zone
