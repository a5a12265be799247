"""Waypoint store and load-time waypoint pipeline"""
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple
import logging

from config.settings import ConfigurationError
from transforms.gateway import FrameTransformGateway
from transforms.core.data_types import Point, Quaternion
from .core.data_types import Waypoint

logger = logging.getLogger(__name__)


class GeographicConversionError(Exception):
    """Raised when a GPS waypoint cannot be brought into the working frame"""

    def __init__(self, index: int, lat: float, lon: float, reason: str):
        self.index = index
        self.lat = lat
        self.lon = lon
        self.reason = reason
        super().__init__(f"GPS waypoint #{index + 1} ({lat}, {lon}) could not be converted: {reason}")


class WaypointStore:
    """
    Ordered waypoints fixed at load time plus a traversal cursor

    cursor is -1 before the run starts and len(store) once every waypoint
    has been satisfied. It only moves forward, one waypoint at a time.
    """

    NOT_STARTED = -1

    def __init__(self, waypoints: Iterable[Waypoint] = ()):
        self._entries: Tuple[Waypoint, ...] = tuple(waypoints)
        self._cursor = self.NOT_STARTED

    @property
    def entries(self) -> Tuple[Waypoint, ...]:
        return self._entries

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Waypoint]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> Waypoint:
        return self._entries[index]

    def begin(self) -> bool:
        """Move cursor onto the first waypoint; False if already started"""
        if self._cursor != self.NOT_STARTED:
            return False
        self._cursor = 0
        return True

    def current(self) -> Optional[Waypoint]:
        """Waypoint at the cursor, None when not started or complete"""
        if 0 <= self._cursor < len(self._entries):
            return self._entries[self._cursor]
        return None

    def advance(self) -> bool:
        """
        Mark the current waypoint satisfied

        Returns:
            True if another waypoint remains, False if the store is now complete
        """
        if self.current() is None:
            raise RuntimeError(f"Cannot advance waypoint cursor from {self._cursor}")
        self._cursor += 1
        return self._cursor < len(self._entries)

    def remaining(self) -> Tuple[Waypoint, ...]:
        """Waypoints from the cursor onward (all of them before the run starts)"""
        return self._entries[max(self._cursor, 0):]

    def get_remaining_count(self) -> int:
        return len(self.remaining())

    def is_complete(self) -> bool:
        return self._cursor >= len(self._entries)


def _pairs(values: Sequence[float]) -> List[Tuple[float, float]]:
    return [(values[i], values[i + 1]) for i in range(0, len(values), 2)]


def load_waypoint_store(local_values: Sequence[float],
                        gps_values: Sequence[float],
                        gateway: FrameTransformGateway,
                        launch_frame: str,
                        working_frame: str) -> WaypointStore:
    """
    Build the waypoint store from flat coordinate lists

    Local (x, y) pairs stay in launch_frame and are converted on demand by
    the controller. GPS (lat, lon) pairs are projected to UTM and converted
    into working_frame once, here, and appended after the local waypoints.

    Args:
        local_values: Flat x, y list
        gps_values: Flat lat, lon list
        gateway: Frame transform gateway
        launch_frame: Frame local waypoints are authored in
        working_frame: Frame the control loop works in

    Raises:
        ConfigurationError: a list has an odd number of values
        GeographicConversionError: a GPS waypoint could not be converted
    """
    if len(local_values) % 2 != 0:
        raise ConfigurationError(
            f"Incorrect number of waypoint values ({len(local_values)}), expected x,y pairs"
        )
    if len(gps_values) % 2 != 0:
        raise ConfigurationError(
            f"Incorrect number of GPS waypoint values ({len(gps_values)}), expected lat,lon pairs"
        )

    waypoints = [
        Waypoint(position=Point(x, y, 0.0), frame=launch_frame, orientation=Quaternion())
        for x, y in _pairs(local_values)
    ]
    logger.info(f"Loaded {len(waypoints)} waypoint(s) in frame '{launch_frame}'")

    gps_pairs = _pairs(gps_values)
    if gps_pairs:
        logger.info(f"Converting {len(gps_pairs)} GPS waypoint(s) into frame '{working_frame}'")

    for index, (lat, lon) in enumerate(gps_pairs):
        projected = gateway.geographic_to_projected(lat, lon)
        result = gateway.convert_point(projected, gateway.utm_frame, working_frame)
        if not result.ok:
            logger.error(f"❌ Failed to convert GPS waypoint #{index + 1} ({lat}, {lon}): {result.error}")
            raise GeographicConversionError(index, lat, lon, str(result.error))

        position = result.value.flattened()
        waypoints.append(Waypoint(position=position, frame=working_frame, orientation=Quaternion()))
        logger.info(f"➕ GPS waypoint #{index + 1} ({lat:.7f}, {lon:.7f}) -> "
                    f"({position.x:.2f}, {position.y:.2f}) in '{working_frame}'")

    return WaypointStore(waypoints)
