"""Frame transform gateway used by the waypoint loader and the control loop"""
import logging
from typing import Optional

from .core.interfaces import TransformProvider
from .core.data_types import (
    Point, Pose, TransformErrorKind, TransformLookupError, TransformResult
)
from .geo_utils import GeoUtils

logger = logging.getLogger(__name__)


class FrameTransformGateway:
    """
    Wraps a transform provider behind result-returning queries

    Conversions wait (bounded) for the relationship to appear; raw lookups do
    not wait. Nothing is retried here, callers decide whether a failure skips
    the current tick or aborts loading.
    """

    def __init__(self,
                 provider: TransformProvider,
                 point_timeout: float = 10.0,
                 pose_timeout: float = 20.0,
                 utm_frame: str = "utm"):
        """
        Initialize gateway

        Args:
            provider: Source of frame relationships
            point_timeout: Seconds convert_point waits for a relationship
            pose_timeout: Seconds convert_pose waits for a relationship
            utm_frame: Frame id given to projected geographic coordinates
        """
        self.provider = provider
        self.point_timeout = point_timeout
        self.pose_timeout = pose_timeout
        self.utm_frame = utm_frame

    def geographic_to_projected(self, lat: float, lon: float) -> Point:
        """
        Convert latitude/longitude to a point in the UTM frame (z = 0)

        Latitude/longitude ranges are not validated.
        """
        easting, northing, zone = GeoUtils.lat_lon_to_utm(lat, lon)
        logger.debug(f"Projected ({lat:.7f}, {lon:.7f}) -> "
                     f"E {easting:.3f}, N {northing:.3f} (zone {zone})")
        return Point(easting, northing, 0.0)

    def lookup_transform(self, target_frame: str, source_frame: str,
                         at_time: Optional[float] = None) -> TransformResult:
        """
        Look up the transform mapping source_frame into target_frame without waiting

        Returns:
            TransformResult holding a RigidTransform, or a LOOKUP_FAILED error
        """
        try:
            transform = self.provider.lookup_transform(target_frame, source_frame, at_time)
        except TransformLookupError as e:
            logger.warning(f"Unable to look up transform from {source_frame} to {target_frame}: {e}")
            return TransformResult.failure(
                TransformErrorKind.LOOKUP_FAILED, source_frame, target_frame, str(e)
            )
        return TransformResult.success(transform)

    def _wait_and_lookup(self, frame_in: str, frame_out: str,
                         at_time: Optional[float], timeout: float) -> TransformResult:
        logger.debug(f"Looking up transform from {frame_in} to {frame_out}")
        if not self.provider.wait_for_transform(frame_out, frame_in, at_time, timeout):
            logger.warning(f"Timed out after {timeout}s waiting for transform "
                           f"from {frame_in} to {frame_out}")
            return TransformResult.failure(
                TransformErrorKind.TIMEOUT, frame_in, frame_out,
                f"not available within {timeout}s"
            )
        return self.lookup_transform(frame_out, frame_in, at_time)

    def convert_point(self, point: Point, frame_in: str, frame_out: str,
                      at_time: Optional[float] = None) -> TransformResult:
        """
        Express a point given in frame_in in frame_out

        Returns:
            TransformResult holding a new Point
        """
        if frame_in == frame_out:
            return TransformResult.success(point)

        result = self._wait_and_lookup(frame_in, frame_out, at_time, self.point_timeout)
        if not result.ok:
            return result
        return TransformResult.success(result.value.apply_point(point))

    def convert_pose(self, pose: Pose, frame_in: str, frame_out: str,
                     at_time: Optional[float] = None) -> TransformResult:
        """
        Express a pose given in frame_in in frame_out

        Returns:
            TransformResult holding a new Pose
        """
        if frame_in == frame_out:
            return TransformResult.success(pose)

        result = self._wait_and_lookup(frame_in, frame_out, at_time, self.pose_timeout)
        if not result.ok:
            return result
        return TransformResult.success(result.value.apply_pose(pose))
