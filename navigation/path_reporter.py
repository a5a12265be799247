"""Remaining route reporting for visualization"""
import logging
import time
from typing import Callable, Optional

from transforms.gateway import FrameTransformGateway
from transforms.core.data_types import Pose
from telemetry.metrics import NavigationMetrics
from .core.interfaces import PathSink
from .core.data_types import NavigationSession, Path, StampedPose

logger = logging.getLogger(__name__)


class PathReporter:
    """
    Publishes the remaining route in the working frame

    The path optionally starts with the robot's current pose, followed by
    every waypoint from the cursor onward. Entries that cannot be converted
    into the working frame are left out of that tick's path.
    """

    def __init__(self,
                 session: NavigationSession,
                 gateway: FrameTransformGateway,
                 path_sink: PathSink,
                 include_start_pose: bool = True,
                 metrics: Optional[NavigationMetrics] = None,
                 clock: Callable[[], float] = time.time):
        self._session = session
        self._gateway = gateway
        self._path_sink = path_sink
        self.include_start_pose = include_start_pose
        self.metrics = metrics
        self._clock = clock

    def build_path(self) -> Path:
        """
        Assemble the remaining route without publishing it

        Returns:
            Path in the working frame
        """
        path, _ = self._build()
        return path

    def _build(self):
        session = self._session
        working_frame = session.working_frame
        now = self._clock()
        path = Path(frame=working_frame, stamp=now)
        dropped = 0

        if self.include_start_pose:
            result = self._gateway.convert_pose(Pose(), session.robot_frame, working_frame)
            if result.ok:
                path.poses.append(StampedPose(working_frame, result.value, now))
            else:
                dropped += 1
                logger.warning(f"Robot pose left out of path: {result.error}")

        for waypoint in session.store.remaining():
            result = self._gateway.convert_pose(waypoint.pose, waypoint.frame, working_frame)
            if result.ok:
                path.poses.append(StampedPose(working_frame, result.value, now))
            else:
                dropped += 1
                logger.warning(f"Waypoint ({waypoint.x:.2f}, {waypoint.y:.2f}) in "
                               f"'{waypoint.frame}' left out of path: {result.error}")

        return path, dropped

    def publish(self) -> Path:
        """Build and publish the remaining route"""
        path, dropped = self._build()
        self._path_sink.publish(path)
        if self.metrics is not None:
            self.metrics.add_path_published(dropped)
        logger.debug(f"Published path with {len(path.poses)} pose(s)")
        return path
