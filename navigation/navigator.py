"""Waypoint following control loop"""
import logging
import math
import threading
from typing import Optional

from transforms.gateway import FrameTransformGateway
from telemetry.metrics import NavigationMetrics
from .core.interfaces import VelocitySink
from .core.data_types import NavigationSession, VelocityCommand
from .algorithms.heading_controller import HeadingController, DistanceController, normalize_angle

logger = logging.getLogger(__name__)


class NavigationController:
    """
    Periodic waypoint follower

    Each tick reads the robot pose in the working frame, steers toward the
    waypoint at the store cursor and advances the cursor once the robot is
    within tolerance. State machine:
    NOT_STARTED (cursor=-1) -> RUNNING -> DONE (cursor=N, inactive).
    """

    def __init__(self,
                 session: NavigationSession,
                 gateway: FrameTransformGateway,
                 velocity_sink: VelocitySink,
                 goal_tolerance: float = 0.5,
                 max_linear: float = 1.0,
                 heading_gain: float = 5.0,
                 heading_threshold: float = 0.2,
                 max_angular: float = 1.0,
                 metrics: Optional[NavigationMetrics] = None):
        """
        Initialize controller

        Args:
            session: Session state, mutated only by this controller
            gateway: Frame transform gateway
            velocity_sink: Destination of velocity commands
            goal_tolerance: Distance at or below which a waypoint is satisfied
            max_linear: Forward speed while approaching a waypoint
            heading_gain: Turn rate per radian of heading error below the threshold
            heading_threshold: Heading error above which turn rate saturates
            max_angular: Saturated turn rate
            metrics: Optional telemetry collector
        """
        self._session = session
        self._gateway = gateway
        self._velocity_sink = velocity_sink
        self.distance_controller = DistanceController(goal_tolerance, max_linear)
        self.heading_controller = HeadingController(heading_gain, heading_threshold, max_angular)
        self.metrics = metrics or NavigationMetrics()

        self._last_command: Optional[VelocityCommand] = None
        self._last_distance: Optional[float] = None
        self._last_heading_error: Optional[float] = None

        # Cursor/active read-modify-write happens under this lock
        self._lock = threading.Lock()

        logger.info(f"Navigation controller initialized: {len(session.store)} waypoint(s), "
                    f"working frame '{session.working_frame}', robot frame '{session.robot_frame}'")
        logger.info(f"  Goal tolerance: {goal_tolerance}, heading threshold: {heading_threshold} rad, "
                    f"gain: {heading_gain}")

    @property
    def session(self) -> NavigationSession:
        return self._session

    def start(self) -> bool:
        """
        Begin the run at the first waypoint

        Returns:
            True if the run was started, False if it had already been started
        """
        with self._lock:
            store = self._session.store
            if not store.begin():
                logger.warning(f"Navigation already started (cursor={store.cursor}), ignoring start")
                return False

            if store.is_complete():
                self._session.active = False
                self.metrics.mark_completed()
                logger.warning("No waypoints loaded - nothing to navigate")
                return True

            self._session.active = True
            logger.info(f"🚀 Navigation started with {len(store)} waypoint(s)")
            return True

    def tick(self) -> Optional[VelocityCommand]:
        """
        Run one control step

        Returns:
            Published VelocityCommand, or None when nothing was published
            (inactive, robot pose unavailable or target conversion failed)
        """
        with self._lock:
            self.metrics.add_tick()
            return self._tick()

    def _tick(self) -> Optional[VelocityCommand]:
        session = self._session
        store = session.store

        if not session.active or store.cursor < 0:
            return None

        # Current robot pose in the working frame
        lookup = self._gateway.lookup_transform(session.working_frame, session.robot_frame)
        if not lookup.ok:
            logger.warning(f"Robot pose unavailable, skipping tick: {lookup.error}")
            self.metrics.add_skipped_tick()
            return None

        robot = lookup.value
        x = robot.translation.x
        y = robot.translation.y
        _, _, yaw = robot.rotation.to_euler()
        logger.debug(f"Robot x, y, yaw: ({x:.3f}, {y:.3f}, {yaw:.3f})")

        # Target waypoint, converted for this comparison only
        waypoint = store.current()
        target = waypoint.position
        if waypoint.frame != session.working_frame:
            converted = self._gateway.convert_point(target, waypoint.frame, session.working_frame)
            if not converted.ok:
                logger.warning(f"Waypoint #{store.cursor + 1} cannot be expressed in "
                               f"'{session.working_frame}', skipping tick: {converted.error}")
                self.metrics.add_skipped_tick()
                return None
            target = converted.value

        dx = target.x - x
        dy = target.y - y
        distance = math.hypot(dx, dy)
        bearing = math.atan2(dy, dx)
        heading_error = normalize_angle(bearing - yaw)
        self._last_distance = distance
        self._last_heading_error = heading_error
        logger.debug(f"Waypoint #{store.cursor + 1}: target ({target.x:.3f}, {target.y:.3f}), "
                     f"dist={distance:.3f}, bearing={bearing:.3f}, error={heading_error:.3f}")

        linear = self.distance_controller.update(distance)
        if self.distance_controller.is_reached(distance):
            self._advance(distance)

        # Angular term stays on the waypoint just evaluated, even if it was satisfied
        angular = self.heading_controller.update(heading_error)

        command = VelocityCommand(linear=linear, angular=angular)
        self._velocity_sink.publish(command)
        self._last_command = command
        self.metrics.add_command()
        logger.debug(f"Command: linear={linear:.2f}, angular={angular:.2f}")
        return command

    def _advance(self, distance: float):
        session = self._session
        store = session.store
        reached = store.cursor + 1
        self.metrics.add_waypoint_reached(distance)

        if store.advance():
            logger.info(f"✅ Waypoint {reached}/{len(store)} reached (distance {distance:.2f}), "
                        f"{store.get_remaining_count()} remaining")
        else:
            session.active = False
            self.metrics.mark_completed()
            logger.info(f"🏁 Route complete! All {len(store)} waypoints reached.")

    def get_status(self) -> dict:
        """Consistent snapshot of the session for status reporting"""
        with self._lock:
            status = self._session.to_dict()
            current = self._session.store.current()
            status.update({
                'target_waypoint': current.to_dict() if current else None,
                'distance_to_target': self._last_distance,
                'heading_error': self._last_heading_error,
                'last_command': self._last_command.to_dict() if self._last_command else None
            })
            return status
