"""
Waypoint Follower - Main integration class
Wires the waypoint store, navigation controller and path reporter to a fixed-rate loop
"""
import logging
import threading
import time
from typing import Optional

from transforms.gateway import FrameTransformGateway
from navigation.core.data_types import NavigationSession, VelocityCommand
from navigation.core.interfaces import VelocitySink, PathSink
from navigation.navigator import NavigationController
from navigation.path_reporter import PathReporter
from navigation.sinks import LoggingVelocitySink, LatestPathSink
from navigation.waypoint_manager import load_waypoint_store
from telemetry.metrics import NavigationMetrics

logger = logging.getLogger(__name__)


class WaypointFollower:
    """
    Runs the control loop: every tick publishes the remaining route, then
    lets the controller command the robot toward the current waypoint
    """

    def __init__(self,
                 controller: NavigationController,
                 path_reporter: PathReporter,
                 update_rate: float = 10.0,
                 velocity_sink: Optional[VelocitySink] = None,
                 path_sink: Optional[PathSink] = None):
        """
        Initialize follower

        Args:
            controller: Navigation controller
            path_reporter: Path reporter sharing the controller's session
            update_rate: Ticks per second
            velocity_sink: Sink the controller publishes to (kept for status reporting)
            path_sink: Sink the path reporter publishes to (kept for status reporting)
        """
        self.controller = controller
        self.path_reporter = path_reporter
        self.update_rate = update_rate
        self.velocity_sink = velocity_sink
        self.path_sink = path_sink
        self.metrics = controller.metrics

        self._stop_event = threading.Event()
        self._is_running = False
        self._max_consecutive_errors = 3

        logger.info(f"Waypoint follower initialized ({update_rate:.1f} Hz)")

    @property
    def session(self) -> NavigationSession:
        return self.controller.session

    @property
    def is_running(self) -> bool:
        return self._is_running

    def start(self) -> bool:
        """Start navigating the loaded waypoints"""
        return self.controller.start()

    def tick(self) -> Optional[VelocityCommand]:
        """One loop iteration: path report first, then the control step"""
        self.path_reporter.publish()
        return self.controller.tick()

    def run(self, max_ticks: Optional[int] = None):
        """
        Tick at the configured rate until stop() is called

        Args:
            max_ticks: Optional number of ticks after which to return
        """
        period = 1.0 / self.update_rate
        ticks = 0
        consecutive_errors = 0
        self._is_running = True
        self._stop_event.clear()
        logger.info("Control loop started")

        try:
            while not self._stop_event.is_set():
                started = time.monotonic()
                try:
                    self.tick()
                    consecutive_errors = 0
                except Exception as e:
                    consecutive_errors += 1
                    logger.error(f"Error in control loop: {e}", exc_info=True)
                    if consecutive_errors >= self._max_consecutive_errors:
                        logger.critical("Too many control loop errors, stopping")
                        raise

                ticks += 1
                if max_ticks is not None and ticks >= max_ticks:
                    break

                remaining = period - (time.monotonic() - started)
                if remaining > 0:
                    self._stop_event.wait(timeout=remaining)
        finally:
            self._is_running = False
            logger.info(f"Control loop stopped after {ticks} tick(s)")

    def stop(self):
        """Interrupt the control loop"""
        self._stop_event.set()

    def get_status(self) -> dict:
        """Status snapshot for the HTTP API"""
        status = self.controller.get_status()
        status['is_running'] = self._is_running
        status['update_rate'] = self.update_rate
        return status

    def get_waypoints(self) -> list:
        return [waypoint.to_dict() for waypoint in self.session.store]


def build_follower(config: dict,
                   gateway: FrameTransformGateway,
                   velocity_sink: Optional[VelocitySink] = None,
                   path_sink: Optional[PathSink] = None) -> WaypointFollower:
    """
    Load waypoints and assemble a follower from configuration

    Raises:
        ConfigurationError: malformed waypoint lists
        GeographicConversionError: a GPS waypoint could not be converted
    """
    store = load_waypoint_store(
        config['waypoints'],
        config['gps_waypoints'],
        gateway,
        launch_frame=config['launch_frame'],
        working_frame=config['map_frame']
    )
    session = NavigationSession(
        store=store,
        working_frame=config['map_frame'],
        robot_frame=config['baselink_frame'],
        launch_frame=config['launch_frame']
    )

    velocity_sink = velocity_sink or LoggingVelocitySink()
    path_sink = path_sink or LatestPathSink()
    metrics = NavigationMetrics()

    controller = NavigationController(
        session,
        gateway,
        velocity_sink,
        goal_tolerance=config['goal_tolerance'],
        max_linear=config['max_linear'],
        heading_gain=config['heading_gain'],
        heading_threshold=config['heading_threshold'],
        max_angular=config['max_angular'],
        metrics=metrics
    )
    path_reporter = PathReporter(
        session,
        gateway,
        path_sink,
        include_start_pose=config['include_start_pose'],
        metrics=metrics
    )
    return WaypointFollower(
        controller,
        path_reporter,
        update_rate=config['update_rate'],
        velocity_sink=velocity_sink,
        path_sink=path_sink
    )
