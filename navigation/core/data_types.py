"""Data structures for navigation system"""
from dataclasses import dataclass, field
from typing import Optional, List
from enum import Enum
from datetime import datetime

from transforms.core.data_types import Point, Quaternion, Pose


class NavigationStatus(Enum):
    """Progress through the waypoint sequence"""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    DONE = "done"


@dataclass(frozen=True)
class Waypoint:
    """Navigation goal tagged with the frame it was authored in"""
    position: Point
    frame: str
    orientation: Quaternion = field(default_factory=Quaternion)

    @property
    def x(self) -> float:
        return self.position.x

    @property
    def y(self) -> float:
        return self.position.y

    @property
    def pose(self) -> Pose:
        return Pose(self.position, self.orientation)

    def to_dict(self):
        return {
            'frame': self.frame,
            'position': self.position.to_dict(),
            'orientation': self.orientation.to_dict()
        }


@dataclass
class VelocityCommand:
    """Forward speed and turn rate for the drive base"""
    linear: float  # forward, 1.0 = full speed
    angular: float  # positive = turn toward increasing bearing (counter-clockwise)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self):
        return {
            'linear': self.linear,
            'angular': self.angular,
            'timestamp': self.timestamp.isoformat()
        }


@dataclass(frozen=True)
class StampedPose:
    """Pose with its frame, as published in a path"""
    frame: str
    pose: Pose
    stamp: Optional[float] = None

    def to_dict(self):
        return {
            'frame': self.frame,
            'stamp': self.stamp,
            **self.pose.to_dict()
        }


@dataclass
class Path:
    """Ordered poses for visualization"""
    frame: str
    poses: List[StampedPose] = field(default_factory=list)
    stamp: Optional[float] = None

    def to_dict(self):
        return {
            'frame': self.frame,
            'stamp': self.stamp,
            'poses': [pose.to_dict() for pose in self.poses]
        }


@dataclass
class NavigationSession:
    """
    State of one run through the waypoint store

    Owned and mutated only by the navigation controller.
    """
    store: 'WaypointStore'
    working_frame: str = "map"
    robot_frame: str = "base_link"
    launch_frame: str = "odom"
    active: bool = False

    @property
    def status(self) -> NavigationStatus:
        if self.store.cursor < 0:
            return NavigationStatus.NOT_STARTED
        if self.active:
            return NavigationStatus.RUNNING
        return NavigationStatus.DONE

    def to_dict(self):
        return {
            'status': self.status.value,
            'active': self.active,
            'cursor': self.store.cursor,
            'total_waypoints': len(self.store),
            'waypoints_remaining': self.store.get_remaining_count(),
            'working_frame': self.working_frame,
            'robot_frame': self.robot_frame,
            'launch_frame': self.launch_frame
        }
