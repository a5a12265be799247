"""Geometry value types and transform results"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple


class TransformLookupError(Exception):
    """Raised by a transform provider when a relationship cannot be resolved"""
    pass


@dataclass(frozen=True)
class Point:
    """Cartesian point (meters)"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y, self.z + other.z)

    def __neg__(self) -> 'Point':
        return Point(-self.x, -self.y, -self.z)

    def flattened(self) -> 'Point':
        """Same point with z forced to 0 for ground navigation"""
        return Point(self.x, self.y, 0.0)

    def to_dict(self):
        return {'x': self.x, 'y': self.y, 'z': self.z}


@dataclass(frozen=True)
class Quaternion:
    """Unit quaternion rotation, identity by default"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @classmethod
    def from_yaw(cls, yaw: float) -> 'Quaternion':
        """Rotation about +z by yaw radians"""
        return cls(0.0, 0.0, math.sin(yaw / 2.0), math.cos(yaw / 2.0))

    def multiply(self, other: 'Quaternion') -> 'Quaternion':
        """Hamilton product self * other (apply other first, then self)"""
        return Quaternion(
            x=self.w * other.x + self.x * other.w + self.y * other.z - self.z * other.y,
            y=self.w * other.y - self.x * other.z + self.y * other.w + self.z * other.x,
            z=self.w * other.z + self.x * other.y - self.y * other.x + self.z * other.w,
            w=self.w * other.w - self.x * other.x - self.y * other.y - self.z * other.z,
        )

    def conjugate(self) -> 'Quaternion':
        return Quaternion(-self.x, -self.y, -self.z, self.w)

    def rotate(self, point: Point) -> Point:
        """Rotate a vector by this quaternion"""
        # t = 2 * (q x v); v' = v + w * t + q x t
        tx = 2.0 * (self.y * point.z - self.z * point.y)
        ty = 2.0 * (self.z * point.x - self.x * point.z)
        tz = 2.0 * (self.x * point.y - self.y * point.x)
        return Point(
            point.x + self.w * tx + (self.y * tz - self.z * ty),
            point.y + self.w * ty + (self.z * tx - self.x * tz),
            point.z + self.w * tz + (self.x * ty - self.y * tx),
        )

    def to_euler(self) -> Tuple[float, float, float]:
        """
        Roll-pitch-yaw decomposition (fixed axes, radians)

        Returns:
            Tuple of (roll, pitch, yaw)
        """
        sinr_cosp = 2.0 * (self.w * self.x + self.y * self.z)
        cosr_cosp = 1.0 - 2.0 * (self.x * self.x + self.y * self.y)
        roll = math.atan2(sinr_cosp, cosr_cosp)

        sinp = 2.0 * (self.w * self.y - self.z * self.x)
        pitch = math.asin(max(-1.0, min(1.0, sinp)))

        siny_cosp = 2.0 * (self.w * self.z + self.x * self.y)
        cosy_cosp = 1.0 - 2.0 * (self.y * self.y + self.z * self.z)
        yaw = math.atan2(siny_cosp, cosy_cosp)
        return roll, pitch, yaw

    @property
    def yaw(self) -> float:
        return self.to_euler()[2]

    def to_dict(self):
        return {'x': self.x, 'y': self.y, 'z': self.z, 'w': self.w}


@dataclass(frozen=True)
class Pose:
    """Position and orientation"""
    position: Point = field(default_factory=Point)
    orientation: Quaternion = field(default_factory=Quaternion)

    def to_dict(self):
        return {
            'position': self.position.to_dict(),
            'orientation': self.orientation.to_dict(),
            'yaw': self.orientation.yaw
        }


def _earliest(first: Optional[float], second: Optional[float]) -> Optional[float]:
    if first is None:
        return second
    if second is None:
        return first
    return min(first, second)


@dataclass(frozen=True)
class RigidTransform:
    """
    Relationship between two named frames at a point in time

    Maps coordinates expressed in child_frame into parent_frame, i.e. the
    translation and rotation are the pose of the child origin in the parent.
    """
    parent_frame: str
    child_frame: str
    translation: Point = field(default_factory=Point)
    rotation: Quaternion = field(default_factory=Quaternion)
    stamp: Optional[float] = None  # seconds, None for static/identity

    @classmethod
    def identity(cls, parent_frame: str, child_frame: str,
                 stamp: Optional[float] = None) -> 'RigidTransform':
        return cls(parent_frame, child_frame, Point(), Quaternion(), stamp)

    @classmethod
    def planar(cls, parent_frame: str, child_frame: str, x: float, y: float,
               yaw: float = 0.0, z: float = 0.0,
               stamp: Optional[float] = None) -> 'RigidTransform':
        return cls(parent_frame, child_frame, Point(x, y, z), Quaternion.from_yaw(yaw), stamp)

    def apply_point(self, point: Point) -> Point:
        return self.rotation.rotate(point) + self.translation

    def apply_pose(self, pose: Pose) -> Pose:
        return Pose(
            position=self.apply_point(pose.position),
            orientation=self.rotation.multiply(pose.orientation)
        )

    def compose(self, other: 'RigidTransform') -> 'RigidTransform':
        """
        Chain two transforms: self maps B -> A and other maps C -> B

        Returns:
            Transform mapping C -> A
        """
        return RigidTransform(
            parent_frame=self.parent_frame,
            child_frame=other.child_frame,
            translation=self.apply_point(other.translation),
            rotation=self.rotation.multiply(other.rotation),
            stamp=_earliest(self.stamp, other.stamp)
        )

    def inverse(self) -> 'RigidTransform':
        inverse_rotation = self.rotation.conjugate()
        return RigidTransform(
            parent_frame=self.child_frame,
            child_frame=self.parent_frame,
            translation=-inverse_rotation.rotate(self.translation),
            rotation=inverse_rotation,
            stamp=self.stamp
        )

    def to_dict(self):
        return {
            'parent_frame': self.parent_frame,
            'child_frame': self.child_frame,
            'translation': self.translation.to_dict(),
            'rotation': self.rotation.to_dict(),
            'stamp': self.stamp
        }


class TransformErrorKind(Enum):
    """Why a transform query failed"""
    LOOKUP_FAILED = "lookup_failed"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class TransformError:
    """Failed transform query between two frames"""
    kind: TransformErrorKind
    frame_in: str
    frame_out: str
    message: str = ""

    def __str__(self):
        text = f"{self.kind.value}: {self.frame_in} -> {self.frame_out}"
        if self.message:
            text += f" ({self.message})"
        return text


@dataclass(frozen=True)
class TransformResult:
    """Either a converted value or the error explaining why there is none"""
    value: Any = None
    error: Optional[TransformError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> 'TransformResult':
        return cls(value=value)

    @classmethod
    def failure(cls, kind: TransformErrorKind, frame_in: str, frame_out: str,
                message: str = "") -> 'TransformResult':
        return cls(error=TransformError(kind, frame_in, frame_out, message))
