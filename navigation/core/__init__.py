"""Navigation core interfaces and data structures"""
from .interfaces import VelocitySink, PathSink
from .data_types import (
    Waypoint, VelocityCommand, NavigationSession, NavigationStatus, Path, StampedPose
)

__all__ = [
    'VelocitySink',
    'PathSink',
    'Waypoint',
    'VelocityCommand',
    'NavigationSession',
    'NavigationStatus',
    'Path',
    'StampedPose'
]
