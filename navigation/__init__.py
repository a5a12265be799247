"""Navigation system module"""
from .navigator import NavigationController
from .path_reporter import PathReporter
from .waypoint_manager import WaypointStore, GeographicConversionError, load_waypoint_store

__all__ = [
    'NavigationController',
    'PathReporter',
    'WaypointStore',
    'GeographicConversionError',
    'load_waypoint_store'
]
