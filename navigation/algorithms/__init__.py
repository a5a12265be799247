"""Navigation algorithms implementations"""
from .heading_controller import HeadingController, DistanceController, normalize_angle

__all__ = ['HeadingController', 'DistanceController', 'normalize_angle']
