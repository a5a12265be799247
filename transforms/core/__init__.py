"""Transform core interfaces and data structures"""
from .interfaces import TransformProvider
from .data_types import (
    Point, Quaternion, Pose, RigidTransform,
    TransformError, TransformErrorKind, TransformResult, TransformLookupError
)

__all__ = [
    'TransformProvider',
    'Point',
    'Quaternion',
    'Pose',
    'RigidTransform',
    'TransformError',
    'TransformErrorKind',
    'TransformResult',
    'TransformLookupError'
]
