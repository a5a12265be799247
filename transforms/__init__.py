"""Frame transform module"""
from .buffer import TransformBuffer
from .gateway import FrameTransformGateway

__all__ = ['TransformBuffer', 'FrameTransformGateway']
