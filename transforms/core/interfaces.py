"""Transform provider interface"""
from abc import ABC, abstractmethod
from typing import Optional
from .data_types import RigidTransform


class TransformProvider(ABC):
    """Read-only queries against externally maintained frame relationships"""

    @abstractmethod
    def can_transform(self, target_frame: str, source_frame: str,
                      at_time: Optional[float] = None) -> bool:
        """Check whether source_frame can currently be resolved into target_frame"""
        pass

    @abstractmethod
    def lookup_transform(self, target_frame: str, source_frame: str,
                         at_time: Optional[float] = None) -> RigidTransform:
        """
        Look up the transform mapping source_frame coordinates into target_frame

        Args:
            target_frame: Frame the result is expressed in
            source_frame: Frame being looked up
            at_time: Stamp in seconds, None for latest available

        Raises:
            TransformLookupError: relationship unknown or not available at at_time
        """
        pass

    @abstractmethod
    def wait_for_transform(self, target_frame: str, source_frame: str,
                           at_time: Optional[float] = None,
                           timeout: float = 0.0) -> bool:
        """Block up to timeout seconds for the relationship; returns availability"""
        pass
