"""Navigation output interfaces"""
from abc import ABC, abstractmethod
from .data_types import VelocityCommand, Path


class VelocitySink(ABC):
    """Receives velocity commands at tick rate; nothing is acknowledged"""

    @abstractmethod
    def publish(self, command: VelocityCommand):
        """Send velocity command downstream"""
        pass


class PathSink(ABC):
    """Receives the remaining route for visualization"""

    @abstractmethod
    def publish(self, path: Path):
        """Send path downstream"""
        pass
