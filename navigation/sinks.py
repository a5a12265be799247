"""Bundled velocity and path sinks"""
import logging
import threading
from typing import Optional

from .core.interfaces import VelocitySink, PathSink
from .core.data_types import VelocityCommand, Path

logger = logging.getLogger(__name__)


class LoggingVelocitySink(VelocitySink):
    """Logs velocity commands and keeps the most recent one"""

    def __init__(self):
        self._last_command: Optional[VelocityCommand] = None
        self._count = 0
        self._lock = threading.Lock()

    def publish(self, command: VelocityCommand):
        with self._lock:
            self._last_command = command
            self._count += 1
        logger.debug(f"cmd_vel: linear={command.linear:.2f}, angular={command.angular:.2f}")

    @property
    def last_command(self) -> Optional[VelocityCommand]:
        with self._lock:
            return self._last_command

    @property
    def count(self) -> int:
        with self._lock:
            return self._count


class LatestPathSink(PathSink):
    """Keeps the last published path for the HTTP API"""

    def __init__(self):
        self._path: Optional[Path] = None
        self._lock = threading.Lock()

    def publish(self, path: Path):
        with self._lock:
            self._path = path

    @property
    def latest(self) -> Optional[Path]:
        with self._lock:
            return self._path
