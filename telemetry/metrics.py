"""Telemetry and metrics collection for the waypoint follower"""
from dataclasses import dataclass, field
from typing import List, Optional
from datetime import datetime
import statistics


@dataclass
class NavigationMetrics:
    """Metrics for navigation performance tracking"""

    # Control loop
    ticks: int = 0
    commands_published: int = 0
    skipped_ticks: int = 0  # robot pose or target unavailable

    # Waypoint metrics
    waypoints_reached: int = 0
    reach_distances: List[float] = field(default_factory=list)  # meters from waypoint when satisfied
    average_reach_distance: float = 0.0

    # Path reporting
    paths_published: int = 0
    path_entries_dropped: int = 0

    # Session info
    session_start: datetime = field(default_factory=datetime.now)
    session_completed: Optional[datetime] = None

    def add_tick(self):
        self.ticks += 1

    def add_command(self):
        self.commands_published += 1

    def add_skipped_tick(self):
        """Record a tick abandoned because of a transform failure"""
        self.skipped_ticks += 1

    def add_waypoint_reached(self, distance: float):
        """Record a waypoint being reached"""
        self.waypoints_reached += 1
        self.reach_distances.append(distance)
        self.average_reach_distance = statistics.mean(self.reach_distances)

    def add_path_published(self, dropped: int = 0):
        self.paths_published += 1
        self.path_entries_dropped += dropped

    def mark_completed(self):
        if self.session_completed is None:
            self.session_completed = datetime.now()

    def to_dict(self) -> dict:
        """Convert metrics to dictionary"""
        end = self.session_completed or datetime.now()
        return {
            'ticks': self.ticks,
            'commands_published': self.commands_published,
            'skipped_ticks': self.skipped_ticks,
            'waypoints_reached': self.waypoints_reached,
            'average_reach_distance_m': round(self.average_reach_distance, 3),
            'paths_published': self.paths_published,
            'path_entries_dropped': self.path_entries_dropped,
            'session_start': self.session_start.isoformat(),
            'session_completed': self.session_completed.isoformat() if self.session_completed else None,
            'session_duration_s': (end - self.session_start).total_seconds()
        }
