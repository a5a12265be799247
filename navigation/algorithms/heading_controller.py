"""Heading and speed control laws for waypoint following"""
import logging
import math

logger = logging.getLogger(__name__)


def normalize_angle(angle: float) -> float:
    """
    Wrap an angle difference into (-pi, pi]

    A single correction is enough because the inputs are a bearing and a yaw
    both in (-pi, pi], so their difference lies in (-2pi, 2pi).
    """
    if angle > math.pi:
        angle -= 2.0 * math.pi
    elif angle <= -math.pi:
        angle += 2.0 * math.pi
    return angle


class HeadingController:
    """
    Saturating proportional controller for heading error

    Turns at full rate while the error is above the threshold and
    proportionally below it. With the default gain and threshold both
    branches give 1.0 at the threshold.
    """

    def __init__(self, gain: float = 5.0, threshold: float = 0.2, max_output: float = 1.0):
        """
        Initialize heading controller

        Args:
            gain: Proportional gain below the threshold
            threshold: Heading error (radians) above which output saturates
            max_output: Saturated turn rate
        """
        self.gain = gain
        self.threshold = threshold
        self.max_output = max_output

        if not math.isclose(gain * threshold, max_output):
            logger.warning(f"Heading control law is discontinuous: gain*threshold="
                           f"{gain * threshold:.3f}, max_output={max_output:.3f}")

    def update(self, error: float) -> float:
        """
        Turn rate for a heading error

        Args:
            error: Heading error in radians, positive = target to the left

        Returns:
            Turn rate carrying the sign of the error
        """
        magnitude = abs(error)
        if magnitude > self.threshold:
            output = self.max_output
        else:
            output = self.gain * magnitude
        return -output if error < 0 else output


class DistanceController:
    """Full forward speed until within tolerance of the goal, then stop"""

    def __init__(self, tolerance: float = 0.5, max_output: float = 1.0):
        self.tolerance = tolerance
        self.max_output = max_output

    def is_reached(self, distance: float) -> bool:
        return distance <= self.tolerance

    def update(self, distance: float) -> float:
        return 0.0 if self.is_reached(distance) else self.max_output
