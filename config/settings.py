import math
import os
import re
import logging
from typing import List, Mapping, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete"""
    pass

_SEPARATORS = re.compile(r"[,\s]+")

def parse_coordinate_list(raw: Optional[str], name: str) -> List[float]:
    """
    Parse a flat list of numbers such as "1.0, 2.5, -3, 4"

    Args:
        raw: Comma and/or whitespace separated values (None or blank = empty)
        name: Setting name used in error messages

    Returns:
        List of floats in input order
    """
    if raw is None or not raw.strip():
        return []

    values = []
    for token in _SEPARATORS.split(raw.strip()):
        if not token:
            continue
        try:
            value = float(token)
        except ValueError:
            raise ConfigurationError(f"{name} contains a non-numeric value: {token!r}")
        if not math.isfinite(value):
            raise ConfigurationError(f"{name} contains a non-finite value: {token!r}")
        values.append(value)
    return values

def parse_static_transforms(raw: Optional[str]) -> List[dict]:
    """
    Parse static transforms written as "parent:child:x:y[:yaw]" separated by ';'

    Returns:
        List of dicts with parent, child, x, y and yaw (radians)
    """
    if raw is None or not raw.strip():
        return []

    transforms = []
    for entry in raw.split(";"):
        entry = entry.strip()
        if not entry:
            continue
        parts = [part.strip() for part in entry.split(":")]
        if len(parts) not in (4, 5) or not parts[0] or not parts[1]:
            raise ConfigurationError(
                f"STATIC_TRANSFORMS entry {entry!r} must look like parent:child:x:y[:yaw]"
            )
        if parts[0] == parts[1]:
            raise ConfigurationError(f"STATIC_TRANSFORMS entry {entry!r} links frame '{parts[0]}' to itself")
        try:
            numbers = [float(part) for part in parts[2:]]
        except ValueError:
            raise ConfigurationError(f"STATIC_TRANSFORMS entry {entry!r} has a non-numeric value")
        if not all(math.isfinite(number) for number in numbers):
            raise ConfigurationError(f"STATIC_TRANSFORMS entry {entry!r} has a non-finite value")
        transforms.append({
            "parent": parts[0],
            "child": parts[1],
            "x": numbers[0],
            "y": numbers[1],
            "yaw": numbers[2] if len(numbers) == 3 else 0.0,
        })
    return transforms

def _get_float(env: Mapping[str, str], key: str, default: float) -> float:
    try:
        value = float(env.get(key, default))
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a number, got {env.get(key)!r}")
    if not math.isfinite(value):
        raise ConfigurationError(f"{key} must be finite, got {env.get(key)!r}")
    return value

def _get_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    return str(env.get(key, str(default))).strip().lower() == "true"

def _get_str(env: Mapping[str, str], key: str, default: str) -> str:
    value = str(env.get(key, default)).strip()
    return value or default

def load_follower_config(env: Optional[Mapping[str, str]] = None) -> dict:
    """
    Build the waypoint follower configuration from the environment

    Args:
        env: Mapping to read from (defaults to os.environ)

    Returns:
        Configuration dict
    """
    env = os.environ if env is None else env

    odom_frame = _get_str(env, "ODOM_FRAME", "odom")
    config = {
        # Frames
        "baselink_frame": _get_str(env, "BASELINK_FRAME", "base_link"),
        "map_frame": _get_str(env, "MAP_FRAME", "map"),
        "odom_frame": odom_frame,
        "launch_frame": _get_str(env, "LAUNCH_FRAME", odom_frame),
        "utm_frame": _get_str(env, "UTM_FRAME", "utm"),
        "include_start_pose": _get_bool(env, "INCLUDE_START_POSE", True),

        # Waypoints (flat x,y and lat,lon lists)
        "waypoints": parse_coordinate_list(env.get("WAYPOINTS"), "WAYPOINTS"),
        "gps_waypoints": parse_coordinate_list(env.get("GPS_WAYPOINTS"), "GPS_WAYPOINTS"),

        # Control loop
        "update_rate": _get_float(env, "NAV_UPDATE_RATE", 10.0),  # Hz
        "goal_tolerance": _get_float(env, "NAV_GOAL_TOLERANCE", 0.5),  # meters
        "heading_threshold": _get_float(env, "NAV_HEADING_THRESHOLD", 0.2),  # radians
        "heading_gain": _get_float(env, "NAV_HEADING_GAIN", 5.0),
        "max_linear": _get_float(env, "NAV_MAX_LINEAR", 1.0),
        "max_angular": _get_float(env, "NAV_MAX_ANGULAR", 1.0),

        # Transform lookups
        "point_timeout": _get_float(env, "TF_POINT_TIMEOUT", 10.0),  # seconds
        "pose_timeout": _get_float(env, "TF_POSE_TIMEOUT", 20.0),  # seconds
        "static_transforms": parse_static_transforms(env.get("STATIC_TRANSFORMS")),

        # HTTP status API
        "http_host": _get_str(env, "FOLLOWER_HOST", "0.0.0.0"),
        "http_port": int(_get_float(env, "FOLLOWER_PORT", 5002)),
    }

    errors = []
    if config["update_rate"] <= 0:
        errors.append(f"NAV_UPDATE_RATE must be positive, got {config['update_rate']}")
    if config["goal_tolerance"] < 0:
        errors.append(f"NAV_GOAL_TOLERANCE cannot be negative, got {config['goal_tolerance']}")
    if config["heading_threshold"] < 0:
        errors.append(f"NAV_HEADING_THRESHOLD cannot be negative, got {config['heading_threshold']}")
    for key, name in (("point_timeout", "TF_POINT_TIMEOUT"), ("pose_timeout", "TF_POSE_TIMEOUT")):
        if config[key] < 0:
            errors.append(f"{name} cannot be negative, got {config[key]}")
    if not 1 <= config["http_port"] <= 65535:
        errors.append(f"FOLLOWER_PORT must be between 1-65535, got {config['http_port']}")

    if errors:
        error_msg = "Follower configuration validation failed:\n" + "\n".join(f"  - {err}" for err in errors)
        logger.error(error_msg)
        raise ConfigurationError(error_msg)

    logger.info(f"Configuration loaded: {len(config['waypoints'])} waypoint values, "
                f"{len(config['gps_waypoints'])} GPS waypoint values")
    return config
