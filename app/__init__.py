from flask import Flask, jsonify, request
from datetime import datetime
import logging
import math
import os

from transforms.buffer import TransformBuffer
from transforms.core.data_types import RigidTransform

logger = logging.getLogger(__name__)


class FollowerAppError(Exception):
    """Application-specific error for the waypoint follower API"""
    pass


def _parse_transform(data):
    """
    Validate a transform posted as JSON

    Returns:
        tuple: (RigidTransform or None, static: bool, error_message: str or None)
    """
    if not isinstance(data, dict):
        return None, False, "No data provided"

    parent = data.get('parent')
    child = data.get('child')
    if not parent or not child:
        return None, False, "parent and child are required"
    if parent == child:
        return None, False, "parent and child must differ"

    values = {}
    for key, default in (('x', None), ('y', None), ('z', 0.0), ('yaw', 0.0)):
        value = data.get(key, default)
        if value is None:
            return None, False, f"{key} is required"
        try:
            value = float(value)
        except (ValueError, TypeError):
            return None, False, f"{key} must be a valid number"
        if math.isnan(value) or math.isinf(value):
            return None, False, f"Invalid {key} value"
        values[key] = value

    stamp = data.get('stamp')
    if stamp is not None:
        try:
            stamp = float(stamp)
        except (ValueError, TypeError):
            return None, False, "stamp must be a valid number"

    transform = RigidTransform.planar(
        str(parent), str(child), values['x'], values['y'],
        yaw=values['yaw'], z=values['z'], stamp=stamp
    )
    return transform, bool(data.get('static', False)), None


def create_app(follower=None, transform_buffer: TransformBuffer = None):
    """
    Flask application factory

    Args:
        follower: WaypointFollower to report on (None = not initialized)
        transform_buffer: Buffer accepting POST /api/transforms (None = read-only)
    """
    app = Flask(__name__)

    app.config.update(
        SECRET_KEY=os.getenv('FLASK_SECRET_KEY', os.urandom(24)),
        DEBUG=os.getenv('FOLLOWER_DEBUG', 'False').lower() == 'true',
    )
    app.extensions['waypoint_follower'] = follower
    app.extensions['transform_buffer'] = transform_buffer

    _register_routes(app)
    _register_error_handlers(app)

    return app


def _get_follower(app):
    follower = app.extensions.get('waypoint_follower')
    if follower is None:
        raise FollowerAppError("Waypoint follower not initialized")
    return follower


def _register_error_handlers(app):
    """Register global error handlers"""

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Endpoint not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500

    @app.errorhandler(FollowerAppError)
    def follower_error(error):
        logger.error(f"Follower application error: {error}")
        return jsonify({"error": str(error)}), 503


def _register_routes(app):
    """Register Flask routes"""

    @app.route('/api/health')
    def api_health():
        follower = app.extensions.get('waypoint_follower')
        return jsonify({
            "status": "ok" if follower is not None else "degraded",
            "follower_initialized": follower is not None,
            "timestamp": datetime.now().isoformat()
        })

    @app.route('/api/navigation/status')
    def api_nav_status():
        """Get navigation session status"""
        follower = _get_follower(app)
        return jsonify(follower.get_status())

    @app.route('/api/navigation/path')
    def api_nav_path():
        """Get the last published remaining route"""
        follower = _get_follower(app)
        path_sink = follower.path_sink
        path = getattr(path_sink, 'latest', None)
        if path is None:
            return jsonify({"path": None, "message": "No path published yet"})
        return jsonify({"path": path.to_dict()})

    @app.route('/api/navigation/waypoints', methods=['GET'])
    def api_get_waypoints():
        """Get all loaded waypoints"""
        follower = _get_follower(app)
        waypoints = follower.get_waypoints()
        return jsonify({
            "waypoints": waypoints,
            "count": len(waypoints),
            "cursor": follower.session.store.cursor
        })

    @app.route('/api/metrics')
    def api_metrics():
        """Get navigation telemetry"""
        follower = _get_follower(app)
        return jsonify({
            "success": True,
            "metrics": follower.metrics.to_dict(),
            "timestamp": datetime.now().isoformat()
        })

    @app.route('/api/transforms', methods=['POST'])
    def api_set_transform():
        """Publish a frame relationship into the transform buffer"""
        transform_buffer = app.extensions.get('transform_buffer')
        if transform_buffer is None:
            raise FollowerAppError("Transform buffer not available")

        transform, static, error = _parse_transform(request.get_json(silent=True))
        if error:
            return jsonify({"error": error, "success": False}), 400

        try:
            transform_buffer.set_transform(transform, static=static)
        except ValueError as e:
            return jsonify({"error": str(e), "success": False}), 400

        return jsonify({
            "success": True,
            "transform": transform.to_dict(),
            "static": static
        })
