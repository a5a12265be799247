#!/usr/bin/env python3
import sys
import os
import logging
import signal
import threading
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from app import create_app
from config.settings import ConfigurationError, load_follower_config
from follower_manager import build_follower
from navigation.waypoint_manager import GeographicConversionError
from transforms.buffer import TransformBuffer
from transforms.gateway import FrameTransformGateway
from transforms.core.data_types import RigidTransform

def setup_logging():
    """Setup logging configuration"""
    log_level = logging.DEBUG if os.getenv('FOLLOWER_DEBUG', 'False').lower() == 'true' else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]

    # Add file handler if enabled
    if os.getenv('LOG_TO_FILE', 'False').lower() == 'true':
        log_dir = PROJECT_ROOT / 'logs'
        log_dir.mkdir(exist_ok=True)
        file_handler = logging.FileHandler(log_dir / 'waypoint_follower.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
    # Reduce noisy third-party loggers
    logging.getLogger('werkzeug').setLevel(logging.WARNING)

def setup_signal_handlers(follower):
    """Setup graceful shutdown signal handlers"""
    def signal_handler(signum, frame):
        logging.info(f"Received signal {signum}, shutting down gracefully...")
        follower.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

def build_transform_buffer(config):
    """Create the transform buffer and publish configured static transforms"""
    transform_buffer = TransformBuffer()
    for entry in config['static_transforms']:
        transform_buffer.set_static_transform(RigidTransform.planar(
            entry['parent'], entry['child'], entry['x'], entry['y'], yaw=entry['yaw']
        ))
        logging.info(f"Static transform {entry['parent']} -> {entry['child']}: "
                     f"({entry['x']}, {entry['y']}, yaw={entry['yaw']})")
    return transform_buffer

def start_http_server(follower, transform_buffer, host, port):
    """Serve the status API on a daemon thread"""
    app = create_app(follower, transform_buffer)
    thread = threading.Thread(
        target=app.run,
        kwargs={'host': host, 'port': port, 'debug': False, 'use_reloader': False, 'threaded': True},
        daemon=True,
        name="StatusAPI"
    )
    thread.start()
    return thread

def main():
    """Main application entry point"""
    setup_logging()

    logger = logging.getLogger(__name__)
    logger.info("Waypoint follower starting...")

    try:
        config = load_follower_config()
        transform_buffer = build_transform_buffer(config)
        gateway = FrameTransformGateway(
            transform_buffer,
            point_timeout=config['point_timeout'],
            pose_timeout=config['pose_timeout'],
            utm_frame=config['utm_frame']
        )
        follower = build_follower(config, gateway)
    except (ConfigurationError, GeographicConversionError) as e:
        logger.error(f"❌ Cannot start navigation: {e}")
        sys.exit(1)

    setup_signal_handlers(follower)

    host = config['http_host']
    port = config['http_port']
    logger.info(f"🌐 Status API: http://{host}:{port}/api/navigation/status")
    start_http_server(follower, transform_buffer, host, port)

    try:
        follower.start()
        follower.run()
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    except Exception as e:
        logger.error(f"Waypoint follower failed: {e}", exc_info=True)
        sys.exit(1)

    logger.info("Shutdown complete")

if __name__ == '__main__':
    main()
