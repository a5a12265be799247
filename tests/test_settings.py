"""
Unit tests for environment configuration loading
"""
import math
import unittest

from config.settings import (
    ConfigurationError, load_follower_config, parse_coordinate_list, parse_static_transforms
)


class TestParseCoordinateList(unittest.TestCase):

    def test_comma_and_whitespace_separated(self):
        """Test parsing values separated by commas and whitespace"""
        self.assertEqual(parse_coordinate_list("1.0, 2.5 -3,4", "WAYPOINTS"), [1.0, 2.5, -3.0, 4.0])

    def test_blank_is_empty(self):
        """Test that unset or blank lists are empty"""
        self.assertEqual(parse_coordinate_list(None, "WAYPOINTS"), [])
        self.assertEqual(parse_coordinate_list("   ", "WAYPOINTS"), [])

    def test_non_numeric_value(self):
        """Test that non-numeric values name the offending setting"""
        with self.assertRaises(ConfigurationError) as context:
            parse_coordinate_list("1.0, north", "GPS_WAYPOINTS")
        self.assertIn("GPS_WAYPOINTS", str(context.exception))

    def test_non_finite_values(self):
        """Test that nan and infinite coordinates are rejected"""
        for raw in ("nan, 1.0", "1.0 inf", "-inf,2", "1e400, 0"):
            with self.assertRaises(ConfigurationError, msg=raw):
                parse_coordinate_list(raw, "WAYPOINTS")


class TestParseStaticTransforms(unittest.TestCase):

    def test_entries(self):
        """Test parsing static transform entries with and without yaw"""
        transforms = parse_static_transforms("map:odom:1:2; utm:map:500000:5700000:1.57")

        self.assertEqual(len(transforms), 2)
        self.assertEqual(transforms[0], {"parent": "map", "child": "odom", "x": 1.0, "y": 2.0, "yaw": 0.0})
        self.assertEqual(transforms[1]["parent"], "utm")
        self.assertAlmostEqual(transforms[1]["yaw"], 1.57)

    def test_malformed_entries(self):
        """Test that malformed static transform entries are rejected"""
        for raw in ("map:odom:1", "map:odom:x:2", ":odom:1:2", "map:odom:1:2:3:4",
                    "map:map:0:0", "map:odom:nan:0", "map:odom:0:0:inf"):
            with self.assertRaises(ConfigurationError, msg=raw):
                parse_static_transforms(raw)


class TestLoadFollowerConfig(unittest.TestCase):

    def test_defaults(self):
        """Test configuration defaults"""
        config = load_follower_config({})

        self.assertEqual(config['baselink_frame'], 'base_link')
        self.assertEqual(config['map_frame'], 'map')
        self.assertEqual(config['odom_frame'], 'odom')
        self.assertEqual(config['launch_frame'], 'odom')
        self.assertEqual(config['utm_frame'], 'utm')
        self.assertTrue(config['include_start_pose'])
        self.assertEqual(config['waypoints'], [])
        self.assertEqual(config['gps_waypoints'], [])
        self.assertEqual(config['update_rate'], 10.0)
        self.assertEqual(config['goal_tolerance'], 0.5)
        self.assertEqual(config['heading_threshold'], 0.2)
        self.assertEqual(config['heading_gain'], 5.0)
        self.assertEqual(config['point_timeout'], 10.0)
        self.assertEqual(config['pose_timeout'], 20.0)
        self.assertEqual(config['http_port'], 5002)

    def test_launch_frame_follows_odom_frame(self):
        """Test that LAUNCH_FRAME defaults to ODOM_FRAME"""
        config = load_follower_config({'ODOM_FRAME': 'wheel_odom'})
        self.assertEqual(config['launch_frame'], 'wheel_odom')

        config = load_follower_config({'ODOM_FRAME': 'wheel_odom', 'LAUNCH_FRAME': 'map'})
        self.assertEqual(config['launch_frame'], 'map')

    def test_overrides(self):
        """Test that environment values override defaults"""
        config = load_follower_config({
            'WAYPOINTS': '1,2,3,4',
            'GPS_WAYPOINTS': '52.1 21.0',
            'INCLUDE_START_POSE': 'false',
            'NAV_UPDATE_RATE': '20',
            'STATIC_TRANSFORMS': 'map:odom:0:0:' + str(math.pi),
        })

        self.assertEqual(config['waypoints'], [1.0, 2.0, 3.0, 4.0])
        self.assertEqual(config['gps_waypoints'], [52.1, 21.0])
        self.assertFalse(config['include_start_pose'])
        self.assertEqual(config['update_rate'], 20.0)
        self.assertAlmostEqual(config['static_transforms'][0]['yaw'], math.pi)

    def test_invalid_numbers(self):
        """Test that non-numeric and non-finite settings are rejected"""
        with self.assertRaises(ConfigurationError):
            load_follower_config({'NAV_GOAL_TOLERANCE': 'half'})
        with self.assertRaises(ConfigurationError):
            load_follower_config({'NAV_GOAL_TOLERANCE': 'nan'})

    def test_non_finite_waypoints_rejected(self):
        """Test that nan waypoints never reach the controller"""
        with self.assertRaises(ConfigurationError):
            load_follower_config({'WAYPOINTS': 'nan,nan', 'LAUNCH_FRAME': 'map'})

    def test_self_linked_static_transform_rejected(self):
        """Test that a frame linked to itself is a configuration error"""
        with self.assertRaises(ConfigurationError):
            load_follower_config({'STATIC_TRANSFORMS': 'map:odom:0:0; map:map:0:0'})

    def test_validation_errors(self):
        """Test range validation of numeric settings"""
        for env in ({'NAV_UPDATE_RATE': '0'}, {'TF_POSE_TIMEOUT': '-1'}, {'FOLLOWER_PORT': '70000'}):
            with self.assertRaises(ConfigurationError, msg=env):
                load_follower_config(env)


if __name__ == '__main__':
    unittest.main()
