"""
Unit tests for the in-memory transform tree
"""
import math
import threading
import unittest

from transforms.buffer import TransformBuffer
from transforms.core.data_types import RigidTransform, TransformLookupError, Point


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestTransformBufferLookup(unittest.TestCase):
    """Chained and inverse lookups"""

    def setUp(self):
        self.buffer = TransformBuffer()

    def assertTranslation(self, transform, x, y, z=0.0):
        self.assertAlmostEqual(transform.translation.x, x, places=9)
        self.assertAlmostEqual(transform.translation.y, y, places=9)
        self.assertAlmostEqual(transform.translation.z, z, places=9)

    def test_direct_lookup(self):
        """Test lookup of a single edge"""
        self.buffer.set_transform(RigidTransform.planar("map", "base_link", 1.0, 2.0, yaw=math.pi / 2))

        transform = self.buffer.lookup_transform("map", "base_link")

        self.assertEqual(transform.parent_frame, "map")
        self.assertEqual(transform.child_frame, "base_link")
        self.assertTranslation(transform, 1.0, 2.0)
        self.assertAlmostEqual(transform.rotation.yaw, math.pi / 2)

    def test_inverse_lookup(self):
        """Test lookup against the edge direction"""
        self.buffer.set_transform(RigidTransform.planar("map", "base_link", 1.0, 2.0, yaw=math.pi / 2))

        transform = self.buffer.lookup_transform("base_link", "map")

        self.assertTranslation(transform, -2.0, 1.0)
        self.assertAlmostEqual(transform.rotation.yaw, -math.pi / 2)

    def test_chained_lookup(self):
        """Test lookup through an intermediate frame"""
        self.buffer.set_static_transform(RigidTransform.planar("map", "odom", 10.0, 0.0, yaw=math.pi / 2))
        self.buffer.set_transform(RigidTransform.planar("odom", "base_link", 1.0, 0.0))

        transform = self.buffer.lookup_transform("map", "base_link")

        self.assertTranslation(transform, 10.0, 1.0)
        self.assertAlmostEqual(transform.rotation.yaw, math.pi / 2)

    def test_lookup_between_siblings(self):
        """Test lookup between frames sharing a parent"""
        self.buffer.set_static_transform(RigidTransform.planar("map", "a", 1.0, 0.0))
        self.buffer.set_static_transform(RigidTransform.planar("map", "b", 0.0, 1.0))

        transform = self.buffer.lookup_transform("a", "b")

        self.assertTranslation(transform, -1.0, 1.0)

    def test_same_frame_is_identity(self):
        """Test that a frame relative to itself is the identity"""
        self.buffer.set_static_transform(RigidTransform.planar("map", "odom", 3.0, 4.0))

        transform = self.buffer.lookup_transform("odom", "odom")

        self.assertEqual(transform.translation, Point())

    def test_unknown_frame(self):
        """Test lookups involving an unknown frame"""
        self.buffer.set_static_transform(RigidTransform.planar("map", "odom", 3.0, 4.0))

        with self.assertRaises(TransformLookupError):
            self.buffer.lookup_transform("map", "base_link")
        self.assertFalse(self.buffer.can_transform("map", "base_link"))
        self.assertTrue(self.buffer.can_transform("map", "odom"))

    def test_disconnected_trees(self):
        """Test that frames in separate trees cannot be linked"""
        self.buffer.set_static_transform(RigidTransform.planar("map", "odom", 0.0, 0.0))
        self.buffer.set_static_transform(RigidTransform.planar("utm", "gps", 0.0, 0.0))

        with self.assertRaises(TransformLookupError):
            self.buffer.lookup_transform("map", "gps")

    def test_frame_cannot_be_own_parent(self):
        """Test that self-parenting is rejected"""
        with self.assertRaises(ValueError):
            self.buffer.set_transform(RigidTransform.planar("map", "map", 0.0, 0.0))

    def test_reparenting_replaces_edge(self):
        """Test that a new parent replaces the old edge"""
        self.buffer.set_static_transform(RigidTransform.planar("map", "base_link", 1.0, 0.0))
        self.buffer.set_static_transform(RigidTransform.planar("odom", "base_link", 2.0, 0.0))

        self.assertFalse(self.buffer.can_transform("map", "base_link"))
        self.assertEqual(self.buffer.frames(), {"odom", "base_link"})
        self.assertEqual(self.buffer.lookup_transform("odom", "base_link").translation.x, 2.0)


class TestTransformBufferHistory(unittest.TestCase):
    """Stamped lookups against dynamic edges"""

    def setUp(self):
        self.clock = FakeClock()
        self.buffer = TransformBuffer(cache_time=10.0, clock=self.clock)
        for stamp, x in ((1.0, 1.0), (2.0, 2.0)):
            self.buffer.set_transform(RigidTransform.planar("odom", "base_link", x, 0.0, stamp=stamp))

    def test_latest(self):
        """Test that the newest sample is used without a time"""
        self.assertEqual(self.buffer.lookup_transform("odom", "base_link").translation.x, 2.0)

    def test_at_time_uses_previous_sample(self):
        """Test stamped lookup uses the sample at or before the time"""
        self.assertEqual(self.buffer.lookup_transform("odom", "base_link", 1.5).translation.x, 1.0)
        self.assertEqual(self.buffer.lookup_transform("odom", "base_link", 2.0).translation.x, 2.0)

    def test_future_and_past_are_unavailable(self):
        """Test that times outside the history fail"""
        with self.assertRaises(TransformLookupError):
            self.buffer.lookup_transform("odom", "base_link", 3.0)
        with self.assertRaises(TransformLookupError):
            self.buffer.lookup_transform("odom", "base_link", 0.5)

    def test_unstamped_transform_uses_clock(self):
        """Test that unstamped dynamic transforms take the clock time"""
        self.clock.now = 5.0
        self.buffer.set_transform(RigidTransform.planar("odom", "base_link", 5.0, 0.0))

        transform = self.buffer.lookup_transform("odom", "base_link")

        self.assertEqual(transform.stamp, 5.0)
        self.assertEqual(transform.translation.x, 5.0)

    def test_out_of_order_samples(self):
        """Test that late samples are inserted in stamp order"""
        self.buffer.set_transform(RigidTransform.planar("odom", "base_link", 1.5, 0.0, stamp=1.5))

        self.assertEqual(self.buffer.lookup_transform("odom", "base_link").translation.x, 2.0)
        self.assertEqual(self.buffer.lookup_transform("odom", "base_link", 1.7).translation.x, 1.5)

    def test_old_samples_are_pruned(self):
        """Test that samples older than the cache time are dropped"""
        self.buffer.set_transform(RigidTransform.planar("odom", "base_link", 20.0, 0.0, stamp=20.0))

        with self.assertRaises(TransformLookupError):
            self.buffer.lookup_transform("odom", "base_link", 2.0)

    def test_static_edge_valid_at_any_time(self):
        """Test that static edges answer stamped lookups"""
        self.buffer.set_static_transform(RigidTransform.planar("map", "odom", 1.0, 0.0))

        transform = self.buffer.lookup_transform("map", "base_link", 1.0)

        self.assertAlmostEqual(transform.translation.x, 2.0)
        self.assertEqual(transform.stamp, 1.0)


class TestTransformBufferWait(unittest.TestCase):
    """Bounded waits"""

    def test_wait_returns_immediately_when_available(self):
        """Test waiting for an available transform"""
        buffer = TransformBuffer()
        buffer.set_static_transform(RigidTransform.planar("map", "odom", 0.0, 0.0))
        self.assertTrue(buffer.wait_for_transform("map", "odom", timeout=0.0))

    def test_wait_times_out(self):
        """Test that waiting for a missing transform times out"""
        buffer = TransformBuffer()
        self.assertFalse(buffer.wait_for_transform("map", "odom", timeout=0.0))

    def test_wait_wakes_on_publish(self):
        """Test that a publish wakes a waiting lookup"""
        buffer = TransformBuffer()
        publisher = threading.Timer(
            0.05, buffer.set_static_transform, args=(RigidTransform.planar("map", "odom", 0.0, 0.0),)
        )
        publisher.start()
        try:
            self.assertTrue(buffer.wait_for_transform("map", "odom", timeout=5.0))
        finally:
            publisher.cancel()


if __name__ == '__main__':
    unittest.main()
