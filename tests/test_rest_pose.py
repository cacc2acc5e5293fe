import unittest

import numpy as np
from scipy.spatial.transform import Rotation as R

from mock_rigs import euler_quat, make_source_skeleton
from rigretarget import (
    AnimationClip,
    AnimationTrack,
    CoordinateConvention,
    Joint,
    PropertyKind,
    RestPoseResolver,
    Skeleton,
    Transform,
    retarget_positions,
    retarget_rotations,
)
from rigretarget.utils.geometry import quaternion_inverse, quaternion_multiply


class TestQuaternionMath(unittest.TestCase):
    def test_multiply_matches_scipy(self):
        a = R.random(4, 1)
        b = R.random(4, 2)
        got = quaternion_multiply(a.as_quat(), b.as_quat())
        expected = (a * b).as_quat()
        dots = np.abs(np.sum(got * expected, axis=-1))
        np.testing.assert_allclose(dots, 1.0, atol=1e-12)

    def test_inverse(self):
        q = euler_quat("xyz", [10, 20, 30])
        np.testing.assert_allclose(quaternion_multiply(q, quaternion_inverse(q)), [0, 0, 0, 1], atol=1e-12)

    def test_transform_matrix_roundtrip(self):
        t = Transform([1, 2, 3], euler_quat("z", 30), [2, 2, 2])
        back = Transform.from_matrix(t.to_matrix())
        np.testing.assert_allclose(back.translation, [1, 2, 3])
        np.testing.assert_allclose(back.scale, [2, 2, 2])
        self.assertAlmostEqual(abs(np.dot(back.rotation, t.rotation)), 1.0)

    def test_transform_rotation_normalized(self):
        t = Transform(rotation=[0, 0, 0, 2.0])
        np.testing.assert_allclose(t.rotation, [0, 0, 0, 1])
        t = Transform(rotation=euler_quat("x", 40) * 0.25)
        self.assertAlmostEqual(np.linalg.norm(t.rotation), 1.0)

    def test_transform_rejects_zero_rotation(self):
        with self.assertRaises(ValueError):
            Transform(rotation=[0, 0, 0, 0])


class TestSkeleton(unittest.TestCase):
    def test_world_rotation_composes_chain(self):
        skel = Skeleton([
            Joint("a", None, Transform(rotation=euler_quat("z", 30))),
            Joint("b", "a", Transform([1, 0, 0], euler_quat("z", 60))),
        ])
        expected = euler_quat("z", 90)
        self.assertAlmostEqual(abs(np.dot(skel.world_rotation("b"), expected)), 1.0)

    def test_world_position_includes_origin(self):
        skel = Skeleton(
            [
                Joint("a", None, Transform([0, 1, 0])),
                Joint("b", "a", Transform([0, 2, 0])),
            ],
            origin=Transform([0, 10, 0]),
        )
        np.testing.assert_allclose(skel.world_position("b"), [0, 13, 0])
        np.testing.assert_allclose(skel.origin_position(), [0, 10, 0])

    def test_rejects_duplicate_names(self):
        with self.assertRaises(ValueError):
            Skeleton([Joint("a"), Joint("a", "a")])

    def test_requires_single_root(self):
        with self.assertRaises(ValueError):
            Skeleton([Joint("a"), Joint("b")])

    def test_rejects_unknown_parent(self):
        with self.assertRaises(ValueError):
            Skeleton([Joint("a"), Joint("b", "missing")])

    def test_rejects_cycles(self):
        with self.assertRaises(ValueError):
            Skeleton([Joint("root"), Joint("a", "b"), Joint("b", "a")])


class TestRestPoseResolver(unittest.TestCase):
    def setUp(self):
        self.skel = make_source_skeleton()
        self.resolver = RestPoseResolver(self.skel)

    def test_root_parent_is_identity(self):
        np.testing.assert_array_equal(self.resolver.parent_rest_world_rotation("mixamorigHips"), [0, 0, 0, 1])

    def test_parent_rotation_is_parent_world(self):
        np.testing.assert_allclose(
            self.resolver.parent_rest_world_rotation("mixamorigLeftArm"),
            self.skel.world_rotation("mixamorigSpine"),
        )
        np.testing.assert_allclose(
            self.resolver.rest_world_rotation("mixamorigLeftArm"),
            self.skel.world_rotation("mixamorigLeftArm"),
        )

    def test_unknown_joint(self):
        self.assertIsNone(self.resolver.resolve("mixamorigNeck"))
        with self.assertRaises(KeyError):
            self.resolver.rest_world_rotation("mixamorigNeck")

    def test_results_cached(self):
        first = self.resolver.resolve("mixamorigSpine")
        self.assertIs(self.resolver.resolve("mixamorigSpine"), first)


class TestKeyframeTransforms(unittest.TestCase):
    def test_rotation_sample_count_preserved(self):
        quats = R.random(7, 5).as_quat().reshape(-1)
        out = retarget_rotations(quats, euler_quat("x", 10), euler_quat("y", 20))
        self.assertEqual(out.shape, (28,))

    def test_legacy_rotation_flip(self):
        q = euler_quat("xyz", [10, 20, 30])
        modern = retarget_rotations(q, [0, 0, 0, 1], [0, 0, 0, 1])
        legacy = retarget_rotations(q, [0, 0, 0, 1], [0, 0, 0, 1], CoordinateConvention.LEGACY)
        np.testing.assert_allclose(modern, q)
        np.testing.assert_allclose(legacy, q * [-1, 1, -1, 1])

    def test_positions(self):
        values = np.array([0, 10, 0, 2, 4, 6], dtype=float)
        np.testing.assert_allclose(retarget_positions(values, 1.5), [0, 15, 0, 3, 6, 9])
        np.testing.assert_allclose(
            retarget_positions(values, 1.5, CoordinateConvention.LEGACY), [0, 15, 0, -3, 6, -9]
        )
        # Input untouched
        np.testing.assert_array_equal(values, [0, 10, 0, 2, 4, 6])


class TestAnimationTrack(unittest.TestCase):
    def test_channel_parsing(self):
        track = AnimationTrack("mixamorigHips.position", [0.0], [0, 1, 0])
        self.assertEqual(track.joint_name, "mixamorigHips")
        self.assertIs(track.property_kind, PropertyKind.POSITION)
        self.assertEqual(track.stride, 3)
        track.validate()

    def test_unsupported_property(self):
        track = AnimationTrack("mixamorigHips.scale", [0.0], [1, 1, 1])
        with self.assertRaises(ValueError):
            track.validate()

    def test_non_unit_rotation_rejected(self):
        track = AnimationTrack("mixamorigHips.quaternion", [0.0], [0, 0, 0, 2])
        with self.assertRaises(ValueError):
            track.validate()

    def test_find_by_name(self):
        clips = [AnimationClip("idle", 1.0), AnimationClip("mixamo.com", 2.0)]
        self.assertEqual(AnimationClip.find_by_name(clips, "mixamo.com").duration, 2.0)
        self.assertIsNone(AnimationClip.find_by_name(clips, "Mixamo.com"))


if __name__ == "__main__":
    unittest.main()
