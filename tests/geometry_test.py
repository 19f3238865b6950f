#!/usr/bin/env python3
"""
幾何プリミティブのテスト

ベクトル・クォータニオン・ボックスの演算と固定小数点整形、
グリッド丸め、ヨー角抽出、回転行列を検証します。
"""

import math
import os
import sys
import unittest

import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from annoscene.geometry import (
    Vector, Vector2, Quaternion, Box,
    format_fixed, snap_to_grid,
    quaternion_to_yaw, rotation_matrix, rotate_points
)


class TestVector(unittest.TestCase):
    """ベクトル演算テスト"""

    def test_arithmetic_returns_new_instances(self):
        a = Vector(1.0, 2.0, 3.0)
        b = Vector(4.0, 5.0, 6.0)
        self.assertEqual(a.add(b), Vector(5.0, 7.0, 9.0))
        self.assertEqual(b.sub(a), Vector(3.0, 3.0, 3.0))
        self.assertEqual(a.mul(2), Vector(2.0, 4.0, 6.0))
        self.assertEqual(a.mul(b), Vector(4.0, 10.0, 18.0))
        self.assertEqual(b.div(2), Vector(2.0, 2.5, 3.0))
        # 元の値は変わらない
        self.assertEqual(a, Vector(1.0, 2.0, 3.0))

    def test_down_up(self):
        a = Vector(1.0, -2.0, 3.0)
        b = Vector(-1.0, 5.0, 3.0)
        self.assertEqual(a.down(b), Vector(-1.0, -2.0, 3.0))
        self.assertEqual(a.up(b), Vector(1.0, 5.0, 3.0))

    def test_from_array_length_check(self):
        """要素数が (i+1)*3 未満なら None"""
        arr = [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]
        self.assertEqual(Vector.from_array(arr, 0), Vector(0.0, 1.0, 2.0))
        self.assertEqual(Vector.from_array(arr, 1), Vector(3.0, 4.0, 5.0))
        self.assertIsNone(Vector.from_array(arr, 2))
        self.assertIsNone(Vector.from_array(arr[:5], 1))
        self.assertIsNone(Vector.from_array(None))

    def test_from_array_numpy(self):
        arr = np.array([1.5, 2.5, 3.5], dtype=np.float32)
        v = Vector.from_array(arr)
        self.assertEqual(v, Vector(1.5, 2.5, 3.5))
        self.assertIsInstance(v.x, float)

    def test_parse(self):
        self.assertEqual(Vector.parse({"x": "1.5", "y": "-2", "z": "0"}), Vector(1.5, -2.0, 0.0))

    def test_parse_missing_or_invalid_field(self):
        """欠落・不正値は部分的なベクトルではなく None"""
        self.assertIsNone(Vector.parse(None))
        self.assertIsNone(Vector.parse({"x": "1", "y": "2"}))
        self.assertIsNone(Vector.parse({"x": "1", "y": "", "z": "3"}))
        self.assertIsNone(Vector.parse({"x": "1", "y": "abc", "z": "3"}))
        self.assertIsNone(Vector.parse({"x": "nan", "y": "0", "z": "0"}))

    def test_to_fixed_text(self):
        self.assertEqual(
            Vector(1.23456789, 0, 0).to_fixed_text(3),
            {"x": "1.235", "y": "0.000", "z": "0.000"}
        )
        self.assertEqual(
            Vector(-1.0, 0.5, 2.0).to_fixed_text(),
            {"x": "-1.000000", "y": "0.500000", "z": "2.000000"}
        )

    def test_negative_zero_renders_as_zero(self):
        self.assertEqual(format_fixed(-0.0), "0.000000")
        self.assertEqual(Vector(-0.0, 0.0, -0.0).to_fixed_text(1), {"x": "0.0", "y": "0.0", "z": "0.0"})

    def test_tiny_negative_renders_as_zero(self):
        self.assertEqual(format_fixed(-1e-7), "0.000000")
        self.assertEqual(format_fixed(-0.04, 1), "0.0")
        self.assertEqual(format_fixed(-0.05, 1), "-0.1")

    def test_to_vector2_drops_vertical_axis(self):
        self.assertEqual(Vector(1.0, 9.0, 2.0).to_vector2(), Vector2(1.0, 2.0))


class TestGrid(unittest.TestCase):
    """グリッド丸めテスト"""

    def test_half_grid(self):
        self.assertEqual(snap_to_grid(0.2, 0.5), 0.0)
        self.assertEqual(snap_to_grid(0.3, 0.5), 0.5)
        self.assertEqual(snap_to_grid(0.74, 0.5), 0.5)
        self.assertEqual(snap_to_grid(-0.3, 0.5), -0.5)

    def test_halves_round_up(self):
        self.assertEqual(snap_to_grid(0.25, 0.5), 0.5)
        self.assertEqual(snap_to_grid(-0.25, 0.5), 0.0)
        self.assertEqual(snap_to_grid(2.5, 1.0), 3.0)

    def test_fine_grid(self):
        self.assertAlmostEqual(snap_to_grid(1.234, 0.01), 1.23)
        self.assertAlmostEqual(snap_to_grid(-0.996, 0.01), -1.0)

    def test_vector2_snap_and_text(self):
        p = Vector2(0.3, -0.8).snap(0.5)
        self.assertEqual(p, Vector2(0.5, -1.0))
        self.assertEqual(p.to_fixed_text(1), {"x": "0.5", "z": "-1.0"})


class TestQuaternionAndBox(unittest.TestCase):
    """クォータニオン・ボックステスト"""

    def test_quaternion_default_identity(self):
        q = Quaternion()
        self.assertEqual(q, Quaternion.identity())
        self.assertEqual(q.to_fixed_text(), {"x": "0.000000", "y": "0.000000", "z": "0.000000", "w": "1.000000"})
        self.assertTrue(q.is_identity())

    def test_quaternion_from_array(self):
        self.assertEqual(Quaternion.from_array([0.0, 1.0, 0.0, 0.0]), Quaternion(0.0, 1.0, 0.0, 0.0))
        self.assertIsNone(Quaternion.from_array([0.0, 1.0]))
        self.assertTrue(Quaternion(0.0, 0.0, 0.0, -1.0).is_identity())
        self.assertFalse(Quaternion(0.0, 1.0, 0.0, 0.0).is_identity())

    def test_quaternion_parse(self):
        text = {"x": "0.000000", "y": "0.707107", "z": "0.000000", "w": "-0.707107"}
        self.assertEqual(Quaternion.parse(text), Quaternion(0.0, 0.707107, 0.0, -0.707107))
        self.assertIsNone(Quaternion.parse({"x": "0", "y": "0", "z": "0"}))
        self.assertIsNone(Quaternion.parse({"x": "0", "y": "a", "z": "0", "w": "1"}))
        self.assertIsNone(Quaternion.parse(None))

    def test_box_from_min_max(self):
        box = Box.from_min_max("hitbox", Vector(-1.0, 0.0, 2.0), Vector(3.0, 2.0, 4.0))
        self.assertEqual(box.name, "hitbox")
        self.assertEqual(box.center, Vector(1.0, 1.0, 3.0))
        self.assertEqual(box.size, Vector(4.0, 2.0, 2.0))
        self.assertEqual(box.extents, Vector(2.0, 1.0, 1.0))
        self.assertEqual(box.min_point, Vector(-1.0, 0.0, 2.0))
        self.assertEqual(box.max_point, Vector(3.0, 2.0, 4.0))

    def test_box_to_fixed_text(self):
        box = Box.from_min_max("hitbox_a", Vector(-1.0, -1.0, -1.0), Vector(1.0, 1.0, 1.0))
        text = box.to_fixed_text()
        self.assertEqual(text["Name"], "hitbox_a")
        self.assertEqual(text["Position"], {"x": "0.000000", "y": "0.000000", "z": "0.000000"})
        self.assertEqual(text["Rotation"], {"x": "0", "y": "0", "z": "0", "w": "1"})
        self.assertEqual(text["Extents"], {"x": "1.000000", "y": "1.000000", "z": "1.000000"})


class TestRotation(unittest.TestCase):
    """回転ユーティリティテスト"""

    def test_identity_yaw_is_zero(self):
        self.assertEqual(quaternion_to_yaw(Quaternion(0.0, 0.0, 0.0, 1.0)), 0.0)

    def test_half_turn_positive_y(self):
        """y > 0 では 2π - 2acos(w)"""
        yaw = quaternion_to_yaw(Quaternion(0.0, 1.0, 0.0, 0.0))
        self.assertAlmostEqual(yaw, math.pi)
        self.assertGreaterEqual(yaw, 0.0)
        self.assertLess(yaw, 2.0 * math.pi)

    def test_quarter_turn_both_signs(self):
        s = math.sqrt(0.5)
        self.assertAlmostEqual(quaternion_to_yaw(Quaternion(0.0, s, 0.0, s)), 1.5 * math.pi)
        self.assertAlmostEqual(quaternion_to_yaw(Quaternion(0.0, -s, 0.0, s)), 0.5 * math.pi)

    def test_full_turn_wraps_into_range(self):
        yaw = quaternion_to_yaw(Quaternion(0.0, 0.0, 0.0, -1.0))
        self.assertGreaterEqual(yaw, 0.0)
        self.assertLess(yaw, 2.0 * math.pi)

    def test_w_slightly_out_of_range(self):
        self.assertEqual(quaternion_to_yaw(Quaternion(0.0, 0.0, 0.0, 1.0000001)), 0.0)

    def test_rotation_matrix_quarter_turn_about_y(self):
        s = math.sqrt(0.5)
        q = Quaternion(0.0, s, 0.0, s)
        matrix = rotation_matrix(q)
        np.testing.assert_allclose(matrix @ np.array([1.0, 0.0, 0.0]), [0.0, 0.0, -1.0], atol=1e-12)
        rotated = rotate_points(q, np.array([[0.0, 0.0, 1.0]]))
        np.testing.assert_allclose(rotated, [[1.0, 0.0, 0.0]], atol=1e-12)

    def test_identity_rotation_returns_input(self):
        points = np.array([[1.0, 2.0, 3.0]])
        self.assertIs(rotate_points(Quaternion.identity(), points), points)


if __name__ == '__main__':
    unittest.main()
