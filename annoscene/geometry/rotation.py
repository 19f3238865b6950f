#!/usr/bin/env python3
"""
回転ユーティリティ

クォータニオンからのヨー角抽出と、頂点配列への回転適用を提供します。
"""

import math

import numpy as np

from .primitives import Quaternion

TWO_PI = 2.0 * math.pi


def quaternion_to_yaw(q: Quaternion) -> float:
    """
    鉛直軸まわりの純粋な回転とみなしてヨー角を求める

    2*acos(w) を基本角とし、y > 0 の場合は 2π から引く。
    ピッチ・ロールを含む回転に対する結果は規定しない。

    Returns:
        [0, 2π) のヨー角（ラジアン）
    """
    w = min(1.0, max(-1.0, q.w))
    acos_value = 2.0 * math.acos(w)
    yaw = TWO_PI - acos_value if q.y > 0 else acos_value
    yaw = math.fmod(yaw, TWO_PI)
    if yaw < 0.0:
        yaw += TWO_PI
    return yaw


def rotation_matrix(q: Quaternion) -> np.ndarray:
    """クォータニオンから3x3回転行列（行優先）を生成"""
    x, y, z, w = q.x, q.y, q.z, q.w
    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z

    return np.array([
        [1.0 - 2.0 * (yy + zz),       2.0 * (xy - wz),       2.0 * (xz + wy)],
        [      2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz),       2.0 * (yz - wx)],
        [      2.0 * (xz - wy),       2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy)],
    ], dtype=np.float64)


def rotate_points(q: Quaternion, points: np.ndarray) -> np.ndarray:
    """
    (N, 3) 頂点配列を回転

    単位回転の場合は入力をそのまま返す（丸め誤差を持ち込まない）。
    """
    if q.is_identity(tolerance=0.0):
        return points
    return points @ rotation_matrix(q).T
