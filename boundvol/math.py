# boundvol/math.py
import math
from typing import Union

import numpy as np

from boundvol.types import Quaternion, Scalar, Vector3


def deg_to_rad(d: Scalar) -> Scalar:
    return d * math.pi / 180.0


def rotation_scale_matrix(rot: Quaternion, scale: Vector3) -> np.ndarray:
    """3x3 matrix R @ S, no translation."""
    R = rot.to_matrix3()
    # S is diagonal, so scale the columns of R
    return R * np.array([scale.x, scale.y, scale.z], dtype=np.float64)


def transform_points(
    points: np.ndarray,
    rot: Quaternion,
    scale: Vector3 = Vector3(1.0, 1.0, 1.0),
    pos: Union[Vector3, None] = None,
) -> np.ndarray:
    """
    Vectorized p' = R @ (S * p) (+ pos).
    points: (N, 3)
    Returns: (N, 3)
    """
    M = rotation_scale_matrix(rot, scale)
    out = points @ M.T
    if pos is not None:
        out = out + pos.to_array()
    return out


def rotate_points(points: np.ndarray, rot: Quaternion) -> np.ndarray:
    return points @ rot.to_matrix3().T


def transform_to_matrix(
    position: Vector3,
    rotation: Quaternion,
    scale: Vector3,
) -> np.ndarray:
    M = np.eye(4, dtype=np.float64)
    M[:3, :3] = rotation_scale_matrix(rotation, scale)
    M[:3, 3] = [position.x, position.y, position.z]
    return M


def max_abs_scale(scale: Vector3) -> Scalar:
    return max(abs(scale.x), abs(scale.y), abs(scale.z))


def create_view_matrix(eye: Vector3, target: Vector3) -> np.ndarray:
    """
    Right-handed look-at View Matrix (World -> Camera Space), world up +Y.
    """
    ex, ey, ez = eye
    tx, ty, tz = target

    # Forward (f = target - eye)
    fx, fy, fz = tx - ex, ty - ey, tz - ez
    len_f = math.sqrt(fx * fx + fy * fy + fz * fz)
    inv_len_f = 1.0 / len_f if len_f > 1e-9 else 1.0
    fx, fy, fz = fx * inv_len_f, fy * inv_len_f, fz * inv_len_f

    # Right (s = cross(f, up(0,1,0))) -> (-fz, 0, fx)
    sx, sy, sz = -fz, 0.0, fx
    len_s_sq = sx * sx + sz * sz
    if len_s_sq < 1e-12:
        sx, sy, sz = 1.0, 0.0, 0.0
    else:
        inv_len_s = 1.0 / math.sqrt(len_s_sq)
        sx, sy, sz = sx * inv_len_s, sy * inv_len_s, sz * inv_len_s

    # Up (u = cross(s, f))
    ux = sy * fz - sz * fy
    uy = sz * fx - sx * fz
    uz = sx * fy - sy * fx

    return np.array(
        [
            [sx, sy, sz, -(sx * ex + sy * ey + sz * ez)],
            [ux, uy, uz, -(ux * ex + uy * ey + uz * ez)],
            [-fx, -fy, -fz, fx * ex + fy * ey + fz * ez],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )


def create_perspective_projection(
    fov_deg: float, aspect: float, near: float, far: float
) -> np.ndarray:
    """
    Creates a standard OpenGL Perspective Projection Matrix.
    fov_deg: Field of View in Degrees (Vertical)
    aspect: Width / Height
    near: Distance to near plane
    far: Distance to far plane
    """
    fov_rad = math.radians(fov_deg)
    tan_half_fov = math.tan(fov_rad / 2.0)

    # Avoid division by zero
    if tan_half_fov == 0:
        tan_half_fov = 0.001
    if near == far:
        far += 0.001
    if aspect == 0:
        aspect = 1.0

    mat = np.zeros((4, 4), dtype=np.float64)

    mat[0, 0] = 1.0 / (aspect * tan_half_fov)
    mat[1, 1] = 1.0 / tan_half_fov

    # Remap Z (Depth)
    mat[2, 2] = (far + near) / (near - far)
    mat[2, 3] = (2.0 * far * near) / (near - far)

    # Perspective Division (w = -z)
    mat[3, 2] = -1.0

    return mat
