# boundvol/culling.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

from boundvol.core.components import Transform
from boundvol.math import create_perspective_projection, create_view_matrix
from boundvol.types import Scalar, Vector3
from boundvol.volumes.base import BoundingVolume


@dataclass(frozen=True)
class Plane:
    """
    Plane through `point`. `normal` points toward the half-space that is
    kept (e.g. the inside of a view frustum).
    """

    point: Vector3
    normal: Vector3

    def signed_distance(self, v: Vector3) -> Scalar:
        """Distance along the normal; exact when the normal is unit length."""
        return self.normal.dot(v - self.point)

    @staticmethod
    def from_coefficients(a: float, b: float, c: float, d: float) -> Plane:
        """Plane a*x + b*y + c*z + d = 0, kept side where it is positive."""
        n = np.array([a, b, c], dtype=np.float64)
        length = float(np.linalg.norm(n))
        if length == 0.0:
            raise ValueError("degenerate plane coefficients")
        n /= length
        d /= length
        return Plane(point=Vector3.from_array(-d * n), normal=Vector3.from_array(n))


@dataclass(frozen=True)
class Frustum:
    """
    Resource: the view volume used for culling, as six inward-facing planes
    (left, right, bottom, top, near, far).
    """

    planes: Tuple[Plane, ...]

    @staticmethod
    def from_matrix(view_proj: np.ndarray) -> Frustum:
        """
        Gribb/Hartmann plane extraction from an OpenGL clip matrix acting on
        column vectors (clip = M @ [x, y, z, 1]).
        """
        m = np.asarray(view_proj, dtype=np.float64)
        r0, r1, r2, r3 = m[0], m[1], m[2], m[3]
        rows = (
            r3 + r0,  # left
            r3 - r0,  # right
            r3 + r1,  # bottom
            r3 - r1,  # top
            r3 + r2,  # near
            r3 - r2,  # far
        )
        return Frustum(tuple(Plane.from_coefficients(*row) for row in rows))

    @staticmethod
    def from_camera(
        eye: Vector3,
        target: Vector3,
        fov_deg: float,
        aspect: float,
        near: float,
        far: float,
    ) -> Frustum:
        proj = create_perspective_projection(fov_deg, aspect, near, far)
        view = create_view_matrix(eye, target)
        return Frustum.from_matrix(proj @ view)

    def contains_point(self, v: Vector3) -> bool:
        return all(p.signed_distance(v) >= 0.0 for p in self.planes)


def is_outside(
    volume: BoundingVolume, placement: Transform, planes: Iterable[Plane]
) -> bool:
    """A volume fully behind any single plane cannot be visible."""
    return any(
        volume.outside_plane(placement, plane.point, plane.normal)
        for plane in planes
    )
