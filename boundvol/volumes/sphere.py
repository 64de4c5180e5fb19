# boundvol/volumes/sphere.py
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Iterator, Optional, Tuple

import numpy as np

from boundvol.core.components import Transform
from boundvol.debug import DEFAULT_CIRCLE_SEGMENTS, DebugMesh, sphere_rings
from boundvol.math import max_abs_scale
from boundvol.types import Scalar, Vector3, VolumeKind
from boundvol.volumes.base import BoundingVolume, validate_vertices

# Relative slack for the "already inside" check; each growth step lands the
# farthest point exactly on the new surface, up to rounding.
SPHERE_TOLERANCE = 1e-9


def _farthest(points: np.ndarray, origin: np.ndarray) -> Tuple[int, float]:
    dists = np.linalg.norm(points - origin, axis=1)
    idx = int(np.argmax(dists))
    return idx, float(dists[idx])


def iter_ritter_refinement(
    points: np.ndarray,
) -> Iterator[Tuple[np.ndarray, float]]:
    """
    Ritter's bounding sphere, one (origin, radius) per step.

    Seeds with the two mutually-far points y, z, then keeps pulling the sphere
    toward the farthest outside point until none is left. The radius never
    shrinks. Steps are capped at the point count; if the cap is hit the last
    step grows the radius to the farthest point so the result still encloses.
    """
    pts = validate_vertices(points)

    x = pts[0]
    y = pts[_farthest(pts, x)[0]]
    z = pts[_farthest(pts, y)[0]]

    origin = (y + z) * 0.5
    radius = float(np.linalg.norm(z - y)) * 0.5
    yield origin.copy(), radius

    for _ in range(len(pts)):
        idx, dist = _farthest(pts, origin)
        if dist <= radius + SPHERE_TOLERANCE * max(radius, 1.0):
            return

        # grow just enough to touch pts[idx], sliding the center toward it
        new_radius = (radius + dist) * 0.5
        origin = origin + (pts[idx] - origin) * ((dist - new_radius) / dist)
        radius = new_radius
        yield origin.copy(), radius

    _, dist = _farthest(pts, origin)
    if dist > radius:
        yield origin.copy(), dist


def fit_sphere(points: np.ndarray) -> Tuple[np.ndarray, float]:
    steps = iter_ritter_refinement(points)
    origin, radius = next(steps)
    for origin, radius in steps:
        pass
    return origin, radius


@dataclass(frozen=True)
class BoundingSphere(BoundingVolume):
    """
    Bounding sphere with a center point coordinate and a radius, both in mesh
    space. `construct` fits the raw vertices and ignores the placement;
    rotation, scale and translation are applied only on read (`world_origin`,
    `world_radius`), so placement changes never require a refit.
    """

    kind: ClassVar[VolumeKind] = VolumeKind.SPHERE

    mesh_space_origin: Vector3
    mesh_space_radius: Scalar

    @classmethod
    def construct(
        cls, vertices: np.ndarray, placement: Transform
    ) -> BoundingSphere:
        origin, radius = fit_sphere(vertices)
        return cls(
            mesh_space_origin=Vector3.from_array(origin),
            mesh_space_radius=radius,
        )

    def on_placement_changed(
        self, vertices: np.ndarray, placement: Transform
    ) -> Optional[BoundingSphere]:
        return None

    def world_origin(self, placement: Transform) -> Vector3:
        o = self.mesh_space_origin
        s = placement.scale
        scaled = Vector3(o.x * s.x, o.y * s.y, o.z * s.z)
        return placement.pos + placement.rot.normalized().rotate(scaled)

    def world_radius(self, placement: Transform) -> Scalar:
        # Non-uniform scale turns the sphere into an ellipsoid; the largest
        # axis keeps it enclosing.
        return self.mesh_space_radius * max_abs_scale(placement.scale)

    def to_debug_mesh(
        self, placement: Transform, segments: int = DEFAULT_CIRCLE_SEGMENTS
    ) -> DebugMesh:
        scale = placement.scale.to_array()
        if np.any(scale == 0.0):
            raise ValueError(
                f"Cannot outline a sphere under degenerate scale {placement.scale}"
            )
        mesh = sphere_rings(
            center=self.mesh_space_origin.to_array(),
            radius=self.world_radius(placement),
            segments=segments,
            axis_scale=scale,
        )
        return DebugMesh(mesh=mesh)

    def outside_plane(
        self, placement: Transform, point: Vector3, normal: Vector3
    ) -> bool:
        length = normal.length()
        if length == 0.0:
            raise ValueError("plane normal must be non-zero")
        n = normal * (1.0 / length)
        dist = n.dot(self.world_origin(placement)) - n.dot(point)
        return dist + self.world_radius(placement) < 0.0
