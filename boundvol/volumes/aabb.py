# boundvol/volumes/aabb.py
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional

import numpy as np

from boundvol.core.components import Transform
from boundvol.debug import DEFAULT_CIRCLE_SEGMENTS, DebugMesh, box_mesh
from boundvol.math import rotation_scale_matrix, transform_points
from boundvol.types import Scalar, Vector3, VolumeKind
from boundvol.volumes.base import (
    BoundingVolume,
    corners_outside_plane,
    validate_vertices,
)


@dataclass(frozen=True)
class AxisAlignedBox(BoundingVolume):
    """
    Axis-aligned bounding box in mesh space: the box sits at the mesh origin,
    but the vertices were rotated and scaled by the entity's Transform before
    taking extents, so its faces are aligned with the world axes. Translation
    is only added when reading world-space corners, which keeps precision for
    meshes far from the origin.
    """

    kind: ClassVar[VolumeKind] = VolumeKind.AXIS_ALIGNED_BOX

    # Distance from the mesh origin to the -x, -y, -z faces (as a point).
    minimums: Vector3
    # Distance from the mesh origin to the +x, +y, +z faces (as a point).
    maximums: Vector3

    @staticmethod
    def from_points(points: np.ndarray) -> AxisAlignedBox:
        """Extents of an (N, 3) point set, single pass."""
        pts = validate_vertices(points)
        return AxisAlignedBox(
            minimums=Vector3.from_array(pts.min(axis=0)),
            maximums=Vector3.from_array(pts.max(axis=0)),
        )

    @staticmethod
    def from_extents(minimums: Vector3, maximums: Vector3) -> AxisAlignedBox:
        if any(lo > hi for lo, hi in zip(minimums, maximums)):
            raise ValueError(f"minimums {minimums} exceed maximums {maximums}")
        return AxisAlignedBox(minimums, maximums)

    @classmethod
    def construct(
        cls, vertices: np.ndarray, placement: Transform
    ) -> AxisAlignedBox:
        pts = validate_vertices(vertices)
        return cls.from_points(transform_points(pts, placement.rot, placement.scale))

    def on_placement_changed(
        self, vertices: np.ndarray, placement: Transform
    ) -> Optional[AxisAlignedBox]:
        # "Axis-aligned" is relative to the current rotation: always refit.
        return self.construct(vertices, placement)

    @property
    def dimensions(self) -> Vector3:
        return self.maximums - self.minimums

    @property
    def volume(self) -> Scalar:
        d = self.dimensions
        return d.x * d.y * d.z

    def contains(self, point: Vector3) -> bool:
        return all(
            lo <= p <= hi for lo, p, hi in zip(self.minimums, point, self.maximums)
        )

    def vertices_mesh_space(self) -> np.ndarray:
        """The 8 corners (8, 3), starting at maximums and ending at minimums."""
        lo = self.minimums
        hi = self.maximums
        return np.array(
            [
                [hi.x, hi.y, hi.z],
                [hi.x, hi.y, lo.z],
                [hi.x, lo.y, hi.z],
                [hi.x, lo.y, lo.z],
                [lo.x, hi.y, hi.z],
                [lo.x, hi.y, lo.z],
                [lo.x, lo.y, hi.z],
                [lo.x, lo.y, lo.z],
            ],
            dtype=np.float64,
        )

    def vertices(self, placement: Transform) -> np.ndarray:
        """World-space corners: mesh-space corners + translation."""
        return self.vertices_mesh_space() + placement.pos.to_array()

    def to_debug_mesh(
        self, placement: Transform, segments: int = DEFAULT_CIRCLE_SEGMENTS
    ) -> DebugMesh:
        # The child inherits the entity's rotation and scale, so undo them to
        # keep the outline aligned with the world axes.
        M = rotation_scale_matrix(placement.rot, placement.scale)
        if abs(np.linalg.det(M)) < 1e-12:
            raise ValueError(
                f"Cannot outline an AABB under degenerate scale {placement.scale}"
            )
        local = self.vertices_mesh_space() @ np.linalg.inv(M).T
        return DebugMesh(mesh=box_mesh(local))

    def outside_plane(
        self, placement: Transform, point: Vector3, normal: Vector3
    ) -> bool:
        return corners_outside_plane(self.vertices(placement), point, normal)
