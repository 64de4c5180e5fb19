# boundvol/volumes/obb.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ClassVar, Optional, Tuple

import numpy as np

from boundvol.core.components import Transform
from boundvol.debug import DEFAULT_CIRCLE_SEGMENTS, DebugMesh, box_mesh
from boundvol.math import deg_to_rad, rotate_points, transform_points
from boundvol.types import Quaternion, Scalar, Vector3, VolumeKind
from boundvol.volumes.aabb import AxisAlignedBox
from boundvol.volumes.base import (
    BoundingVolume,
    corners_outside_plane,
    validate_vertices,
)

# Rotation search: sweep each axis in turn, composing with the best
# orientation found so far. Angle 0 is always a candidate, so the result is
# never worse than the plain mesh-space AABB.
SWEEP_AXES: Tuple[Callable[[float], Quaternion], ...] = (
    Quaternion.from_rotation_y,  # turntable first
    Quaternion.from_rotation_x,
    Quaternion.from_rotation_z,
)
SWEEP_RANGE_DEGREES = 90
SWEEP_STEP_DEGREES = 15


def _fit_in_frame(
    vertices: np.ndarray, orientation: Quaternion
) -> AxisAlignedBox:
    return AxisAlignedBox.from_points(rotate_points(vertices, orientation))


def search_orientation(
    vertices: np.ndarray,
) -> Tuple[Quaternion, AxisAlignedBox]:
    """
    Bounded heuristic search for a frame with a small enclosing AABB.
    O(n * k), k = len(SWEEP_AXES) * SWEEP_RANGE_DEGREES / SWEEP_STEP_DEGREES.
    """
    best_orientation = Quaternion.identity()
    best_box = _fit_in_frame(vertices, best_orientation)
    best_volume = best_box.volume

    for axis_rotation in SWEEP_AXES:
        base = best_orientation
        for angle in range(0, SWEEP_RANGE_DEGREES, SWEEP_STEP_DEGREES):
            if angle == 0:
                continue  # same as `base`, already scored
            candidate = (base * axis_rotation(deg_to_rad(angle))).normalized()
            box = _fit_in_frame(vertices, candidate)
            if box.volume < best_volume:
                best_volume = box.volume
                best_orientation = candidate
                best_box = box

    return best_orientation, best_box


@dataclass(frozen=True)
class OrientedBox(BoundingVolume):
    """
    Bounding box oriented to (approximately) minimize the bounded volume.
    Expensive to compute, cheap to update.

    Stores the AABB of the mesh in a rotated frame chosen by a rotation
    search, plus the rotation taking mesh space into that frame. Depends on
    mesh data only, so placement changes never invalidate it.
    """

    kind: ClassVar[VolumeKind] = VolumeKind.ORIENTED_BOX

    mesh_aabb: AxisAlignedBox
    # Orientation of the *mesh* that minimizes the AABB. The box's own
    # orientation is the conjugate, see orientation().
    mesh_orientation: Quaternion

    @classmethod
    def construct(
        cls, vertices: np.ndarray, placement: Transform
    ) -> OrientedBox:
        pts = validate_vertices(vertices)
        orientation, box = search_orientation(pts)
        return cls(mesh_aabb=box, mesh_orientation=orientation)

    def on_placement_changed(
        self, vertices: np.ndarray, placement: Transform
    ) -> Optional[OrientedBox]:
        return None

    def orientation(self) -> Quaternion:
        """Rotation that turns `mesh_aabb` into the box as seen in mesh space."""
        return self.mesh_orientation.conjugate()

    @property
    def volume(self) -> Scalar:
        return self.mesh_aabb.volume

    def vertices_mesh_space(self) -> np.ndarray:
        return rotate_points(self.mesh_aabb.vertices_mesh_space(), self.orientation())

    def vertices(self, placement: Transform) -> np.ndarray:
        """World-space corners: box orientation, then the entity placement."""
        return transform_points(
            self.vertices_mesh_space(),
            placement.rot,
            placement.scale,
            placement.pos,
        )

    def outer_aabb(self, placement: Optional[Transform] = None) -> AxisAlignedBox:
        """
        AABB of this box's corners. Looser than fitting the mesh directly, but
        costs 8 points instead of a vertex-buffer scan. With a placement the
        corners are rotated and scaled first, matching AxisAlignedBox storage.
        """
        corners = self.vertices_mesh_space()
        if placement is not None:
            corners = transform_points(corners, placement.rot, placement.scale)
        return AxisAlignedBox.from_points(corners)

    def to_debug_mesh(
        self, placement: Transform, segments: int = DEFAULT_CIRCLE_SEGMENTS
    ) -> DebugMesh:
        # Mesh-space corners; the entity's placement is inherited.
        return DebugMesh(mesh=box_mesh(self.vertices_mesh_space()))

    def outside_plane(
        self, placement: Transform, point: Vector3, normal: Vector3
    ) -> bool:
        return corners_outside_plane(self.vertices(placement), point, normal)
