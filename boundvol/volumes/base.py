# boundvol/volumes/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Optional, Self

import numpy as np

from boundvol.assets.types import MeshData
from boundvol.core.components import Transform
from boundvol.debug import DEFAULT_CIRCLE_SEGMENTS, DebugMesh
from boundvol.errors import MeshPreconditionError
from boundvol.mesh import extract_positions
from boundvol.types import Vector3, VolumeKind


def validate_vertices(vertices: np.ndarray) -> np.ndarray:
    """(N, 3) float64 with N > 0, or MeshPreconditionError."""
    if vertices is None:
        raise MeshPreconditionError("Mesh does not contain vertex positions")
    arr = np.asarray(vertices, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise MeshPreconditionError(
            f"Expected (N, 3) vertex positions, got shape {arr.shape}"
        )
    if arr.shape[0] == 0:
        raise MeshPreconditionError("Mesh has no vertices")
    return arr


class BoundingVolume(ABC):
    """
    Capabilities shared by every volume shape.

    Values are stored in mesh space (no translation) and combined with the
    entity's Transform when read. Instances are immutable: updates return a
    new value.
    """

    kind: ClassVar[VolumeKind]

    @classmethod
    @abstractmethod
    def construct(cls, vertices: np.ndarray, placement: Transform) -> Self:
        """Fit a fresh volume. Raises MeshPreconditionError on bad input."""

    @classmethod
    def from_mesh(cls, mesh: MeshData, placement: Transform) -> Self:
        return cls.construct(extract_positions(mesh), placement)

    @abstractmethod
    def on_placement_changed(
        self, vertices: np.ndarray, placement: Transform
    ) -> Optional[Self]:
        """
        Called when only the placement changed. Returns the replacement
        volume, or None when the stored value is still valid.
        """

    @abstractmethod
    def to_debug_mesh(
        self, placement: Transform, segments: int = DEFAULT_CIRCLE_SEGMENTS
    ) -> DebugMesh:
        """Line-list outline in the entity's local frame."""

    @abstractmethod
    def outside_plane(
        self, placement: Transform, point: Vector3, normal: Vector3
    ) -> bool:
        """
        True if the whole volume lies on the negative side of the plane
        through `point`, where `normal` points toward the kept half-space.
        """


def corners_outside_plane(
    corners: np.ndarray, point: Vector3, normal: Vector3
) -> bool:
    """Shared box test: every corner strictly behind the plane."""
    if normal.length() == 0.0:
        raise ValueError("plane normal must be non-zero")
    n = normal.to_array()
    offset = float(n @ point.to_array())
    for corner in corners:
        if float(n @ corner) - offset >= 0.0:
            # one corner on the inside is enough, stop early
            return False
    return True
