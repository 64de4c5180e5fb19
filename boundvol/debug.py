# boundvol/debug.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import moderngl
import numpy as np

from boundvol.assets.types import MeshData, VertexLayout
from boundvol.core.components import Transform

DEFAULT_CIRCLE_SEGMENTS = 32


def _box_edges() -> np.ndarray:
    # Corner i takes the minimum on x if bit 2 is set, y if bit 1, z if bit 0.
    # Edges join corners that differ in exactly one bit.
    edges = []
    for i in range(8):
        for bit in (4, 2, 1):
            if not i & bit:
                edges.append((i, i | bit))
    return np.array(edges, dtype=np.uint32).reshape(-1)


BOX_EDGE_INDICES = _box_edges()  # 12 edges -> 24 indices


@dataclass(frozen=True)
class DebugMesh:
    """
    Wireframe outline of a bounding volume.
    `mesh` is a line list in the bounded entity's local frame; parent it under
    the entity with `local_transform`.
    """

    mesh: MeshData
    local_transform: Transform = Transform()

    def positions(self) -> np.ndarray:
        return np.frombuffer(self.mesh.vertices, dtype="<f4").reshape(-1, 3)

    def indices(self) -> np.ndarray:
        if self.mesh.indices is None:
            return np.arange(len(self.positions()), dtype=np.uint32)
        return np.frombuffer(self.mesh.indices, dtype="<u4")


def line_mesh(positions: np.ndarray, indices: np.ndarray) -> MeshData:
    """Pack positions (N, 3) and a line-list index array into MeshData."""
    pos = np.ascontiguousarray(positions, dtype="<f4").reshape(-1, 3)
    idx = np.ascontiguousarray(indices, dtype="<u4").reshape(-1)
    if len(idx) % 2 != 0:
        raise ValueError("line list needs an even number of indices")
    if len(idx) and int(idx.max()) >= len(pos):
        raise ValueError("line index out of range")

    return MeshData(
        vertices=pos.tobytes(),
        vertex_layout=VertexLayout(
            attributes=["in_pos"], format="3f", stride_bytes=12
        ),
        mode=moderngl.LINES,
        indices=idx.tobytes(),
        index_count=len(idx),
    )


def box_mesh(corners: np.ndarray) -> MeshData:
    """Outline of a box given its 8 corners in the fixed corner order."""
    return line_mesh(corners, BOX_EDGE_INDICES)


def circle_points(segments: int) -> np.ndarray:
    """Unit circle in the XY plane, (segments, 3)."""
    if segments < 3:
        raise ValueError("a circle needs at least 3 segments")
    t = np.linspace(0.0, 2.0 * math.pi, segments, endpoint=False)
    return np.stack([np.cos(t), np.sin(t), np.zeros_like(t)], axis=1)


def sphere_rings(
    center: np.ndarray,
    radius: float,
    segments: int = DEFAULT_CIRCLE_SEGMENTS,
    axis_scale: Optional[np.ndarray] = None,
) -> MeshData:
    """
    Three great circles (XY, YZ, XZ) around `center`.
    axis_scale divides the ring offsets per axis, compensating for a parent
    scale the rings will later inherit.
    """
    ring = circle_points(segments) * radius
    rings = [
        ring,  # XY
        ring[:, [2, 0, 1]],  # YZ
        ring[:, [0, 2, 1]],  # XZ
    ]
    offsets = np.concatenate(rings, axis=0)
    if axis_scale is not None:
        offsets = offsets / axis_scale

    positions = offsets + center

    indices = []
    for r in range(3):
        base = r * segments
        for i in range(segments):
            indices.append((base + i, base + (i + 1) % segments))

    return line_mesh(positions, np.array(indices, dtype=np.uint32))


def upload_debug_mesh(
    ctx: moderngl.Context, mesh: MeshData
) -> Tuple[moderngl.Buffer, Optional[moderngl.Buffer]]:
    """Create GPU buffers (vbo, ibo) for a debug line mesh."""
    if mesh.mode != moderngl.LINES:
        raise ValueError("debug meshes are line lists")

    vbo = ctx.buffer(mesh.vertices)
    ibo = ctx.buffer(mesh.indices) if mesh.indices is not None else None
    return vbo, ibo
