# boundvol/mesh.py
from __future__ import annotations

import re
from typing import List, Tuple

import moderngl
import numpy as np

from boundvol.assets.types import MeshData, VertexLayout
from boundvol.errors import MeshPreconditionError

POSITION_ATTRIBUTE = "in_pos"

# moderngl format token: <count><type>[<size>] or <count>x padding
_TOKEN = re.compile(r"^(\d*)([fiux])(\d?)$")
_DEFAULT_SIZES = {"f": 4, "i": 4, "u": 4, "x": 1}


def _parse_format(fmt: str) -> List[Tuple[int, str, int, bool]]:
    """
    Returns (count, type, byte size per component, is_padding) per token.
    """
    tokens = []
    for token in fmt.split():
        if token.startswith("/"):
            # per-instance / per-vertex divisor hints
            continue
        m = _TOKEN.match(token)
        if not m:
            raise MeshPreconditionError(f"Unsupported vertex format token '{token}'")
        count = int(m.group(1) or 1)
        kind = m.group(2)
        size = int(m.group(3) or _DEFAULT_SIZES[kind])
        tokens.append((count, kind, size, kind == "x"))
    return tokens


def _position_offset(layout: VertexLayout) -> int:
    """Byte offset of the position attribute inside one vertex."""
    if POSITION_ATTRIBUTE not in layout.attributes:
        raise MeshPreconditionError("Mesh does not contain vertex positions")

    offset = 0
    attr_index = 0
    for count, kind, size, padding in _parse_format(layout.format):
        if padding:
            offset += count * size
            continue

        if attr_index >= len(layout.attributes):
            raise MeshPreconditionError(
                f"Vertex format '{layout.format}' has more attributes than "
                f"{layout.attributes}"
            )

        if layout.attributes[attr_index] == POSITION_ATTRIBUTE:
            if (count, kind, size) != (3, "f", 4):
                raise MeshPreconditionError(
                    "Unexpected vertex types in position attribute: "
                    f"{count}{kind}{size}"
                )
            return offset

        offset += count * size
        attr_index += 1

    raise MeshPreconditionError(
        f"Vertex format '{layout.format}' does not cover {POSITION_ATTRIBUTE}"
    )


def extract_positions(mesh: MeshData) -> np.ndarray:
    """
    Read the vertex positions of a triangle-list mesh.
    Returns: (N, 3) float64, N > 0
    Raises MeshPreconditionError for anything that is not a clean triangle list.
    """
    if mesh.mode != moderngl.TRIANGLES:
        raise MeshPreconditionError(
            f"Non-TriangleList mesh supplied for bounding volume generation "
            f"(mode={mesh.mode})"
        )

    layout = mesh.vertex_layout
    offset = _position_offset(layout)
    stride = layout.stride_bytes

    if stride < offset + 12:
        raise MeshPreconditionError(
            f"Stride {stride} too small for positions at offset {offset}"
        )
    if len(mesh.vertices) % stride != 0:
        raise MeshPreconditionError(
            f"Vertex buffer of {len(mesh.vertices)} bytes is not a multiple "
            f"of the {stride} byte stride"
        )
    if len(mesh.vertices) == 0:
        raise MeshPreconditionError("Mesh has no vertices")

    dtype = np.dtype(
        {
            "names": ["pos"],
            "formats": [("<f4", (3,))],
            "offsets": [offset],
            "itemsize": stride,
        }
    )
    records = np.frombuffer(mesh.vertices, dtype=dtype)
    return records["pos"].astype(np.float64)


def mesh_from_positions(
    points: np.ndarray, mode: int = moderngl.TRIANGLES
) -> MeshData:
    """Pack an (N, 3) array into a position-only MeshData."""
    arr = np.ascontiguousarray(points, dtype="<f4").reshape(-1, 3)
    return MeshData(
        vertices=arr.tobytes(),
        vertex_layout=VertexLayout(
            attributes=[POSITION_ATTRIBUTE], format="3f", stride_bytes=12
        ),
        mode=mode,
    )
