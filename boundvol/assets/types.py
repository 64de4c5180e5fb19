# boundvol/assets/types.py
from dataclasses import dataclass
from typing import List, Optional

import moderngl


@dataclass(frozen=True)
class VertexLayout:
    """Describes vertex attributes for VAO creation."""

    attributes: List[str]  # e.g. ["in_pos", "in_normal", "in_uv"]
    format: str  # moderngl buffer format string e.g. "3f 3f 2f"
    stride_bytes: int  # e.g. 32


@dataclass(frozen=True)
class MeshData:
    """Raw mesh data (CPU side), interleaved as described by vertex_layout."""

    vertices: bytes
    vertex_layout: VertexLayout
    mode: int = moderngl.TRIANGLES  # primitive topology
    indices: Optional[bytes] = None
    index_count: int = 0
