# boundvol/assets/importers/mesh.py
from pathlib import Path
from typing import List, Optional, Tuple

import moderngl
import numpy as np

from boundvol.assets.importers.base import AssetImporter
from boundvol.assets.types import MeshData, VertexLayout

OBJ_LAYOUT = VertexLayout(
    attributes=["in_pos", "in_normal", "in_uv"],
    format="3f 3f 2f",
    stride_bytes=32,
)

DEFAULT_NORMAL = (0.0, 1.0, 0.0)


def _resolve(index: str, count: int) -> int:
    """OBJ indices are 1-based; negative ones count back from the end."""
    i = int(index)
    return i - 1 if i > 0 else count + i


class ObjImporter(AssetImporter):
    """
    Wavefront OBJ -> flat-expanded triangle list (no index buffer).

    Supported: v, vn, vt and triangular faces. Anything else raises
    ValueError.
    """

    extensions = (".obj",)

    def import_file(self, path: Path) -> MeshData:
        positions: List[Tuple[float, float, float]] = []
        normals: List[Tuple[float, float, float]] = []
        uvs: List[Tuple[float, float]] = []
        # per face corner: (position, uv or None, normal or None)
        corners: List[Tuple[int, Optional[int], Optional[int]]] = []

        with open(path, "r") as f:
            for line_no, line in enumerate(f, start=1):
                parts = line.split()
                if not parts or parts[0].startswith("#"):
                    continue

                tag = parts[0]
                if tag == "v":
                    positions.append(tuple(map(float, parts[1:4])))
                elif tag == "vn":
                    normals.append(tuple(map(float, parts[1:4])))
                elif tag == "vt":
                    uvs.append(tuple(map(float, parts[1:3])))
                elif tag == "f":
                    if len(parts) != 4:
                        raise ValueError(
                            f"Only triangular faces supported in {path} "
                            f"(line {line_no})"
                        )
                    for token in parts[1:]:
                        corners.append(
                            self._corner(token, len(positions), len(uvs), len(normals))
                        )

        if not corners:
            raise ValueError(f"No geometry found in OBJ: {path}")

        return MeshData(
            vertices=self._interleave(corners, positions, normals, uvs),
            vertex_layout=OBJ_LAYOUT,
            mode=moderngl.TRIANGLES,
        )

    def _corner(
        self, token: str, n_pos: int, n_uv: int, n_norm: int
    ) -> Tuple[int, Optional[int], Optional[int]]:
        fields = token.split("/")
        if not fields[0]:
            raise ValueError(f"Invalid vertex index in token: {token}")

        v = _resolve(fields[0], n_pos)
        vt = _resolve(fields[1], n_uv) if len(fields) > 1 and fields[1] else None
        vn = _resolve(fields[2], n_norm) if len(fields) > 2 and fields[2] else None

        for idx, count in ((v, n_pos), (vt, n_uv), (vn, n_norm)):
            if idx is not None and not 0 <= idx < count:
                raise ValueError(f"Index out of range in token: {token}")
        return v, vt, vn

    def _interleave(self, corners, positions, normals, uvs) -> bytes:
        n = len(corners)
        data = np.zeros((n, 8), dtype="<f4")
        data[:, 4] = DEFAULT_NORMAL[1]

        pos = np.asarray(positions, dtype="<f4")
        data[:, 0:3] = pos[[c[0] for c in corners]]

        for row, (_, vt, vn) in enumerate(corners):
            if vn is not None:
                data[row, 3:6] = normals[vn]
            if vt is not None:
                data[row, 6:8] = uvs[vt]

        return data.tobytes()
