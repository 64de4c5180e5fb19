import moderngl
import numpy as np
import pytest

from boundvol.debug import (
    BOX_EDGE_INDICES,
    DebugMesh,
    box_mesh,
    circle_points,
    line_mesh,
    sphere_rings,
    upload_debug_mesh,
)
from boundvol.mesh import mesh_from_positions


class FakeContext:
    """Records buffer uploads instead of talking to a GPU."""

    def __init__(self):
        self.uploads = []

    def buffer(self, data):
        self.uploads.append(data)
        return ("buffer", len(self.uploads))


def test_box_edges_differ_in_one_axis():
    pairs = BOX_EDGE_INDICES.reshape(-1, 2)

    assert len(pairs) == 12
    assert len({tuple(sorted(p)) for p in pairs}) == 12
    for a, b in pairs:
        assert bin(int(a) ^ int(b)).count("1") == 1


def test_box_mesh_layout(cube_points):
    mesh = box_mesh(cube_points)

    assert mesh.mode == moderngl.LINES
    assert mesh.vertex_layout.format == "3f"
    assert mesh.vertex_layout.stride_bytes == 12
    assert len(mesh.vertices) == 8 * 12
    assert mesh.index_count == 24
    assert len(mesh.indices) == 24 * 4


def test_circle_points_on_unit_circle():
    pts = circle_points(12)

    assert pts.shape == (12, 3)
    np.testing.assert_allclose(np.linalg.norm(pts, axis=1), 1.0)
    np.testing.assert_array_equal(pts[:, 2], 0.0)


def test_circle_needs_three_segments():
    with pytest.raises(ValueError):
        circle_points(2)


def test_sphere_rings_close_each_loop():
    mesh = sphere_rings(np.zeros(3), 1.0, segments=8)
    idx = np.frombuffer(mesh.indices, dtype="<u4").reshape(-1, 2)

    assert len(idx) == 24
    # last segment of the first ring returns to its first point
    assert tuple(idx[7]) == (7, 0)
    assert tuple(idx[8]) == (8, 9)


def test_line_mesh_validates_indices(cube_points):
    with pytest.raises(ValueError, match="even"):
        line_mesh(cube_points, np.array([0, 1, 2]))
    with pytest.raises(ValueError, match="out of range"):
        line_mesh(cube_points, np.array([0, 8]))


def test_upload_debug_mesh(cube_points):
    ctx = FakeContext()
    mesh = box_mesh(cube_points)

    vbo, ibo = upload_debug_mesh(ctx, mesh)

    assert vbo == ("buffer", 1)
    assert ibo == ("buffer", 2)
    assert ctx.uploads == [mesh.vertices, mesh.indices]


def test_upload_rejects_triangles(cube_points):
    with pytest.raises(ValueError, match="line lists"):
        upload_debug_mesh(FakeContext(), mesh_from_positions(cube_points))


def test_debug_mesh_reads_back_box_edges(cube_points):
    outline = DebugMesh(mesh=box_mesh(cube_points))

    np.testing.assert_allclose(outline.positions(), cube_points)
    np.testing.assert_array_equal(outline.indices(), BOX_EDGE_INDICES)


def test_debug_mesh_without_index_buffer(cube_points):
    outline = DebugMesh(mesh=mesh_from_positions(cube_points, mode=moderngl.LINES))

    np.testing.assert_array_equal(outline.indices(), np.arange(8))
