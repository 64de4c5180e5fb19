import moderngl
import numpy as np
import pytest

from boundvol.assets.importers.mesh import ObjImporter
from boundvol.assets.types import MeshData, VertexLayout
from boundvol.errors import BoundsError, MeshPreconditionError
from boundvol.mesh import extract_positions, mesh_from_positions


def test_round_trip_positions(cloud):
    mesh = mesh_from_positions(cloud)
    out = extract_positions(mesh)

    assert out.dtype == np.float64
    assert out.shape == cloud.shape
    np.testing.assert_array_equal(out, cloud.astype(np.float32))


def test_interleaved_obj_layout(tmp_path):
    f = tmp_path / "tri.obj"
    f.write_text(
        "v 1 2 3\nv 4 5 6\nv 7 8 9\nvn 0 0 1\nvt 0.5 0.5\n"
        "f 1/1/1 2/1/1 3/1/1\n"
    )
    out = extract_positions(ObjImporter().import_file(f))

    np.testing.assert_array_equal(out, [[1, 2, 3], [4, 5, 6], [7, 8, 9]])


def test_position_after_padding_and_other_attribute():
    normals = np.zeros((2, 3), dtype="<f4")
    pad = np.zeros((2, 1), dtype="<f4")
    positions = np.array([[1, 2, 3], [-1, -2, -3]], dtype="<f4")
    raw = np.hstack([normals, pad, positions]).tobytes()

    mesh = MeshData(
        vertices=raw,
        vertex_layout=VertexLayout(
            attributes=["in_normal", "in_pos"], format="3f 4x 3f", stride_bytes=28
        ),
    )
    np.testing.assert_array_equal(extract_positions(mesh), positions)


def test_rejects_non_triangle_list(cube_points):
    mesh = mesh_from_positions(cube_points, mode=moderngl.LINES)
    with pytest.raises(MeshPreconditionError, match="Non-TriangleList"):
        extract_positions(mesh)


def test_rejects_missing_positions():
    mesh = MeshData(
        vertices=b"\x00" * 12,
        vertex_layout=VertexLayout(
            attributes=["in_normal"], format="3f", stride_bytes=12
        ),
    )
    with pytest.raises(MeshPreconditionError, match="does not contain vertex positions"):
        extract_positions(mesh)


def test_rejects_non_float_positions():
    mesh = MeshData(
        vertices=b"\x00" * 12,
        vertex_layout=VertexLayout(attributes=["in_pos"], format="3i", stride_bytes=12),
    )
    with pytest.raises(MeshPreconditionError, match="Unexpected vertex types"):
        extract_positions(mesh)


def test_rejects_empty_buffer():
    with pytest.raises(MeshPreconditionError, match="no vertices"):
        extract_positions(mesh_from_positions(np.zeros((0, 3))))


def test_rejects_truncated_buffer():
    mesh = MeshData(
        vertices=b"\x00" * 20,
        vertex_layout=VertexLayout(attributes=["in_pos"], format="3f", stride_bytes=12),
    )
    with pytest.raises(MeshPreconditionError, match="stride"):
        extract_positions(mesh)


def test_precondition_error_is_a_value_error():
    assert issubclass(MeshPreconditionError, ValueError)
    assert issubclass(MeshPreconditionError, BoundsError)
