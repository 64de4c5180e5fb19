import moderngl
import numpy as np
import pytest

from boundvol.assets.importers.mesh import ObjImporter
from boundvol.assets.types import MeshData


def test_obj_importer_simple_triangle(tmp_path):
    obj_content = """
    v 0.0 0.0 0.0
    v 1.0 0.0 0.0
    v 0.0 1.0 0.0
    vn 0.0 0.0 1.0
    vt 0.0 0.0
    f 1/1/1 2/1/1 3/1/1
    """
    f = tmp_path / "triangle.obj"
    f.write_text(obj_content)

    mesh_data = ObjImporter().import_file(f)

    assert isinstance(mesh_data, MeshData)
    # 3 vertices * (3 pos + 3 norm + 2 uv) * 4 bytes/float = 3 * 8 * 4 = 96 bytes
    assert len(mesh_data.vertices) == 96
    assert mesh_data.vertex_layout.stride_bytes == 32
    assert mesh_data.vertex_layout.attributes[0] == "in_pos"
    assert mesh_data.mode == moderngl.TRIANGLES


def test_obj_importer_positions_only_faces(tmp_path):
    f = tmp_path / "quad.obj"
    f.write_text("v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf 1 2 3\nf 1 3 4\n")

    mesh_data = ObjImporter().import_file(f)
    assert len(mesh_data.vertices) == 6 * 32


def test_obj_importer_invalid_file(tmp_path):
    f = tmp_path / "empty.obj"
    f.write_text("")

    with pytest.raises(ValueError, match="No geometry found"):
        ObjImporter().import_file(f)


def test_obj_importer_rejects_quads(tmp_path):
    f = tmp_path / "quad.obj"
    f.write_text("v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf 1 2 3 4\n")

    with pytest.raises(ValueError, match="Only triangular faces"):
        ObjImporter().import_file(f)


def test_obj_importer_negative_indices(tmp_path):
    f = tmp_path / "relative.obj"
    f.write_text("v 0 0 0\nv 2 0 0\nv 0 3 0\nf -3 -2 -1\n")

    mesh_data = ObjImporter().import_file(f)
    floats = np.frombuffer(mesh_data.vertices, dtype="<f4").reshape(-1, 8)

    np.testing.assert_array_equal(floats[:, 0:3], [[0, 0, 0], [2, 0, 0], [0, 3, 0]])
    # missing normals fall back to +Y
    np.testing.assert_array_equal(floats[:, 3:6], [[0, 1, 0]] * 3)


def test_obj_importer_index_out_of_range(tmp_path):
    f = tmp_path / "bad.obj"
    f.write_text("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 4\n")

    with pytest.raises(ValueError, match="out of range"):
        ObjImporter().import_file(f)
