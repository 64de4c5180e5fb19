import numpy as np
import pytest

from boundvol.core.components import Transform
from boundvol.culling import Frustum, Plane, is_outside
from boundvol.types import Vector3
from boundvol.volumes.aabb import AxisAlignedBox
from boundvol.volumes.sphere import BoundingSphere


@pytest.fixture
def frustum():
    """Camera at z=5 looking at the origin."""
    return Frustum.from_camera(
        eye=Vector3(0.0, 0.0, 5.0),
        target=Vector3(0.0, 0.0, 0.0),
        fov_deg=60.0,
        aspect=1.0,
        near=0.1,
        far=100.0,
    )


def test_plane_from_coefficients_is_normalized():
    plane = Plane.from_coefficients(0.0, 2.0, 0.0, -4.0)  # y = 2

    assert plane.normal == Vector3(0.0, 1.0, 0.0)
    assert plane.signed_distance(Vector3(0.0, 5.0, 0.0)) == pytest.approx(3.0)
    assert plane.signed_distance(Vector3(0.0, 0.0, 0.0)) == pytest.approx(-2.0)


def test_degenerate_plane():
    with pytest.raises(ValueError):
        Plane.from_coefficients(0.0, 0.0, 0.0, 1.0)


def test_six_inward_planes(frustum):
    assert len(frustum.planes) == 6
    assert frustum.contains_point(Vector3(0.0, 0.0, 0.0))
    assert not frustum.contains_point(Vector3(0.0, 0.0, 10.0))  # behind the eye
    assert not frustum.contains_point(Vector3(0.0, 0.0, -200.0))  # past far
    assert not frustum.contains_point(Vector3(50.0, 0.0, 0.0))


def test_near_plane_position(frustum):
    near = frustum.planes[4]
    assert near.signed_distance(Vector3(0.0, 0.0, 4.9)) == pytest.approx(0.0, abs=1e-6)


def test_visible_volumes(frustum, cube_points):
    placement = Transform()
    for volume in (
        AxisAlignedBox.construct(cube_points, placement),
        BoundingSphere.construct(cube_points, placement),
    ):
        assert not is_outside(volume, placement, frustum.planes)


def test_volume_behind_the_camera(frustum, cube_points):
    behind = Transform(pos=Vector3(0.0, 0.0, 20.0))
    for volume in (
        AxisAlignedBox.construct(cube_points, behind),
        BoundingSphere.construct(cube_points, behind),
    ):
        assert is_outside(volume, behind, frustum.planes)


def test_straddling_volume_is_kept(frustum, cube_points):
    # centered on the near plane
    straddle = Transform(pos=Vector3(0.0, 0.0, 4.9))
    sphere = BoundingSphere.construct(cube_points, straddle)

    assert not is_outside(sphere, straddle, frustum.planes)


def test_from_matrix_identity_is_clip_cube():
    frustum = Frustum.from_matrix(np.eye(4))

    assert frustum.contains_point(Vector3(0.5, -0.5, 0.9))
    assert not frustum.contains_point(Vector3(1.5, 0.0, 0.0))
    normals = {p.normal for p in frustum.planes}
    assert Vector3(1.0, 0.0, 0.0) in normals
    assert Vector3(0.0, 0.0, -1.0) in normals
