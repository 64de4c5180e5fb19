import logging

import pytest

from boundvol.core.components import (
    Bounded,
    BoundsDebug,
    ChildOf,
    DebugChildren,
    DebugWireframe,
    MeshRef,
    Transform,
)
from boundvol.mesh import mesh_from_positions
from boundvol.resources.settings import BoundsSettings
from boundvol.systems.assets import asset_event_system
from boundvol.systems.bounds import BoundingVolumeSystem
from boundvol.systems.debug import BoundsDebugSystem
from boundvol.types import Vector3, VolumeKind

KINDS = (VolumeKind.AXIS_ALIGNED_BOX, VolumeKind.ORIENTED_BOX, VolumeKind.SPHERE)


@pytest.fixture
def run(bounds_world):
    bounds = BoundingVolumeSystem()
    debug = BoundsDebugSystem()

    def cycle():
        asset_event_system(bounds_world)
        bounds(bounds_world)
        debug(bounds_world)

    return cycle


@pytest.fixture
def parent(bounds_world, asset_server, cube_points):
    handle = asset_server.add(mesh_from_positions(cube_points))
    return bounds_world.create_entity(
        Transform(), MeshRef(handle), Bounded(KINDS), BoundsDebug()
    )


def children(world, eid):
    return world.component(eid, DebugChildren).children


def test_one_child_per_volume(bounds_world, run, parent):
    run()

    owned = children(bounds_world, parent)
    assert set(owned) == set(KINDS)

    for kind, child in owned.items():
        assert bounds_world.component(child, ChildOf).parent == parent
        assert bounds_world.component(child, Transform) == Transform()
        wire = bounds_world.component(child, DebugWireframe)
        assert wire.kind is kind
        assert wire.color == BoundsSettings().debug_color


def test_sphere_segments_follow_settings(bounds_world, run, parent):
    bounds_world.mutate_resource(BoundsSettings(sphere_debug_segments=8))
    run()

    child = children(bounds_world, parent)[VolumeKind.SPHERE]
    wire = bounds_world.component(child, DebugWireframe)
    assert wire.mesh.index_count == 3 * 8 * 2


def test_children_are_reused(bounds_world, run, parent):
    run()
    first = dict(children(bounds_world, parent))

    bounds_world.mutate_component(parent, Transform(scale=Vector3(2.0, 1.0, 1.0)))
    run()

    assert children(bounds_world, parent) == first


def test_sphere_outline_follows_parent_scale(bounds_world, run, parent):
    run()
    child = children(bounds_world, parent)[VolumeKind.SPHERE]
    before = bounds_world.component(child, DebugWireframe).mesh

    bounds_world.mutate_component(parent, Transform(scale=Vector3(3.0, 1.0, 1.0)))
    run()

    after = bounds_world.component(child, DebugWireframe).mesh
    assert after.vertices != before.vertices


def test_oriented_box_outline_ignores_motion(bounds_world, run, parent):
    run()
    child = children(bounds_world, parent)[VolumeKind.ORIENTED_BOX]
    before = bounds_world.component(child, DebugWireframe)

    bounds_world.mutate_component(parent, Transform(pos=Vector3(4.0, 0.0, 0.0)))
    run()

    assert bounds_world.component(child, DebugWireframe) is before


def test_children_die_with_parent(bounds_world, run, parent):
    run()
    owned = list(children(bounds_world, parent).values())

    bounds_world.delete_entity(parent)
    run()

    assert not any(bounds_world.exists(c) for c in owned)


def test_untagging_removes_children(bounds_world, run, parent):
    run()
    owned = list(children(bounds_world, parent).values())

    bounds_world.remove_component(parent, BoundsDebug)
    run()

    assert not bounds_world.has(parent, DebugChildren)
    assert not any(bounds_world.exists(c) for c in owned)


def test_dropped_volume_removes_its_child(bounds_world, run, parent):
    run()
    sphere_child = children(bounds_world, parent)[VolumeKind.SPHERE]

    bounds_world.add_component(parent, Bounded((VolumeKind.ORIENTED_BOX,)))
    run()

    assert set(children(bounds_world, parent)) == {VolumeKind.ORIENTED_BOX}
    assert not bounds_world.exists(sphere_child)


def test_degenerate_scale_drops_outline(bounds_world, run, parent, caplog):
    run()
    sphere_child = children(bounds_world, parent)[VolumeKind.SPHERE]

    with caplog.at_level(logging.WARNING, logger="boundvol.systems.debug"):
        bounds_world.mutate_component(parent, Transform(scale=Vector3(0.0, 1.0, 1.0)))
        run()

    owned = children(bounds_world, parent)
    assert VolumeKind.SPHERE not in owned
    assert VolumeKind.AXIS_ALIGNED_BOX not in owned
    assert VolumeKind.ORIENTED_BOX in owned
    assert not bounds_world.exists(sphere_child)
    assert any("No sphere outline" in r.getMessage() for r in caplog.records)
