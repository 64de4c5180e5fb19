# boundvol/systems/bounds.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set, Tuple

import numpy as np

from boundvol.assets.handle import AssetId
from boundvol.assets.server import AssetServer, LoadState
from boundvol.core.components import (
    Bounded,
    BoundsState,
    BoundsStatus,
    MeshRef,
    Transform,
)
from boundvol.core.system import System
from boundvol.core.world import World
from boundvol.errors import BoundsError, MeshPreconditionError, StaleMeshError
from boundvol.mesh import extract_positions
from boundvol.systems.events import AssetEvent, BoundsFailed, VolumeChanged
from boundvol.types import EntityId
from boundvol.volumes import VOLUME_TYPES
from boundvol.volumes.base import BoundingVolume

logger = logging.getLogger(__name__)


class BoundingVolumeSystem(System):
    """
    Keeps the requested volume components of every `Bounded` entity in sync
    with its mesh and placement.

    Per entity and cycle exactly one path runs:
      - mesh changed (asset stored/replaced, MeshRef or Bounded written):
        full reconstruction of every requested kind
      - otherwise, placement changed: on_placement_changed per kind
    Entities whose mesh is still loading wait in AWAITING_MESH and are retried
    when their asset reports in. Failures stay local to the entity.
    """

    def __init__(self) -> None:
        self._seen_version = 0
        # asset id -> (registry revision, positions)
        self._vertex_cache: Dict[AssetId, Tuple[int, np.ndarray]] = {}

    def process(self, world: World) -> None:
        server = world.try_resource(AssetServer)

        touched_assets: Set[AssetId] = {
            ev.asset_id for ev in world.get_events(AssetEvent)
        }
        since = self._seen_version
        mesh_edits = set(world.changed(MeshRef, since))
        mesh_edits.update(world.changed(Bounded, since))
        moved = set(world.changed(Transform, since))

        self._drop_unrequested(world)
        self._prune_vertex_cache(server)

        for eid, bounded, mesh_ref, placement in world.join(
            Bounded, MeshRef, Transform
        ):
            state = world.component(eid, BoundsState)
            mesh_changed = (
                eid in mesh_edits or mesh_ref.handle.id in touched_assets
            )

            try:
                if state is None or mesh_changed:
                    self._rebuild(world, server, eid, bounded, mesh_ref, placement)
                elif state.status is BoundsStatus.READY and eid in moved:
                    self._on_moved(world, server, eid, bounded, mesh_ref, placement)
            except BoundsError as exc:
                self._fail(world, eid, exc)

        self._seen_version = world.version

    def _rebuild(
        self,
        world: World,
        server: Optional[AssetServer],
        eid: EntityId,
        bounded: Bounded,
        mesh_ref: MeshRef,
        placement: Transform,
    ) -> None:
        vertices = self._vertices(server, mesh_ref)
        if vertices is None:
            logger.debug(
                "Entity %s waiting for mesh %s", eid, mesh_ref.handle.path
            )
            # no volume outlives the mesh it was fitted to
            for cls in VOLUME_TYPES.values():
                world.remove_component(eid, cls)
            world.add_component(eid, BoundsState(BoundsStatus.AWAITING_MESH))
            return

        # fit everything before writing anything
        volumes = [
            VOLUME_TYPES[kind].construct(vertices, placement)
            for kind in bounded.kinds
        ]

        for kind, cls in VOLUME_TYPES.items():
            if kind not in bounded.kinds:
                world.remove_component(eid, cls)

        self._write(world, eid, volumes)
        world.add_component(eid, BoundsState(BoundsStatus.READY))
        logger.debug(
            "Built %s for entity %s (%d vertices)",
            ", ".join(k.value for k in bounded.kinds),
            eid,
            len(vertices),
        )

    def _on_moved(
        self,
        world: World,
        server: Optional[AssetServer],
        eid: EntityId,
        bounded: Bounded,
        mesh_ref: MeshRef,
        placement: Transform,
    ) -> None:
        vertices = self._vertices(server, mesh_ref)
        if vertices is None:
            return

        updated: List[BoundingVolume] = []
        for kind in bounded.kinds:
            current = world.component(eid, VOLUME_TYPES[kind])
            if current is None:
                updated.append(VOLUME_TYPES[kind].construct(vertices, placement))
                continue
            replacement = current.on_placement_changed(vertices, placement)
            if replacement is not None:
                updated.append(replacement)

        self._write(world, eid, updated)

    def _write(
        self, world: World, eid: EntityId, volumes: List[BoundingVolume]
    ) -> None:
        for volume in volumes:
            world.add_component(eid, volume)
            world.emit_event(VolumeChanged(eid, volume.kind))

    def _fail(self, world: World, eid: EntityId, exc: BoundsError) -> None:
        if isinstance(exc, StaleMeshError):
            logger.warning("Entity %s points at a stale mesh: %s", eid, exc)
        else:
            logger.error("Bounding volume for entity %s failed: %s", eid, exc)
        for cls in VOLUME_TYPES.values():
            world.remove_component(eid, cls)
        world.add_component(eid, BoundsState(BoundsStatus.FAILED, str(exc)))
        world.emit_event(BoundsFailed(eid, str(exc)))

    def _drop_unrequested(self, world: World) -> None:
        for eid, _ in world.join(BoundsState):
            if not world.has(eid, Bounded):
                for cls in VOLUME_TYPES.values():
                    world.remove_component(eid, cls)
                world.remove_component(eid, BoundsState)

    def _prune_vertex_cache(self, server: Optional[AssetServer]) -> None:
        for asset_id in list(self._vertex_cache):
            if server is None or asset_id not in server.registry:
                del self._vertex_cache[asset_id]

    def _vertices(
        self, server: Optional[AssetServer], mesh_ref: MeshRef
    ) -> Optional[np.ndarray]:
        """
        Positions for the entity's mesh, or None while it is not available.
        """
        if server is None:
            return None

        handle = mesh_ref.handle
        state = server.state(handle)

        if state is LoadState.PENDING:
            return None
        if state is LoadState.UNKNOWN:
            self._vertex_cache.pop(handle.id, None)
            raise StaleMeshError(f"Bad mesh handle: {handle.path}")
        if state is LoadState.FAILED:
            raise MeshPreconditionError(
                f"Mesh {handle.path} failed to import: {server.failure(handle)}"
            )

        revision = server.revision(handle)
        cached = self._vertex_cache.get(handle.id)
        if cached is not None and cached[0] == revision:
            return cached[1]

        mesh = server.get(handle)
        if mesh is None:
            return None
        vertices = extract_positions(mesh)
        self._vertex_cache[handle.id] = (revision, vertices)
        return vertices
