import logging
from typing import Set, Tuple

from boundvol.core.components import (
    BoundsDebug,
    ChildOf,
    DebugChildren,
    DebugWireframe,
    Transform,
)
from boundvol.core.system import System
from boundvol.core.world import World
from boundvol.resources.settings import BoundsSettings
from boundvol.systems.events import VolumeChanged
from boundvol.types import EntityId, VolumeKind
from boundvol.volumes import VOLUME_TYPES
from boundvol.volumes.base import BoundingVolume

logger = logging.getLogger(__name__)


class BoundsDebugSystem(System):
    """
    Keeps one wireframe child per volume kind under every `BoundsDebug`
    entity. Children carry ChildOf + Transform + DebugWireframe and are drawn
    by whatever renders line lists.
    """

    def __init__(self) -> None:
        self._seen_version = 0

    def process(self, world: World) -> None:
        settings = world.try_resource(BoundsSettings) or BoundsSettings()

        changed: Set[Tuple[EntityId, VolumeKind]] = {
            (ev.entity, ev.kind) for ev in world.get_events(VolumeChanged)
        }
        since = self._seen_version
        moved = set(world.changed(Transform, since))
        tagged = set(world.changed(BoundsDebug, since))

        self._reap(world)

        for eid, _, placement in world.join(BoundsDebug, Transform):
            owned = world.component(eid, DebugChildren)
            if owned is None:
                owned = DebugChildren()
                world.add_component(eid, owned)

            for kind, cls in VOLUME_TYPES.items():
                volume = world.component(eid, cls)
                child = owned.children.get(kind)

                if volume is None:
                    if child is not None:
                        world.delete_entity(child)
                        del owned.children[kind]
                    continue

                stale = (
                    child is None
                    or not world.exists(child)
                    or (eid, kind) in changed
                    or eid in tagged
                    # sphere rings compensate for the parent's scale
                    or (eid in moved and kind is VolumeKind.SPHERE)
                )
                if stale:
                    self._refresh(world, eid, owned, volume, placement, settings)

        self._seen_version = world.version

    def _refresh(
        self,
        world: World,
        parent: EntityId,
        owned: DebugChildren,
        volume: BoundingVolume,
        placement: Transform,
        settings: BoundsSettings,
    ) -> None:
        kind = volume.kind
        child = owned.children.get(kind)

        try:
            outline = volume.to_debug_mesh(
                placement, segments=settings.sphere_debug_segments
            )
        except ValueError as exc:
            logger.warning(
                "No %s outline for entity %s: %s", kind.value, parent, exc
            )
            if child is not None:
                world.delete_entity(child)
                del owned.children[kind]
            return

        wireframe = DebugWireframe(kind, outline.mesh, settings.debug_color)

        if child is None or not world.exists(child):
            owned.children[kind] = world.create_entity(
                ChildOf(parent), outline.local_transform, wireframe
            )
            logger.debug("Spawned %s outline for entity %s", kind.value, parent)
        else:
            world.add_component(child, outline.local_transform)
            world.add_component(child, wireframe)

    def _reap(self, world: World) -> None:
        # children whose parent is gone
        for child, link, _ in world.join(ChildOf, DebugWireframe):
            if not world.exists(link.parent):
                world.delete_entity(child)

        # parents that no longer ask for outlines
        for eid, owned in world.join(DebugChildren):
            if not world.has(eid, BoundsDebug):
                for child in owned.children.values():
                    world.delete_entity(child)
                world.remove_component(eid, DebugChildren)
