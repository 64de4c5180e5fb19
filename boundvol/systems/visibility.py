from boundvol.core.components import BoundsState, BoundsStatus, Transform, Visibility
from boundvol.core.world import World
from boundvol.culling import Frustum, is_outside
from boundvol.resources.settings import BoundsSettings
from boundvol.volumes import VOLUME_TYPES


def visibility_system(world: World) -> None:
    """
    Marks READY entities invisible when any of their volumes lies fully
    outside the view frustum.
    """
    frustum = world.try_resource(Frustum)
    if frustum is None:
        return

    settings = world.try_resource(BoundsSettings)
    culling = settings.culling_enabled if settings is not None else True

    for eid, state, placement in world.join(BoundsState, Transform):
        if state.status is not BoundsStatus.READY:
            continue

        visible = True
        if culling:
            for cls in VOLUME_TYPES.values():
                volume = world.component(eid, cls)
                if volume is not None and is_outside(
                    volume, placement, frustum.planes
                ):
                    visible = False
                    break

        current = world.component(eid, Visibility)
        if current is None or current.visible != visible:
            world.add_component(eid, Visibility(visible))
