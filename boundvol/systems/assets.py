# boundvol/systems/assets.py
from boundvol.assets.server import AssetServer
from boundvol.core.world import World
from boundvol.systems.events import AssetEvent


def asset_event_system(world: World) -> None:
    """Hand finished asset loads to the main thread as AssetEvents."""
    server = world.try_resource(AssetServer)
    if server is None:
        return

    for asset_id in server.update():
        world.emit_event(AssetEvent(asset_id))
