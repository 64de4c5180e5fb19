# boundvol/core/application.py
import logging
from pathlib import Path
from typing import Optional

from boundvol.assets import AssetServer
from boundvol.core.scheduler import Scheduler, Stage
from boundvol.core.world import World
from boundvol.resources.settings import BoundsSettings

logger = logging.getLogger(__name__)

CYCLE_STAGES = (Stage.PRE_UPDATE, Stage.UPDATE, Stage.BOUNDS, Stage.POST_UPDATE)


class Application:
    """
    Headless host: one World, one Scheduler and the AssetServer, stepped by
    update(). Windowing and rendering belong to whoever embeds it.
    """

    def __init__(
        self,
        asset_root: Path = Path("."),
        settings: Optional[BoundsSettings] = None,
        max_workers: int = 2,
    ):
        self.world = World()
        self.scheduler = Scheduler()
        self.asset_server = AssetServer(asset_root=asset_root, max_workers=max_workers)

        self.world.add_resource(self.asset_server)
        self.world.add_resource(settings or BoundsSettings())

        self._started = False
        self.frame = 0

    def update(self) -> None:
        """Run one cycle. STARTUP systems run once, before the first cycle."""
        if not self._started:
            self.scheduler.compile()
            self.scheduler.run_stage(Stage.STARTUP, self.world)
            self._started = True

        for stage in CYCLE_STAGES:
            self.scheduler.run_stage(stage, self.world)

        self.world.clear_events()
        self.frame += 1

    def shutdown(self) -> None:
        logger.debug("Shutting down after %d frames", self.frame)
        self.asset_server.shutdown()


def register_bounds_systems(app: Application, debug: bool = False) -> None:
    """
    Wire asset hand-off, the bounding volume driver, visibility and
    (optionally) the debug outline system into the app's scheduler.
    """
    from boundvol.systems.assets import asset_event_system
    from boundvol.systems.bounds import BoundingVolumeSystem
    from boundvol.systems.debug import BoundsDebugSystem
    from boundvol.systems.visibility import visibility_system

    sched = app.scheduler
    sched.add_system(Stage.PRE_UPDATE, asset_event_system)
    sched.add_system(Stage.BOUNDS, BoundingVolumeSystem())
    sched.add_system(Stage.POST_UPDATE, visibility_system)
    if debug:
        sched.add_system(
            Stage.POST_UPDATE, BoundsDebugSystem(), after="visibility_system"
        )
