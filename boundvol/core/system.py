# boundvol/core/system.py
from __future__ import annotations

from boundvol.core.world import World


class System:
    """
    Base class for stateful systems.
    Plain functions taking a World work as systems too; subclass this when the
    system has to remember something between runs (e.g. a change cursor).
    """

    def process(self, world: World) -> None:
        raise NotImplementedError

    def __call__(self, world: World) -> None:
        self.process(world)
