# boundvol/core/scheduler.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from graphlib import CycleError, TopologicalSorter
from typing import Callable, Dict, List, Sequence, Tuple, Union

from boundvol.core.world import World
from boundvol.types import SystemId


class Stage(Enum):
    STARTUP = auto()  # Run once, on the first update
    PRE_UPDATE = auto()  # Asset hand-off
    UPDATE = auto()  # Game logic moving entities / swapping meshes
    BOUNDS = auto()  # Bounding volume construction and updates
    POST_UPDATE = auto()  # Visibility, debug meshes


SystemFn = Callable[[World], None]
Deps = Union[SystemId, Sequence[SystemId], None]


@dataclass(frozen=True)
class _Registration:
    stage: Stage
    name: SystemId
    system: SystemFn
    before: Tuple[SystemId, ...]
    after: Tuple[SystemId, ...]


def _as_names(deps: Deps) -> Tuple[SystemId, ...]:
    if deps is None:
        return ()
    if isinstance(deps, str):
        return (deps,)
    return tuple(deps)


def _order_stage(
    stage: Stage, entries: List[_Registration]
) -> List[SystemFn]:
    """Topological order of one stage's systems by their before/after edges."""
    graph = TopologicalSorter()
    by_name = {e.name: e.system for e in entries}

    for e in entries:
        graph.add(e.name, *e.after)
        for successor in e.before:
            graph.add(successor, e.name)

    try:
        order = list(graph.static_order())
    except CycleError as exc:
        raise RuntimeError(
            f"Cycle detected in stage {stage.name}: {exc.args[1]}"
        ) from exc

    # names from other stages only constrain, they do not run here
    return [by_name[n] for n in order if n in by_name]


class Scheduler:
    """
    Systems grouped by Stage, ordered inside a stage by name dependencies.
    Registration closes at compile(), which runs lazily on first use.
    """

    def __init__(self):
        self._registrations: List[_Registration] = []
        self._execution_order: Dict[Stage, List[SystemFn]] = {
            s: [] for s in Stage
        }
        self._is_compiled = False

    def add_system(
        self,
        stage: Stage,
        system: SystemFn,
        name: Union[SystemId, None] = None,
        before: Deps = None,
        after: Deps = None,
    ) -> None:
        """Register a function (or System instance) for a stage."""
        if self._is_compiled:
            raise RuntimeError("Cannot add systems after scheduler is compiled.")

        sys_name = name or SystemId(
            getattr(system, "__name__", type(system).__name__)
        )
        if any(r.name == sys_name for r in self._registrations):
            raise ValueError(f"System '{sys_name}' is already registered.")

        self._registrations.append(
            _Registration(
                stage, sys_name, system, _as_names(before), _as_names(after)
            )
        )

    def compile(self) -> None:
        for stage in Stage:
            entries = [r for r in self._registrations if r.stage is stage]
            self._execution_order[stage] = _order_stage(stage, entries)
        self._is_compiled = True

    def run_stage(self, stage: Stage, world: World) -> None:
        if not self._is_compiled:
            self.compile()

        for system in self._execution_order[stage]:
            system(world)

    def systems(self, stage: Stage) -> List[SystemFn]:
        if not self._is_compiled:
            self.compile()
        return list(self._execution_order[stage])
