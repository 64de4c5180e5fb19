# boundvol/core/world.py
from __future__ import annotations

from typing import (
    Any,
    Dict,
    Iterator,
    List,
    Optional,
    Set,
    Tuple,
    Type,
    TypeVar,
    TypeVarTuple,
    Unpack,
)

from boundvol.core.events import EventManager
from boundvol.core.resources import ResourceManager
from boundvol.types import EntityId

T = TypeVar("T")
Ev = TypeVar("Ev")
Cs = TypeVarTuple("Cs")  # variadic component types for join()


class World:
    """
    Entity/component storage with resources, events and change tracking.

    Components are stored per type (type -> entity -> instance). Every write
    bumps `version` and stamps the (entity, type) pair, so a system can ask
    which entities changed a component since the version it last saw.
    """

    def __init__(self) -> None:
        self._next_id: int = 1

        self._entities: Set[EntityId] = set()
        self._stores: Dict[Type[Any], Dict[EntityId, Any]] = {}
        self._stamps: Dict[Type[Any], Dict[EntityId, int]] = {}
        self._version: int = 0

        self._resource_manager = ResourceManager()
        self._event_manager = EventManager()

    # RESOURCE MANAGEMENT
    def add_resource(self, resource: Any) -> None:
        """Register a global resource (e.g. AssetServer, Frustum, Settings)."""
        self._resource_manager.add(resource)

    def get_resource(self, resource_type: Type[T]) -> T:
        """Retrieve a resource. Raises KeyError if missing."""
        return self._resource_manager.get(resource_type)

    def try_resource(self, resource_type: Type[T]) -> T | None:
        """Retrieve a resource or returns None."""
        return self._resource_manager.try_get(resource_type)

    def mutate_resource(self, resource: Any) -> None:
        """Update an EXISTING resource with a new instance."""
        res_type = type(resource)

        if self._resource_manager.try_get(res_type) is None:
            raise KeyError(
                f"Resource {res_type.__name__} does not exist. "
                "Use world.add_resource() to initialize global state."
            )

        self._resource_manager.add(resource)

    def remove_resource(self, resource_type: Type[Any]) -> None:
        self._resource_manager.remove(resource_type)

    # EVENT MANAGEMENT
    def emit_event(self, event: Any) -> None:
        """Queues an event signal."""
        self._event_manager.emit(event)

    def get_events(self, event_type: Type[Ev]) -> List[Ev]:
        """Consumes and returns all events of the given type."""
        return self._event_manager.get(event_type)

    def clear_events(self) -> None:
        """Drops unread events; called at the end of every update cycle."""
        self._event_manager.clear_all()

    # ENTITY MANAGEMENT
    def create_entity(self, *components: Any) -> EntityId:
        """Creates an entity, optionally with starting components."""
        eid = EntityId(self._next_id)
        self._next_id += 1
        self._entities.add(eid)

        for c in components:
            self.add_component(eid, c)

        return eid

    def delete_entity(self, eid: EntityId) -> None:
        if eid not in self._entities:
            return

        for comp_type, store in self._stores.items():
            if store.pop(eid, None) is not None:
                self._stamps[comp_type].pop(eid, None)

        self._entities.discard(eid)

    def exists(self, eid: EntityId) -> bool:
        return eid in self._entities

    @property
    def entity_count(self) -> int:
        return len(self._entities)

    # COMPONENT MANAGEMENT
    def add_component(self, eid: EntityId, component: Any) -> None:
        """Attach a component, replacing one of the same type if present."""
        if eid not in self._entities:
            raise KeyError(f"Entity {eid} does not exist.")

        self._write(eid, component)

    def remove_component(
        self, eid: EntityId, component_type: Type[Any]
    ) -> None:
        store = self._stores.get(component_type)
        if not store or eid not in store:
            return

        del store[eid]
        self._stamps[component_type].pop(eid, None)

    def mutate_component(self, eid: EntityId, component: Any) -> None:
        """
        Update an EXISTING component with a new instance.
        """
        if eid not in self._entities:
            raise KeyError(f"Entity {eid} does not exist.")

        comp_type = type(component)
        store = self._stores.get(comp_type)
        if store is None or eid not in store:
            raise KeyError(
                f"Entity {eid} cannot mutate {comp_type.__name__}: Component missing. "
                "Use world.add_component() to attach new components."
            )

        self._write(eid, component)

    def component(self, eid: EntityId, component_type: Type[T]) -> Optional[T]:
        store = self._stores.get(component_type)
        if store is None:
            return None
        return store.get(eid)

    def has(self, eid: EntityId, component_type: Type[Any]) -> bool:
        store = self._stores.get(component_type)
        return store is not None and eid in store

    # QUERIES
    def join(
        self,
        *component_types: Unpack[Tuple[Type[Cs], ...]],
    ) -> Iterator[Tuple[EntityId, *Cs]]:
        """
        Yields (eid, comp1, comp2, ...) for entities that have every type.
        Iterates a snapshot, so systems may add/remove components meanwhile.
        """
        if not component_types:
            return

        stores = [self._stores.get(t) for t in component_types]
        if any(s is None for s in stores):
            return

        # drive the iteration from the smallest store
        driver = min(stores, key=len)
        for eid in list(driver.keys()):
            row = []
            for store in stores:
                comp = store.get(eid)
                if comp is None:
                    break
                row.append(comp)
            else:
                yield (eid, *row)

    # CHANGE TRACKING
    @property
    def version(self) -> int:
        """Monotonic counter bumped by every component write."""
        return self._version

    def changed(self, component_type: Type[Any], since: int) -> List[EntityId]:
        """Entities whose `component_type` was written after `since`."""
        stamps = self._stamps.get(component_type)
        if not stamps:
            return []
        return [eid for eid, stamp in stamps.items() if stamp > since]

    # INTERNAL HELPERS
    def _write(self, eid: EntityId, component: Any) -> None:
        comp_type = type(component)
        self._version += 1
        self._stores.setdefault(comp_type, {})[eid] = component
        self._stamps.setdefault(comp_type, {})[eid] = self._version
