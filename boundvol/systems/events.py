# boundvol/systems/events.py
from __future__ import annotations

from dataclasses import dataclass

from boundvol.assets.handle import AssetId
from boundvol.types import EntityId, VolumeKind


@dataclass(frozen=True, slots=True)
class AssetEvent:
    """Mesh data behind `asset_id` was stored (loaded, replaced) or failed."""

    asset_id: AssetId


@dataclass(frozen=True, slots=True)
class VolumeChanged:
    """A bounding volume component was written for `entity`."""

    entity: EntityId
    kind: VolumeKind


@dataclass(frozen=True, slots=True)
class BoundsFailed:
    entity: EntityId
    reason: str
