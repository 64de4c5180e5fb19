# boundvol/core/components.py
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from boundvol.assets.handle import AssetHandle
from boundvol.assets.types import MeshData
from boundvol.math import transform_to_matrix
from boundvol.types import EntityId, Quaternion, Vector3, VolumeKind

Color = Tuple[float, float, float, float]


# --- SPATIAL COMPONENTS ---


@dataclass(frozen=True)
class Transform:
    """
    The placement of an entity in the world.
    """

    pos: Vector3 = Vector3(0.0, 0.0, 0.0)
    rot: Quaternion = Quaternion.identity()
    scale: Vector3 = Vector3(1.0, 1.0, 1.0)

    @property
    def matrix_transform(self) -> NDArray[np.float64]:
        return transform_to_matrix(
            self.pos,
            self.rot,
            self.scale,
        )


@dataclass(frozen=True)
class ChildOf:
    """
    Marks this entity as a child of another. Its Transform is relative to
    the parent's.
    """

    parent: EntityId


@dataclass(frozen=True)
class MeshRef:
    """The mesh asset drawn (and bounded) for this entity."""

    handle: AssetHandle


# --- BOUNDING VOLUME COMPONENTS ---


@dataclass(frozen=True)
class Bounded:
    """
    Request component: keep these bounding volume kinds up to date for the
    entity's mesh.
    """

    kinds: Tuple[VolumeKind, ...] = (VolumeKind.SPHERE,)


class BoundsStatus(Enum):
    AWAITING_MESH = auto()
    READY = auto()
    FAILED = auto()


@dataclass(frozen=True)
class BoundsState:
    status: BoundsStatus
    error: Optional[str] = None


@dataclass(frozen=True)
class BoundsDebug:
    """
    Tag Component.
    Spawns wireframe children outlining the entity's bounding volumes.
    """

    pass


@dataclass(frozen=True)
class DebugWireframe:
    kind: VolumeKind
    mesh: MeshData  # line list
    color: Color = (1.0, 0.0, 1.0, 1.0)


@dataclass
class DebugChildren:
    """Debug wireframe entities owned by a bounded entity, per kind."""

    children: Dict[VolumeKind, EntityId] = field(default_factory=dict)


@dataclass(frozen=True)
class Visibility:
    visible: bool = True
