# boundvol/volumes/__init__.py
from typing import Dict, Type

from boundvol.types import VolumeKind
from boundvol.volumes.aabb import AxisAlignedBox
from boundvol.volumes.base import BoundingVolume
from boundvol.volumes.obb import OrientedBox
from boundvol.volumes.sphere import BoundingSphere

VOLUME_TYPES: Dict[VolumeKind, Type[BoundingVolume]] = {
    VolumeKind.AXIS_ALIGNED_BOX: AxisAlignedBox,
    VolumeKind.ORIENTED_BOX: OrientedBox,
    VolumeKind.SPHERE: BoundingSphere,
}

__all__ = [
    "AxisAlignedBox",
    "BoundingSphere",
    "BoundingVolume",
    "OrientedBox",
    "VOLUME_TYPES",
    "VolumeKind",
]
