# boundvol/assets/registry.py
from typing import Any, Dict, Optional, Tuple

from boundvol.assets.handle import AssetId


class AssetRegistry:
    """
    Loaded asset data (CPU side) by AssetId.
    Every store bumps the asset's revision, so derived data (e.g. extracted
    vertex positions) can be cached per (id, revision).
    """

    def __init__(self) -> None:
        self._storage: Dict[AssetId, Tuple[int, Any]] = {}
        self._revisions: Dict[AssetId, int] = {}

    def store(self, asset_id: AssetId, data: Any) -> int:
        """Register or replace asset data. Returns the new revision."""
        revision = self._revisions.get(asset_id, 0) + 1
        self._revisions[asset_id] = revision
        self._storage[asset_id] = (revision, data)
        return revision

    def get(self, asset_id: AssetId) -> Optional[Any]:
        entry = self._storage.get(asset_id)
        return entry[1] if entry is not None else None

    def revision(self, asset_id: AssetId) -> int:
        """0 when nothing is stored."""
        entry = self._storage.get(asset_id)
        return entry[0] if entry is not None else 0

    def discard(self, asset_id: AssetId) -> None:
        # the revision counter survives, so a re-store never reuses a number
        self._storage.pop(asset_id, None)

    def __contains__(self, asset_id: AssetId) -> bool:
        return asset_id in self._storage

    def __len__(self) -> int:
        return len(self._storage)
