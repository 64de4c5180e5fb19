# boundvol/assets/server.py
import hashlib
import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum, auto
from pathlib import Path
from queue import Queue
from typing import Dict, List, Optional, Set, Tuple

from boundvol.assets.handle import AssetHandle, AssetId
from boundvol.assets.importers.base import AssetImporter
from boundvol.assets.importers.mesh import ObjImporter
from boundvol.assets.registry import AssetRegistry
from boundvol.assets.types import MeshData

logger = logging.getLogger(__name__)


class LoadState(Enum):
    PENDING = auto()  # requested, not yet handed to the main thread
    LOADED = auto()
    FAILED = auto()  # importer raised
    UNKNOWN = auto()  # never issued by this server, or removed


def asset_id_for(path: str) -> AssetId:
    return AssetId(int(hashlib.sha256(path.encode()).hexdigest(), 16) % (10**16))


class AssetServer:
    def __init__(self, asset_root: Path, max_workers: int = 2) -> None:
        self.root = asset_root
        self.registry = AssetRegistry()

        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="AssetWorker"
        )
        # (asset_id, data or None, error message or None)
        self._loaded_queue: Queue[
            Tuple[AssetId, Optional[MeshData], Optional[str]]
        ] = Queue()

        self._handles: Dict[str, AssetHandle] = {}  # Path -> Handle
        self._failed: Dict[AssetId, str] = {}
        self._procedural_count = 0

        self._importers: Dict[str, AssetImporter] = {}
        self.register_importer(ObjImporter())

    def register_importer(self, importer: AssetImporter) -> None:
        for ext in importer.extensions:
            self._importers[ext.lower()] = importer

    def load(self, path: str) -> AssetHandle:
        """
        Non-blocking load request. Return handle instantly.
        """
        if path in self._handles:
            return self._handles[path]

        handle = AssetHandle(asset_id_for(path), path)
        self._handles[path] = handle

        full_path = self.root / path
        self._executor.submit(self._worker_load, handle.id, full_path)

        return handle

    def add(self, mesh: MeshData, path: Optional[str] = None) -> AssetHandle:
        """
        Register in-memory mesh data. Like load(), the data becomes visible
        at the next update().
        """
        if path is None:
            self._procedural_count += 1
            path = f"procedural://mesh/{self._procedural_count}"

        handle = self._handles.get(path)
        if handle is None:
            handle = AssetHandle(asset_id_for(path), path)
            self._handles[path] = handle

        self._loaded_queue.put((handle.id, mesh, None))
        return handle

    def replace(self, handle: AssetHandle, mesh: MeshData) -> None:
        """Swap the data behind an existing handle (mesh edit)."""
        if self.state(handle) is LoadState.UNKNOWN:
            raise KeyError(f"Unknown asset handle: {handle.path}")
        self._loaded_queue.put((handle.id, mesh, None))

    def remove(self, handle: AssetHandle) -> None:
        """Drop an asset. Handles to it become stale."""
        known = self._handles.get(handle.path)
        if known is not None and known.id == handle.id:
            del self._handles[handle.path]
        self.registry.discard(handle.id)
        self._failed.pop(handle.id, None)

    def state(self, handle: AssetHandle) -> LoadState:
        known = self._handles.get(handle.path)
        if known is None or known.id != handle.id:
            return LoadState.UNKNOWN
        if handle.id in self.registry:
            return LoadState.LOADED
        if handle.id in self._failed:
            return LoadState.FAILED
        return LoadState.PENDING

    def failure(self, handle: AssetHandle) -> Optional[str]:
        return self._failed.get(handle.id)

    def get(self, handle: AssetHandle) -> Optional[MeshData]:
        return self.registry.get(handle.id)

    def revision(self, handle: AssetHandle) -> int:
        """Bumped every time new data is stored behind the handle."""
        return self.registry.revision(handle.id)

    def _worker_load(self, asset_id: AssetId, full_path: Path) -> None:
        """
        Load asset on background thread.
        """
        try:
            ext = full_path.suffix.lower()
            importer = self._importers.get(ext)
            if not importer:
                raise ValueError(f"No importer for {ext}")

            data = importer.import_file(full_path)
            self._loaded_queue.put((asset_id, data, None))
        except Exception as e:
            logger.error("Failed to load %s: %s", full_path, e)
            self._loaded_queue.put((asset_id, None, str(e)))

    def update(self) -> List[AssetId]:
        """
        Called on the Main Thread every frame.
        Return AssetIds whose data was stored (loaded or replaced) this call.
        """
        stored: List[AssetId] = []
        seen: Set[AssetId] = set()
        while not self._loaded_queue.empty():
            asset_id, data, error = self._loaded_queue.get()

            if not self._is_live(asset_id):
                # removed while the load was in flight
                continue

            if data is None:
                self._failed[asset_id] = error or "import failed"
                self.registry.discard(asset_id)
            else:
                self._failed.pop(asset_id, None)
                self.registry.store(asset_id, data)

            # failures are reported too, so waiting entities can settle
            if asset_id not in seen:
                seen.add(asset_id)
                stored.append(asset_id)

        return stored

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _is_live(self, asset_id: AssetId) -> bool:
        return any(h.id == asset_id for h in self._handles.values())
