# boundvol/assets/__init__.py
from boundvol.assets.handle import AssetHandle, AssetId
from boundvol.assets.server import AssetServer, LoadState
from boundvol.assets.types import MeshData, VertexLayout

__all__ = [
    "AssetServer",
    "AssetHandle",
    "AssetId",
    "LoadState",
    "MeshData",
    "VertexLayout",
]
