# boundvol/assets/importers/base.py
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, Tuple

from boundvol.assets.types import MeshData


class AssetImporter(ABC):
    # lower-case suffixes this importer is registered for, e.g. (".obj",)
    extensions: ClassVar[Tuple[str, ...]] = ()

    @abstractmethod
    def import_file(self, path: Path) -> MeshData:
        """
        Parse a mesh file into interleaved MeshData.
        Runs on asset worker threads; raise ValueError on malformed input.
        """
