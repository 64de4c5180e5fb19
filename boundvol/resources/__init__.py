# boundvol/resources/__init__.py
from boundvol.resources.settings import BoundsSettings

__all__ = ["BoundsSettings"]
