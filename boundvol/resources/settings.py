# boundvol/resources/settings.py
from dataclasses import dataclass
from typing import Tuple


@dataclass(slots=True)
class BoundsSettings:
    """
    Resource: runtime switches for the bounding volume systems.
    Fit algorithm constants are not settings; they live next to the fits.
    """

    culling_enabled: bool = True
    debug_color: Tuple[float, float, float, float] = (1.0, 0.0, 1.0, 1.0)
    sphere_debug_segments: int = 32
