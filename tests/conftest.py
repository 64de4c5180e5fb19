from dataclasses import dataclass
from itertools import product

import numpy as np
import pytest

from boundvol.assets.server import AssetServer
from boundvol.core.components import Transform
from boundvol.core.world import World
from boundvol.resources.settings import BoundsSettings
from boundvol.types import Quaternion, Vector3


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True)
class Velocity:
    x: float
    y: float


@dataclass(frozen=True)
class Health:
    hp: int


@pytest.fixture
def world():
    """Returns a fresh World instance for each test."""
    return World()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def cloud(rng):
    """Anisotropic point cloud away from the origin, (500, 3)."""
    pts = rng.normal(size=(500, 3)) * np.array([3.0, 1.0, 0.5])
    return pts + np.array([10.0, -2.0, 4.0])


@pytest.fixture
def cube_points():
    """Corners of [-1, 1]^3."""
    return np.array(list(product((-1.0, 1.0), repeat=3)), dtype=np.float64)


@pytest.fixture
def placement():
    return Transform(
        pos=Vector3(5.0, -3.0, 2.0),
        rot=Quaternion.from_axis_angle(Vector3(1.0, 2.0, 3.0), 0.7),
        scale=Vector3(2.0, 0.5, 1.5),
    )


@pytest.fixture
def asset_server(tmp_path):
    server = AssetServer(asset_root=tmp_path)
    yield server
    server.shutdown()


@pytest.fixture
def bounds_world(world, asset_server):
    """World with the resources the bounding volume systems read."""
    world.add_resource(asset_server)
    world.add_resource(BoundsSettings())
    return world
