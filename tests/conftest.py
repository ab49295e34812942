import numpy as np
import pytest

from light import PointLight
from material import Material
from scene import Scene
from scene_settings import SceneSettings
from surfaces import Plane, Sphere


@pytest.fixture(autouse=True)
def seeded_random():
    np.random.seed(1234)


@pytest.fixture
def settings():
    return SceneSettings()


@pytest.fixture
def floor():
    return Plane((0, 0, 0), (0, 1, 0), Material((255, 255, 255)))


@pytest.fixture
def simple_scene(floor):
    """Deterministic scene: a floor, a glossy sphere and a point light."""
    sphere = Sphere((0, 0.5, -3), 0.5, Material((255, 125, 125), glossiness=16))
    return Scene((0, 1, 2), PointLight((2, 5, 0)), [floor, sphere])
