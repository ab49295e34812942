import json

import numpy as np

from light import deserialize_light
from surfaces import deserialize_surface


class Scene:
    """
    Camera position, light and primitives of a render.

    An area light's rectangle is appended to the primitives so that it is
    visible to camera rays. The scene is not modified after construction.
    """

    def __init__(self, camera, light, primitives):
        self.camera = np.array(camera, dtype=np.float64)
        self.light = light
        primitives = list(primitives)
        if light.primitive is not None:
            primitives.append(light.primitive)
        self.primitives = tuple(primitives)

    def serialize(self):
        return {
            'camera': self.camera.tolist(),
            'light': self.light.serialize(),
            'primitives': [p.serialize() for p in self.primitives if p is not self.light.primitive],
        }

    @classmethod
    def deserialize(cls, data):
        for key in ('camera', 'light', 'primitives'):
            if key not in data:
                raise ValueError("Scene is missing required key '{}'".format(key))
        light = deserialize_light(data['light'])
        primitives = [deserialize_surface(p) for p in data['primitives']]
        return cls(data['camera'], light, primitives)


def parse_scene_file(file_path):
    """Load a scene from a JSON scene description."""
    with open(file_path, 'r') as f:
        return Scene.deserialize(json.load(f))


def save_scene_file(scene, file_path):
    with open(file_path, 'w') as f:
        json.dump(scene.serialize(), f, indent=2)
