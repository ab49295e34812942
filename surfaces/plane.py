import numpy as np
from numba import njit

from material import Material
from ray_math import normalize


# Rays closer to parallel than this are treated as missing the plane
PARALLEL_EPSILON = 0.001


@njit(cache=True)
def _plane_intersect_distance(ray_origin, ray_direction, point, normal, epsilon):
    """
    Distance along the ray to the plane (JIT-compiled).

    Returns -1.0 when the ray is parallel to the plane or the plane is behind it.
    """
    denom = ray_direction[0] * normal[0] + ray_direction[1] * normal[1] + ray_direction[2] * normal[2]
    if abs(denom) < epsilon:
        return -1.0

    numerator = ((point[0] - ray_origin[0]) * normal[0] +
                 (point[1] - ray_origin[1]) * normal[1] +
                 (point[2] - ray_origin[2]) * normal[2])
    t = numerator / denom
    if t < 0.0:
        return -1.0
    return t


class Plane:
    type_name = 'Plane'

    def __init__(self, point, normal, material=None):
        self.point = np.array(point, dtype=np.float64)
        self.surface_normal = normalize(np.array(normal, dtype=np.float64))
        self.material = material if material is not None else Material()

    def intersect(self, ray):
        """Compute ray-plane intersection. Returns the hit point or None."""
        t = _plane_intersect_distance(ray.origin, ray.direction, self.point,
                                      self.surface_normal, PARALLEL_EPSILON)
        if t < 0:
            return None
        return ray.at(t)

    def normal(self, point):
        return self.surface_normal

    def color_at(self, point):
        return self.material.color_at(point, self.surface_normal)

    def serialize(self):
        return {
            'type': self.type_name,
            'point': self.point.tolist(),
            'normal': self.surface_normal.tolist(),
            'material': self.material.serialize(),
        }

    @staticmethod
    def _material_from(data):
        material = Material.deserialize(data['material'])
        if 'checkered' in data:
            material.checkered = bool(data['checkered'])
        return material

    @classmethod
    def deserialize(cls, data):
        return cls(data['point'], data['normal'], cls._material_from(data))

    def __repr__(self):
        return f"Plane(point={self.point.tolist()}, normal={self.surface_normal.tolist()})"
