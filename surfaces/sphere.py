import numpy as np
from numba import njit

from material import Material
from ray_math import normalize


@njit(cache=True)
def _sphere_intersect_distance(ray_origin, ray_direction, position, radius):
    """
    Distance along the ray to the visible sphere hit (JIT-compiled).

    Returns -1.0 when there is no hit.
    """
    to_x = position[0] - ray_origin[0]
    to_y = position[1] - ray_origin[1]
    to_z = position[2] - ray_origin[2]

    projection = to_x * ray_direction[0] + to_y * ray_direction[1] + to_z * ray_direction[2]

    # Sphere is behind the ray
    if projection < 0.0:
        return -1.0

    center_distance_sq = to_x * to_x + to_y * to_y + to_z * to_z
    distance = np.sqrt(max(0.0, center_distance_sq - projection * projection))
    if distance > radius:
        return -1.0

    h = np.sqrt(radius * radius - distance * distance)
    t1 = projection - h
    t2 = projection + h

    if t1 < 0.0 and t2 < 0.0:
        return -1.0
    if t1 >= 0.0 and t2 >= 0.0:
        return min(t1, t2)
    # Ray origin is inside the sphere
    if t2 >= 0.0:
        return t2
    return t1


class Sphere:
    type_name = 'Sphere'

    def __init__(self, position, radius, material=None):
        self.position = np.array(position, dtype=np.float64)
        self.radius = float(radius)
        self.material = material if material is not None else Material()

    def intersect(self, ray):
        """Return the nearest visible hit point or None."""
        t = _sphere_intersect_distance(ray.origin, ray.direction, self.position, self.radius)
        if t < 0:
            return None
        return ray.at(t)

    def normal(self, point):
        return normalize(point - self.position)

    def color_at(self, point):
        return self.material.color_at(point)

    def serialize(self):
        return {
            'type': self.type_name,
            'position': self.position.tolist(),
            'radius': self.radius,
            'material': self.material.serialize(),
        }

    @classmethod
    def deserialize(cls, data):
        return cls(data['position'], data['radius'], Material.deserialize(data['material']))

    def __repr__(self):
        return f"Sphere(position={self.position.tolist()}, radius={self.radius})"
