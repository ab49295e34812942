import numpy as np

from ray_math import normalize
from surfaces.plane import Plane


class Rectangle(Plane):
    """
    A plane bounded to a square of half extent `size` around its point.

    The bound is checked per world axis, so only axis-aligned rectangles are
    bounded exactly.
    """
    type_name = 'Rectangle'

    def __init__(self, point, normal, size, material=None):
        super().__init__(point, normal, material)
        self.size = float(size)

        # Tangent basis used to sample points on the rectangle
        if abs(self.surface_normal[0]) < 0.9:
            reference = np.array([1.0, 0.0, 0.0])
        else:
            reference = np.array([0.0, 1.0, 0.0])
        self.right = normalize(np.cross(self.surface_normal, reference))
        self.up = normalize(np.cross(self.right, self.surface_normal))

    def intersect(self, ray):
        intersection = super().intersect(ray)
        if intersection is None:
            return None

        if np.all(np.abs(intersection - self.point) < self.size):
            return intersection
        return None

    def random_point(self):
        """Uniformly distributed random point on the rectangle."""
        offset_i, offset_j = np.random.uniform(-self.size, self.size, 2)
        return self.point + self.right * offset_i + self.up * offset_j

    def serialize(self):
        data = super().serialize()
        data['size'] = self.size
        return data

    @classmethod
    def deserialize(cls, data):
        return cls(data['point'], data['normal'], data['size'], cls._material_from(data))

    def __repr__(self):
        return (f"Rectangle(point={self.point.tolist()}, normal={self.surface_normal.tolist()}, "
                f"size={self.size})")
