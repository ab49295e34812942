import numpy as np


def vector(x, y, z):
    """Build a 3D vector as a float64 numpy array."""
    return np.array([x, y, z], dtype=np.float64)


def magnitude(v):
    return np.sqrt(np.dot(v, v))


def normalize(v):
    """
    Normalize a vector.

    A zero vector is not guarded against and comes back as NaN components.
    """
    return v / magnitude(v)


def random_unit_vector():
    """Uniformly distributed random direction on the unit sphere."""
    while True:
        v = np.random.uniform(-1.0, 1.0, 3)
        length_sq = np.dot(v, v)
        if 1e-12 < length_sq <= 1.0:
            return v / np.sqrt(length_sq)


class Ray:
    def __init__(self, origin, direction):
        self.origin = np.array(origin, dtype=np.float64)
        self.direction = np.array(direction, dtype=np.float64)
        self.origin.flags.writeable = False
        self.direction.flags.writeable = False

    def at(self, t):
        return self.origin + self.direction * t

    def reflect(self, normal):
        """Reflect the ray direction around a unit normal."""
        return self.direction - 2.0 * np.dot(self.direction, normal) * normal

    def refract(self, normal, refraction_index=1.5):
        """
        Refract the ray direction through a surface with Snell's law.

        The ray is assumed to travel between air and a medium with the given
        refraction index. When the direction and normal point the same way the
        ray is leaving the medium, so the indices and the normal are swapped.

        Returns None on total internal reflection.
        """
        cos_angle = min(1.0, max(-1.0, float(np.dot(self.direction, normal))))
        n1, n2 = 1.0, refraction_index
        if cos_angle < 0:
            cos_angle = -cos_angle
        else:
            n1, n2 = n2, n1
            normal = -normal

        ratio = n1 / n2
        k = 1.0 - ratio ** 2 * (1.0 - cos_angle ** 2)
        if k < 0:
            return None

        return self.direction * ratio + normal * (cos_angle * ratio - np.sqrt(k))

    def __repr__(self):
        return f"Ray(origin={self.origin.tolist()}, direction={self.direction.tolist()})"
