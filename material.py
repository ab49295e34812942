import numpy as np


WHITE = (255.0, 255.0, 255.0)


class Material:
    def __init__(self, color=WHITE, glossiness=0.0, reflectivity=0.0, transparency=0.0, checkered=False):
        self.color = np.array(color, dtype=np.float64)
        self.glossiness = glossiness
        self.reflectivity = reflectivity
        self.transparency = transparency
        self.checkered = checkered

    def color_at(self, point, normal=None):
        """
        Surface color at a point.

        Checkered materials are split into half-unit tiles over the two world
        axes least aligned with the surface normal (x and z when no normal is
        given); odd tiles are darkened by half.
        """
        if not self.checkered:
            return self.color

        if normal is None:
            axes = (0, 2)
        else:
            dominant = int(np.argmax(np.abs(normal)))
            axes = tuple(axis for axis in range(3) if axis != dominant)

        tile = int(np.floor(point[axes[0]] * 2)) + int(np.floor(point[axes[1]] * 2))
        if tile % 2:
            return self.color * 0.5
        return self.color

    def serialize(self):
        return {
            'color': self.color.tolist(),
            'glossiness': self.glossiness,
            'reflectivity': self.reflectivity,
            'transparency': self.transparency,
            'checkered': self.checkered,
        }

    @classmethod
    def deserialize(cls, data):
        if 'color' not in data:
            raise ValueError("Material is missing a color: {}".format(data))
        return cls(
            data['color'],
            data.get('glossiness', 0.0),
            data.get('reflectivity', 0.0),
            data.get('transparency', 0.0),
            bool(data.get('checkered', False)),
        )

    def __eq__(self, other):
        if not isinstance(other, Material):
            return NotImplemented
        return (np.array_equal(self.color, other.color)
                and self.glossiness == other.glossiness
                and self.reflectivity == other.reflectivity
                and self.transparency == other.transparency
                and self.checkered == other.checkered)

    def __repr__(self):
        return (f"Material(color={self.color.tolist()}, glossiness={self.glossiness}, "
                f"reflectivity={self.reflectivity}, transparency={self.transparency}, "
                f"checkered={self.checkered})")
