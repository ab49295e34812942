import numpy as np

from material import Material, WHITE
from surfaces.rectangle import Rectangle


class PointLight:
    samples = 1
    primitive = None

    def __init__(self, position):
        self.position = np.array(position, dtype=np.float64)

    def sample_point(self):
        return self.position

    def serialize(self):
        return {'position': self.position.tolist()}

    def __repr__(self):
        return f"PointLight(position={self.position.tolist()})"


class AreaLight:
    """
    Square light source sampled at random points for soft shadows.

    The light owns a visible rectangle primitive so that it shows up in the
    render; that primitive never shades or shadows anything.
    """

    def __init__(self, position, normal, size, samples):
        self.position = np.array(position, dtype=np.float64)
        self.size = float(size)
        self.samples = int(samples)
        self.primitive = Rectangle(self.position, normal, self.size, Material(WHITE))

    @property
    def normal(self):
        return self.primitive.surface_normal

    def sample_point(self):
        return self.primitive.random_point()

    def serialize(self):
        return {
            'type': 'area',
            'position': self.position.tolist(),
            'normal': self.normal.tolist(),
            'size': self.size,
            'samples': self.samples,
        }

    def __repr__(self):
        return (f"AreaLight(position={self.position.tolist()}, normal={self.normal.tolist()}, "
                f"size={self.size}, samples={self.samples})")


def deserialize_light(data):
    light_type = data.get('type', 'point')
    try:
        if light_type == 'point':
            return PointLight(data['position'])
        elif light_type == 'area':
            return AreaLight(data['position'], data['normal'], data['size'], data['samples'])
    except KeyError as e:
        raise ValueError("Light is missing required key {}".format(e)) from e
    raise ValueError("Unknown light type: {}".format(light_type))
