"""Scene primitives: spheres, planes and bounded rectangles."""

from surfaces.plane import Plane
from surfaces.rectangle import Rectangle
from surfaces.sphere import Sphere


# Closed set of primitive type tags used by the scene format
SURFACE_TYPES = {
    Sphere.type_name: Sphere,
    Plane.type_name: Plane,
    Rectangle.type_name: Rectangle,
}


def deserialize_surface(data):
    """Build a primitive from its serialized form. Unknown types are fatal."""
    surface_type = data.get('type')
    if surface_type not in SURFACE_TYPES:
        raise ValueError("Unknown object type: {}".format(surface_type))
    try:
        return SURFACE_TYPES[surface_type].deserialize(data)
    except KeyError as e:
        raise ValueError("{} is missing required key {}".format(surface_type, e)) from e


__all__ = ["Plane", "Rectangle", "Sphere", "SURFACE_TYPES", "deserialize_surface"]
