import numpy as np
import pytest

from material import Material
from ray_math import Ray, vector
from surfaces import Plane, Rectangle, Sphere


def ray(origin, direction):
    return Ray(vector(*origin), vector(*direction))


class TestSphere:
    def test_constructor_attributes(self):
        material = Material((255, 0, 0))
        sphere = Sphere((0, 0, 0), 5, material)
        assert sphere.position.tolist() == [0, 0, 0]
        assert sphere.radius == 5
        assert sphere.material is material

    @pytest.mark.parametrize("point,expected", [
        ((0, 1, 0), [0, 1, 0]),
        ((0, -1, 0), [0, -1, 0]),
        ((1, 0, 0), [1, 0, 0]),
    ])
    def test_normal(self, point, expected):
        sphere = Sphere((0, 0, 0), 1)
        assert sphere.normal(vector(*point)).tolist() == expected

    def test_intersect_from_outside(self):
        sphere = Sphere((0, 0, 0), 1)
        hit = sphere.intersect(ray((0, 0, -5), (0, 0, 1)))
        np.testing.assert_allclose(hit, [0, 0, -1])

    def test_intersect_from_inside_returns_forward_root(self):
        sphere = Sphere((0, 0, 0), 3)
        np.testing.assert_allclose(sphere.intersect(ray((0, 0, 0), (0, 0, 1))), [0, 0, 3])
        np.testing.assert_allclose(sphere.intersect(ray((0, 0, 0), (0, 0, -1))), [0, 0, -3])

    def test_sphere_behind_ray(self):
        sphere = Sphere((0, 0, 3), 1)
        assert sphere.intersect(ray((0, 0, 0), (0, 0, -1))) is None

    def test_ray_passing_beside_sphere(self):
        sphere = Sphere((0, 0, 5), 1)
        assert sphere.intersect(ray((2, 0, 0), (0, 0, 1))) is None

    def test_serialize(self):
        sphere = Sphere((0, 0, 0), 5, Material((255, 0, 0)))
        assert sphere.serialize() == {
            'type': 'Sphere',
            'position': [0, 0, 0],
            'radius': 5,
            'material': {
                'color': [255, 0, 0],
                'glossiness': 0,
                'reflectivity': 0,
                'transparency': 0,
                'checkered': False,
            },
        }

    def test_deserialize(self):
        sphere = Sphere.deserialize({
            'position': [1, 2, 3],
            'radius': 10,
            'material': {'color': [125, 255, 125], 'glossiness': 16, 'reflectivity': 0.9},
        })
        assert sphere.position.tolist() == [1, 2, 3]
        assert sphere.radius == 10
        assert sphere.material.color.tolist() == [125, 255, 125]
        assert sphere.material.glossiness == 16
        assert sphere.material.reflectivity == 0.9
        assert sphere.material.transparency == 0


class TestPlane:
    def test_intersect(self):
        plane = Plane((0, -1, 0), (0, 1, 0))
        hit = plane.intersect(ray((0, 1, 0), (0, -1, 0)))
        np.testing.assert_allclose(hit, [0, -1, 0])

    def test_parallel_ray_misses(self):
        plane = Plane((0, 0, 0), (0, 1, 0))
        assert plane.intersect(ray((0, 1, 0), (1, 0, 0))) is None

    def test_nearly_parallel_ray_misses(self):
        plane = Plane((0, 0, 0), (0, 1, 0))
        direction = vector(1, -0.0005, 0)
        assert plane.intersect(Ray(vector(0, 1, 0), direction / np.linalg.norm(direction))) is None

    def test_plane_behind_ray(self):
        plane = Plane((0, 0, 0), (0, 1, 0))
        assert plane.intersect(ray((0, 1, 0), (0, 1, 0))) is None

    def test_normal_is_constant(self):
        plane = Plane((0, 0, 0), (0, 2, 0))
        assert plane.normal(vector(5, 0, -3)).tolist() == [0, 1, 0]

    def test_checkered_flag_is_folded_into_material(self):
        plane = Plane.deserialize({
            'type': 'Plane',
            'point': [0, 0, 0],
            'normal': [0, 1, 0],
            'checkered': True,
            'material': {'color': [255, 255, 255]},
        })
        assert plane.material.checkered


class TestRectangle:
    def test_constructor_attributes(self):
        rectangle = Rectangle((0, 0, 0), (0, 1, 0), 5, Material((255, 0, 0)))
        assert rectangle.point.tolist() == [0, 0, 0]
        assert rectangle.size == 5
        assert rectangle.material.color.tolist() == [255, 0, 0]

    def test_intersect_inside_bounds(self):
        rectangle = Rectangle((0, 0, 5), (0, 0, -1), 5)
        np.testing.assert_allclose(rectangle.intersect(ray((0, 0, 0), (0, 0, 1))), [0, 0, 5])
        np.testing.assert_allclose(rectangle.intersect(ray((4, 0, 0), (0, 0, 1))), [4, 0, 5])

    def test_intersect_outside_bounds(self):
        rectangle = Rectangle((0, 0, 5), (0, 0, -1), 5)
        assert rectangle.intersect(ray((5.5, 0, 0), (0, 0, 1))) is None

    def test_random_point_lies_on_rectangle(self):
        rectangle = Rectangle((1, 2, 3), (0, -1, 0), 0.5)
        for _ in range(100):
            point = rectangle.random_point()
            assert point[1] == pytest.approx(2)
            assert abs(point[0] - 1) <= 0.5
            assert abs(point[2] - 3) <= 0.5

    def test_serialize_includes_size(self):
        data = Rectangle((0, 0, 0), (0, 0, 1), 2).serialize()
        assert data['type'] == 'Rectangle'
        assert data['size'] == 2


class TestCheckeredMaterial:
    def test_plain_material_ignores_position(self):
        material = Material((200, 100, 50))
        assert material.color_at(vector(0.6, 0, 0.1)).tolist() == [200, 100, 50]

    def test_checker_parity(self):
        material = Material((200, 200, 200), checkered=True)
        assert material.color_at(vector(0.1, 0, 0.1)).tolist() == [200, 200, 200]
        assert material.color_at(vector(0.6, 0, 0.1)).tolist() == [100, 100, 100]
        assert material.color_at(vector(0.6, 0, 0.6)).tolist() == [200, 200, 200]
        assert material.color_at(vector(-0.1, 0, 0.1)).tolist() == [100, 100, 100]

    def test_checker_uses_axes_across_the_plane(self):
        wall = Plane((0, 0, 0), (1, 0, 0), Material((200, 200, 200), checkered=True))
        # x is along the normal and does not change the tile
        assert wall.color_at(vector(0.7, 0.1, 0.1)).tolist() == [200, 200, 200]
        assert wall.color_at(vector(0.0, 0.6, 0.1)).tolist() == [100, 100, 100]
