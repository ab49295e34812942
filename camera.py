import numpy as np

from ray_math import Ray, normalize


# Sub-pixel offsets of the four supersampling rays
SUPERSAMPLING_OFFSETS = ((-0.25, -0.25), (0.25, -0.25), (-0.25, 0.25), (0.25, 0.25))


def screen_corners(width, height, screen_width=2.0, screen_z=0.0):
    """Top-left and bottom-right corners of a screen plane centred on the z axis."""
    screen_height = screen_width * height / width
    top_left = (-screen_width / 2, screen_height / 2, screen_z)
    bottom_right = (screen_width / 2, -screen_height / 2, screen_z)
    return top_left, bottom_right


class Camera:
    def __init__(self, position, top_left, bottom_right, width, height):
        self.position = np.array(position, dtype=np.float64)
        self.top_left = np.array(top_left, dtype=np.float64)
        self.bottom_right = np.array(bottom_right, dtype=np.float64)
        self.width = width
        self.height = height

        # Screen plane extent, spanned over x and y
        self.uv = self.bottom_right - self.top_left

    def generate_ray(self, x, y):
        """Generate a ray from the camera through pixel (x, y) of the screen plane."""
        u = self.uv[0] * x / self.width
        v = self.uv[1] * y / self.height
        screen_point = self.top_left + np.array([u, v, 0.0])
        return Ray(self.position, normalize(screen_point - self.position))

    def generate_rays(self, x, y, supersampling=False):
        """Rays for one pixel: a single ray, or four jittered ones when supersampling."""
        if not supersampling:
            return [self.generate_ray(x, y)]
        return [self.generate_ray(x + dx, y + dy) for dx, dy in SUPERSAMPLING_OFFSETS]
