import argparse
from collections import namedtuple

from PIL import Image
import numpy as np

from camera import Camera, screen_corners
from ray_math import Ray, magnitude, random_unit_vector
from scene import parse_scene_file
from scene_settings import SceneSettings


# Offset along the normal for secondary ray origins, avoids self-intersection
EPSILON = 0.001
AMBIENT_OCCLUSION_MAX_DISTANCE = 0.25
SHADOW_STRENGTH = 0.9
# Rows rendered between two partial bucket updates
UPDATE_INTERVAL = 16

WHITE = np.array([255.0, 255.0, 255.0])
WHITE.flags.writeable = False


Intersection = namedtuple('Intersection', ['point', 'normal', 'primitive', 'distance'])


def find_nearest_intersection(ray, primitives):
    """
    Find the nearest primitive intersection along the ray.

    Every primitive is tested; hits at the ray origin are ignored and on equal
    distances the one listed first wins.

    Returns:
        Intersection if the ray hits anything, None otherwise
    """
    nearest_distance = np.inf
    nearest_point = None
    nearest_primitive = None

    for primitive in primitives:
        point = primitive.intersect(ray)
        if point is None:
            continue
        distance = magnitude(point - ray.origin)
        if 0 < distance < nearest_distance:
            nearest_distance = distance
            nearest_point = point
            nearest_primitive = primitive

    if nearest_primitive is None:
        return None

    return Intersection(nearest_point, nearest_primitive.normal(nearest_point),
                        nearest_primitive, nearest_distance)


def shade(intersection, ray, light):
    """
    Local color at a hit point: Lambertian diffuse plus Blinn-Phong specular.
    """
    point, normal, primitive, _ = intersection
    material = primitive.material

    to_light = light.sample_point() - point
    to_light = to_light / magnitude(to_light)

    lambertian = max(0.0, float(np.dot(normal, to_light)))
    color = primitive.color_at(point) * lambertian

    if material.glossiness > 0:
        half_vector = (to_light - ray.direction) * 0.5
        specular = max(0.0, float(np.dot(half_vector, normal))) ** material.glossiness
        color = color + WHITE * specular

    return color


def compute_shadow_strength(intersection, scene):
    """
    Light reaching a hit point, from 1 (unoccluded) down to 1 - SHADOW_STRENGTH.

    A point light is tested once against its position; an area light with
    several samples is tested against a random point on its surface per sample.
    The shaded primitive and the light's own primitive never cast shadows.
    """
    point, normal, primitive, _ = intersection
    light = scene.light
    samples = max(1, light.samples)
    origin = point + normal * EPSILON

    occluded = 0
    for _ in range(samples):
        target = light.sample_point() if samples > 1 else light.position
        to_light = target - point
        distance_to_light = magnitude(to_light)
        shadow_ray = Ray(origin, to_light / distance_to_light)

        for other in scene.primitives:
            if other is primitive or other is light.primitive:
                continue
            hit = other.intersect(shadow_ray)
            if hit is not None and magnitude(point - hit) < distance_to_light:
                occluded += 1
                break

    return 1.0 - occluded / samples * SHADOW_STRENGTH


def compute_ambient_occlusion(intersection, primitives, samples):
    """
    Ambient occlusion factor between 0 (fully occluded) and 1 (open).

    Random rays are cast into the hemisphere around the normal; hits closer
    than AMBIENT_OCCLUSION_MAX_DISTANCE are weighted by how close they are.
    Gives up and returns 1 when half of the samples found nothing.
    """
    point, normal, _, _ = intersection
    occlusion = 0.0

    for i in range(samples):
        if i > samples / 2 and occlusion == 0:
            return 1.0

        direction = random_unit_vector()
        if np.dot(direction, normal) < 0:
            direction = -direction

        hit = find_nearest_intersection(Ray(point + direction * EPSILON, direction), primitives)
        if hit is None:
            continue

        distance = magnitude(point - hit.point)
        if distance < AMBIENT_OCCLUSION_MAX_DISTANCE:
            occlusion += 1.0 - distance / AMBIENT_OCCLUSION_MAX_DISTANCE

    return 1.0 - occlusion / samples


def trace_ray(ray, scene, settings, depth):
    """
    Trace a ray through the scene and return its color.

    Returns None once the recursion depth is used up; the caller substitutes
    the background color.
    """
    if depth <= 0:
        return None

    intersection = find_nearest_intersection(ray, scene.primitives)
    if intersection is None:
        return np.array(settings.background_color, dtype=np.float64)

    point, normal, primitive, _ = intersection

    # Light source is self-luminous
    if primitive is scene.light.primitive:
        return WHITE.copy()

    material = primitive.material
    color = shade(intersection, ray, scene.light)

    if material.reflectivity > 0:
        reflected_ray = Ray(point + normal * EPSILON, ray.reflect(normal))
        reflected_color = trace_ray(reflected_ray, scene, settings, depth - 1)
        if reflected_color is not None:
            color = color * (1 - material.reflectivity) + reflected_color * material.reflectivity

    if material.transparency > 0:
        refracted_direction = ray.refract(normal)
        if refracted_direction is not None:
            refracted_ray = Ray(point + refracted_direction * EPSILON, refracted_direction)
            refracted_color = trace_ray(refracted_ray, scene, settings, depth - 1)
            if refracted_color is not None:
                color = color * (1 - material.transparency) + refracted_color * material.transparency

    color = color * compute_shadow_strength(intersection, scene)

    if settings.ambient_occlusion_samples > 0:
        occlusion_factor = compute_ambient_occlusion(intersection, scene.primitives,
                                                     settings.ambient_occlusion_samples)
        if occlusion_factor < 1:
            color = color * occlusion_factor

    return color


def render_pixel(camera, scene, settings, x, y, supersampling=False):
    """Color of pixel (x, y), averaged over the supersampling rays if enabled."""
    background_color = np.array(settings.background_color, dtype=np.float64)
    rays = camera.generate_rays(x, y, supersampling)

    color = np.zeros(3)
    for ray in rays:
        traced = trace_ray(ray, scene, settings, settings.max_recursions)
        color = color + (traced if traced is not None else background_color)
    return color / len(rays)


def render_bucket(camera, scene, settings, x0, y0, x1, y1, supersampling=False,
                  update_interval=UPDATE_INTERVAL):
    """
    Render the pixels of [x0, x1) x [y0, y1) row by row.

    Yields (bucket, done) pairs, where bucket maps x -> y -> (r, g, b) for the
    rows rendered since the previous update. A partial bucket is produced every
    `update_interval` rows and a final one, flagged done, at the end.
    """
    bucket = {}
    for y in range(y0, y1):
        for x in range(x0, x1):
            color = render_pixel(camera, scene, settings, x, y, supersampling)
            bucket.setdefault(x, {})[y] = tuple(color.tolist())

        if (y - y0 + 1) % update_interval == 0 and y + 1 < y1:
            yield bucket, False
            bucket = {}

    yield bucket, True


def paint_bucket(image, bucket):
    """Write the colors of a bucket into an (height, width, 3) image array."""
    for x, column in bucket.items():
        for y, color in column.items():
            image[int(y), int(x)] = color


def render(camera, scene, settings, supersampling=False):
    """
    Render the scene to an image array in this process (sequential version).
    """
    import sys
    import time

    width, height = camera.width, camera.height
    image = np.zeros((height, width, 3), dtype=np.float64)

    print(f"Max depth: {settings.max_recursions}, Shadow rays: {scene.light.samples} per point, "
          f"AO samples: {settings.ambient_occlusion_samples}")

    start_time = time.time()
    rows_done = 0
    for bucket, _ in render_bucket(camera, scene, settings, 0, 0, width, height, supersampling):
        paint_bucket(image, bucket)
        if bucket:
            rows_done = max(max(column) for column in bucket.values()) + 1
        elapsed = time.time() - start_time
        progress = rows_done / height
        eta = (elapsed / progress) * (1 - progress) if progress > 0 else 0
        print(f"Row {rows_done}/{height} ({progress*100:.1f}%) - ETA: {eta:.0f}s")
        sys.stdout.flush()

    total_time = time.time() - start_time
    print(f"Rendering complete in {total_time:.1f}s")

    return image


def save_image(image_array, output_path):
    """Save the rendered image to a file."""
    # Colors are unbounded; clamp to the displayable range only here
    image_array = np.clip(image_array, 0, 255).astype(np.uint8)

    image = Image.fromarray(image_array)
    image.save(output_path)
    print(f"Image saved to {output_path}")


def main(argv=None):
    from bucket_renderer import default_worker_count, render_parallel

    parser = argparse.ArgumentParser(description='Python Ray Tracer')
    parser.add_argument('scene_file', type=str, help='Path to the JSON scene file')
    parser.add_argument('output_image', type=str, help='Name of the output image file')
    parser.add_argument('--width', type=int, default=256, help='Image width')
    parser.add_argument('--height', type=int, default=256, help='Image height')
    parser.add_argument('--sequential', action='store_true',
                        help='Render in this process instead of worker processes')
    parser.add_argument('--workers', type=int, default=None,
                        help='Number of worker processes (default: CPU count)')
    parser.add_argument('--supersampling', action='store_true',
                        help='Average four jittered rays per pixel')
    parser.add_argument('--max-depth', type=int, default=4, help='Maximum recursion depth')
    parser.add_argument('--ambient-occlusion-samples', type=int, default=0,
                        help='Ambient occlusion rays per hit point (0 disables)')
    args = parser.parse_args(argv)

    scene = parse_scene_file(args.scene_file)
    settings = SceneSettings(max_recursions=args.max_depth,
                             ambient_occlusion_samples=args.ambient_occlusion_samples)
    top_left, bottom_right = screen_corners(args.width, args.height)

    print(f"Scene loaded: {len(scene.primitives)} primitives, light: {scene.light}")
    print(f"Rendering {args.width}x{args.height} image...")

    if args.sequential:
        print("Using sequential renderer...")
        camera = Camera(scene.camera, top_left, bottom_right, args.width, args.height)
        image_array = render(camera, scene, settings, args.supersampling)
    else:
        num_workers = args.workers if args.workers else default_worker_count()
        print(f"Using parallel renderer with {num_workers} workers...")
        image_array = render_parallel(scene, settings, args.width, args.height,
                                      top_left, bottom_right, num_workers,
                                      supersampling=args.supersampling)

    save_image(image_array, args.output_image)


if __name__ == '__main__':
    main()
