"""
Parallel strip renderer.

The controller splits the image into horizontal strips and starts one worker
process per strip. Each worker receives three messages on its own inbox queue,
in this order:

    {'screen': {'top_left', 'bottom_right'}, 'resolution': {'width', 'height'}, 'settings'}
    {'scene': <serialized scene>}
    {'bucket': {'x': [x0, x1], 'y': [y0, y1]}, 'supersampling': bool}

and streams back {'worker', 'bucket', 'done'} messages on the shared result
queue, one every UPDATE_INTERVAL rows and one when the strip is finished.
Bucket colors are unclamped (r, g, b) float tuples keyed by x, then y.
Only the controller writes to the image.
"""
import multiprocessing as mp
import os
import queue
import time

import numpy as np

from camera import Camera
from ray_tracer import paint_bucket, render_bucket
from scene import Scene
from scene_settings import SceneSettings


# Seconds between checks for dead workers while waiting on results
POLL_INTERVAL = 0.1


def viewport_message(top_left, bottom_right, width, height, settings):
    return {
        'screen': {'top_left': list(top_left), 'bottom_right': list(bottom_right)},
        'resolution': {'width': width, 'height': height},
        'settings': settings.to_dict(),
    }


def scene_message(scene):
    return {'scene': scene.serialize()}


def job_message(x0, x1, y0, y1, supersampling=False):
    return {'bucket': {'x': [x0, x1], 'y': [y0, y1]}, 'supersampling': supersampling}


def default_worker_count():
    """Number of CPUs, or 1 when it cannot be determined."""
    return os.cpu_count() or 1


def partition_strips(height, num_workers):
    """
    Split [0, height) into num_workers horizontal strips of height // num_workers
    rows. The last strip also takes the leftover rows.
    """
    num_workers = max(1, min(num_workers, height))
    rows_per_strip = height // num_workers
    strips = []
    for i in range(num_workers):
        y_start = i * rows_per_strip
        y_end = height if i == num_workers - 1 else y_start + rows_per_strip
        strips.append((y_start, y_end))
    return strips


class RenderContext:
    """
    Everything a worker needs to render its job.

    Built from the viewport and scene messages; never modified afterwards.
    """

    def __init__(self, camera, scene, settings):
        self.camera = camera
        self.scene = scene
        self.settings = settings

    @classmethod
    def from_messages(cls, viewport, scene_data):
        scene = Scene.deserialize(scene_data['scene'])
        resolution = viewport['resolution']
        camera = Camera(scene.camera,
                        viewport['screen']['top_left'],
                        viewport['screen']['bottom_right'],
                        resolution['width'],
                        resolution['height'])
        settings = SceneSettings.from_dict(viewport.get('settings', {}))
        return cls(camera, scene, settings)

    def execute(self, job):
        """Render a job message, yielding (bucket, done) updates."""
        x0, x1 = job['bucket']['x']
        y0, y1 = job['bucket']['y']
        return render_bucket(self.camera, self.scene, self.settings, x0, y0, x1, y1,
                             job.get('supersampling', False))


def _expect(message, key, phase):
    if key not in message:
        raise ValueError("Expected {} message with '{}', got keys {}".format(
            phase, key, sorted(message)))
    return message


def run_worker(worker_id, inbox, results):
    """
    Worker process entry point: configure, load the scene, then execute the job.
    """
    viewport = _expect(inbox.get(), 'screen', 'viewport')
    scene_data = _expect(inbox.get(), 'scene', 'scene')
    job = _expect(inbox.get(), 'bucket', 'job')

    context = RenderContext.from_messages(viewport, scene_data)
    for bucket, done in context.execute(job):
        results.put({'worker': worker_id, 'bucket': bucket, 'done': done})


def render_parallel(scene, settings, width, height, top_left, bottom_right, num_workers=None,
                    supersampling=False, on_bucket=None, worker_target=run_worker):
    """
    Render the scene using one worker process per horizontal strip.

    Args:
        num_workers: number of worker processes (default: CPU count)
        on_bucket: optional callback(worker_id, bucket) called after each bucket is painted

    Returns:
        (height, width, 3) float array; rows of a strip whose worker died stay zero
    """
    if num_workers is None:
        num_workers = default_worker_count()

    start_time = time.time()

    strips = partition_strips(height, num_workers)
    print(f"Parallel rendering {width}x{height} with {len(strips)} workers, "
          f"~{height // len(strips)} rows per strip")

    viewport = viewport_message(top_left, bottom_right, width, height, settings)
    scene_data = scene_message(scene)

    results = mp.Queue()
    workers = {}
    inboxes = {}
    for worker_id, (y_start, y_end) in enumerate(strips):
        inbox = mp.Queue()
        process = mp.Process(target=worker_target, args=(worker_id, inbox, results), daemon=True)
        process.start()
        inbox.put(viewport)
        inbox.put(scene_data)
        inbox.put(job_message(0, width, y_start, y_end, supersampling))
        workers[worker_id] = process
        inboxes[worker_id] = inbox

    image = np.zeros((height, width, 3), dtype=np.float64)

    def paint(message):
        paint_bucket(image, message['bucket'])
        if on_bucket is not None:
            on_bucket(message['worker'], message['bucket'])

    pending = set(workers)
    while pending:
        try:
            message = results.get(timeout=POLL_INTERVAL)
        except queue.Empty:
            for worker_id in sorted(pending):
                process = workers[worker_id]
                if not process.is_alive() and process.exitcode != 0:
                    y_start, y_end = strips[worker_id]
                    print(f"Warning: worker {worker_id} exited with code {process.exitcode}, "
                          f"rows {y_start}-{y_end} left unrendered")
                    # Nobody will read what is left in its inbox
                    inboxes[worker_id].cancel_join_thread()
                    pending.discard(worker_id)
            continue

        paint(message)
        if message['done']:
            pending.discard(message['worker'])
            print(f"Worker {message['worker']} finished after {time.time() - start_time:.2f}s")

    # Buckets a failed worker sent before it died
    while True:
        try:
            paint(results.get_nowait())
        except queue.Empty:
            break

    for process in workers.values():
        process.join()

    print(f"Parallel rendering complete in {time.time() - start_time:.1f}s")
    return image
