"""Background recomputation of the interpolation operator

`InterpolationMatWorker` owns the interpolation configuration (surface,
source subset, kernel, cancel distance). Setters record the new configuration
and return immediately; a daemon thread solves geodesic distances and builds
the operator, then publishes it to subscribers. Results computed from a
configuration that changed during the run are discarded, so a published
operator is never older than a configuration change that finished before it.
"""
import time
import logging
import threading

from .options import config
from .polyutils import Surface, InvalidConfiguration
from .polyutils.geodesic import scdc
from . import interpolation

logger = logging.getLogger(__name__)


class InterpolationMatWorker(threading.Thread):
    """Recomputes the interpolation operator off the calling thread.

    Parameters
    ----------
    cancel_dist : float, optional
        Initial cancel distance. Defaults to [interpolation] cancel_distance.
    function : str, optional
        Initial kernel name. Defaults to [interpolation] function.
    chunk_size : int, optional
        Passed on to `scdc`.
    """
    def __init__(self, cancel_dist=None, function=None, chunk_size=None):
        super(InterpolationMatWorker, self).__init__(name="InterpolationMatWorker", daemon=True)
        if cancel_dist is None:
            cancel_dist = config.getfloat("interpolation", "cancel_distance")
        if function is None:
            function = config.get("interpolation", "function")
        self._check_cancel_distance(cancel_dist)
        interpolation.get_function(function)

        self.chunk_size = chunk_size

        self._config_lock = threading.Lock()
        self._changed = threading.Condition(self._config_lock)
        self._stop_requested = False

        self._surface = None
        self._subset = None
        self._function = str(function).lower()
        self._cancel_dist = float(cancel_dist)

        # bumped by every accepted change / by changes that invalidate distances
        self._generation = 0
        self._geometry_generation = 0
        self._built_generation = 0
        self._busy = False

        # last solved distances, tagged with the geometry generation they belong to
        self._distances = None
        self._distances_generation = -1

        self._operator = None
        self._subscribers = []

        self.n_solves = 0
        self.n_builds = 0
        self.n_published = 0
        self.n_discarded = 0

    def __repr__(self):
        return '<InterpolationMatWorker %s, cancel distance %g>' % (self._function, self._cancel_dist)

    @property
    def operator(self):
        """Latest published interpolation operator, None before the first build."""
        return self._operator

    @property
    def function(self):
        return self._function

    @property
    def cancel_dist(self):
        return self._cancel_dist

    @property
    def surface(self):
        return self._surface

    @property
    def subset(self):
        return self._subset

    @property
    def distances(self):
        """Most recently solved distance matrix, None before the first solve."""
        return self._distances

    def subscribe(self, callback):
        """Register `callback(operator)`, called on the worker thread for each
        newly published operator. Callbacks must not call `wait`, the rebuild
        they are notified from is still in progress."""
        with self._config_lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback):
        with self._config_lock:
            self._subscribers.remove(callback)

    def set_interpolation_info(self, pts, neighbors, subset):
        """Replace surface and source subset, then rebuild everything.

        Parameters
        ----------
        pts : 2D ndarray, shape (total_verts, 3)
        neighbors : sequence of sequences of ints
            Adjacent vertices of each vertex.
        subset : 1D array-like of ints
            Surface vertices carrying source estimates, in column order.
        """
        try:
            surface = pts if isinstance(pts, Surface) else Surface(pts, neighbors)
            subset = surface.check_subset(subset)
        except InvalidConfiguration as e:
            logger.warning("Rejected interpolation info: %s", e)
            raise

        with self._config_lock:
            self._surface = surface
            self._subset = subset
            self._geometry_generation += 1
            self._touch()
        logger.debug("Interpolation info set: %d vertices, %d sources", len(surface), len(subset))

    def set_interpolation_function(self, function):
        """Change the kernel. Reuses the last solved distances."""
        try:
            interpolation.get_function(function)
        except InvalidConfiguration as e:
            logger.warning("Rejected interpolation function: %s", e)
            raise

        with self._config_lock:
            self._function = str(function).lower()
            self._touch()

    def set_cancel_distance(self, cancel_dist):
        """Change the cancel distance, then re-solve distances and rebuild."""
        try:
            self._check_cancel_distance(cancel_dist)
        except InvalidConfiguration as e:
            logger.warning("Rejected cancel distance: %s", e)
            raise

        with self._config_lock:
            self._cancel_dist = float(cancel_dist)
            self._geometry_generation += 1
            self._touch()

    @staticmethod
    def _check_cancel_distance(cancel_dist):
        try:
            cancel_dist = float(cancel_dist)
        except (TypeError, ValueError):
            raise InvalidConfiguration("Cancel distance must be a number, got %r" % (cancel_dist,))
        if not cancel_dist >= 0 or cancel_dist == float('inf'):
            raise InvalidConfiguration("Cancel distance must be finite and >= 0, got %r" % cancel_dist)

    def _touch(self):
        # caller holds the lock
        self._generation += 1
        self._changed.notify_all()

    @property
    def _pending(self):
        return self._surface is not None and self._built_generation != self._generation

    def wait(self, timeout=None):
        """Block until no rebuild is pending or running.

        Returns False if `timeout` (seconds) expired first. Raises RuntimeError
        when called from the worker thread itself, e.g. from a subscriber.
        """
        if threading.current_thread() is self:
            raise RuntimeError("wait() called from the interpolation worker thread")
        with self._changed:
            return self._changed.wait_for(lambda: not (self._pending or self._busy), timeout)

    def stop(self):
        with self._changed:
            self._stop_requested = True
            self._changed.notify_all()

    def run(self):
        while True:
            with self._changed:
                self._changed.wait_for(lambda: self._stop_requested or self._pending)
                if self._stop_requested:
                    return
                generation = self._generation
                geometry_generation = self._geometry_generation
                surface, subset = self._surface, self._subset
                function, cancel_dist = self._function, self._cancel_dist
                distances = None
                if self._distances_generation == geometry_generation:
                    distances = self._distances
                self._busy = True

            try:
                operator = self._rebuild(surface, subset, function, cancel_dist,
                                         distances, geometry_generation)
            except Exception:
                logger.exception("Interpolation matrix rebuild failed, keeping previous operator")
                with self._changed:
                    self._busy = False
                    self._built_generation = generation
                    self._changed.notify_all()
                continue

            with self._changed:
                if generation != self._generation:
                    self.n_discarded += 1
                    logger.debug("Discarding stale interpolation matrix")
                    self._busy = False
                    self._changed.notify_all()
                    continue
                self._operator = operator
                self._built_generation = generation
                self.n_published += 1
                subscribers = list(self._subscribers)

            logger.info("Published interpolation matrix %dx%d (%s, cancel distance %g)",
                        operator.shape[0], operator.shape[1], function, cancel_dist)
            for callback in subscribers:
                try:
                    callback(operator)
                except Exception:
                    logger.exception("Interpolation matrix subscriber %r failed", callback)

            with self._changed:
                self._busy = False
                self._changed.notify_all()

    def _rebuild(self, surface, subset, function, cancel_dist, distances, geometry_generation):
        tstart = time.time()
        if distances is None:
            distances = scdc(surface, subset, cancel_dist, chunk_size=self.chunk_size)
            with self._config_lock:
                self.n_solves += 1
                self._distances = distances
                self._distances_generation = geometry_generation

        operator = interpolation.create_interpolation_mat(subset, distances, function, cancel_dist)
        with self._config_lock:
            self.n_builds += 1
        logger.debug("Interpolation matrix rebuilt in %0.3f s", time.time() - tstart)
        return operator
