"""Surface constrained distance computation (SCDC)

Geodesic distances from a sparse subset of surface vertices to every vertex
within a cancel distance, following mesh edges.
"""
import logging
import time

import numpy as np
from scipy.sparse import csgraph

from ..options import config
from .misc import InvalidConfiguration

logger = logging.getLogger(__name__)


class DistanceMatrix(object):
    """Geodesic distances between subset vertices and surface vertices.

    Conceptually a (n_sources, n_verts) matrix, stored as the parallel arrays
    of reachable pairs only. Pairs that are not stored are unreachable, either
    beyond the cancel distance or in another connected component. Zero
    distances are stored explicitly.

    Parameters
    ----------
    sources : 1D ndarray of ints
        Row (position in the source subset) of each reachable pair.
    vertices : 1D ndarray of ints
        Surface vertex index of each reachable pair.
    distances : 1D ndarray of floats
        Geodesic distance of each reachable pair.
    shape : (int, int)
        (n_sources, n_verts)
    cancel_dist : float
        Cancel distance the matrix was solved with.
    """
    def __init__(self, sources, vertices, distances, shape, cancel_dist):
        self.sources = np.array(sources, dtype=int)
        self.vertices = np.array(vertices, dtype=int)
        self.distances = np.array(distances, dtype=np.double)
        self.shape = tuple(shape)
        self.cancel_dist = cancel_dist
        for arr in (self.sources, self.vertices, self.distances):
            arr.setflags(write=False)

    def __len__(self):
        return len(self.distances)

    def __repr__(self):
        return '<DistanceMatrix %dx%d with %d reachable pairs>' % (self.shape + (len(self),))

    def dense(self):
        """Dense (n_sources, n_verts) array, np.inf where unreachable."""
        out = np.full(self.shape, np.inf)
        out[self.sources, self.vertices] = self.distances
        return out


def scdc(surface, subset, cancel_dist, chunk_size=None):
    """Geodesic distance from each vertex in `subset` to every surface vertex
    within `cancel_dist`.

    Runs one Dijkstra expansion per subset vertex over the vertex adjacency
    graph, with Euclidean edge lengths as weights. Each expansion stops as
    soon as the closest unresolved vertex is farther than `cancel_dist`, so
    the work stays local to the subset for small cancel distances. Sources are
    solved `chunk_size` at a time and only the reachable pairs of each chunk
    are kept.

    Parameters
    ----------
    surface : Surface
    subset : 1D array-like of ints
        Distinct vertex indices. Their order gives the row order of the result.
    cancel_dist : float
        Non-negative search radius. Distances equal to it are kept.
    chunk_size : int, optional
        Number of sources solved per call into scipy. Defaults to
        [geodesic] chunk_size from the config.

    Returns
    -------
    DistanceMatrix
    """
    if cancel_dist < 0 or not np.isfinite(cancel_dist):
        raise InvalidConfiguration("Cancel distance must be finite and >= 0, got %r" % cancel_dist)
    subset = surface.check_subset(subset)
    if chunk_size is None:
        chunk_size = config.getint("geodesic", "chunk_size")
    chunk_size = max(int(chunk_size), 1)

    npt = len(surface.pts)
    nsrc = len(subset)
    if nsrc == 0:
        return DistanceMatrix([], [], [], (0, npt), cancel_dist)

    tstart = time.time()
    graph = surface.distance_graph
    sources, vertices, distances = [], [], []
    for start in range(0, nsrc, chunk_size):
        chunk = subset[start:start + chunk_size]
        # graph is already symmetric
        dist = csgraph.dijkstra(graph, directed=True, indices=chunk,
                                limit=float(cancel_dist))
        dist = np.atleast_2d(dist)
        row, col = np.nonzero(np.isfinite(dist))
        sources.append(row + start)
        vertices.append(col)
        distances.append(dist[row, col])

    dmat = DistanceMatrix(np.hstack(sources), np.hstack(vertices), np.hstack(distances),
                          (nsrc, npt), cancel_dist)
    logger.debug("scdc: %d sources, %d vertices, %d reachable pairs in %0.3f s",
                 nsrc, npt, len(dmat), time.time() - tstart)
    return dmat
