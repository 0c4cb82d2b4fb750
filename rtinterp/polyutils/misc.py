import functools

import numpy as np


class InvalidConfiguration(ValueError):
    """Raised when a surface, source subset, kernel or cancel distance is
    rejected. The caller keeps whatever configuration it had before.
    """
    pass


def _memo(fn):
    """Helper decorator memoizes the given zero-argument function.
    Really helpful for memoizing properties so they don't have to be recomputed
    dozens of times.
    """
    @functools.wraps(fn)
    def memofn(self, *args, **kwargs):
        if id(fn) not in self._cache:
            self._cache[id(fn)] = fn(self)
        return self._cache[id(fn)]

    return memofn

def polys_to_neighbors(polys, npts):
    '''Neighbor lists of each vertex from triangle edges

    Parameters
    ----------
    polys : array_like
        n x 3 array of vertex indices per triangle
    npts : int
        total number of vertices, vertices in no triangle get an empty list
    '''
    polys = np.asarray(polys, dtype=int).reshape(-1, 3)
    first = np.hstack([polys[:, 0], polys[:, 1], polys[:, 2]])
    second = np.hstack([polys[:, 1], polys[:, 2], polys[:, 0]])
    neighbors = [set() for _ in range(npts)]
    for a, b in zip(first, second):
        if a != b:
            neighbors[a].add(b)
            neighbors[b].add(a)
    return [sorted(n) for n in neighbors]

def neighbors_to_edges(neighbors, npts):
    '''Flattens neighbor lists into (row, col) edge arrays without self loops.
    Edges are not symmetrized here. Raises InvalidConfiguration for indices
    outside [0, npts).
    '''
    if len(neighbors) != npts:
        raise InvalidConfiguration("Got neighbor lists for %d vertices, surface has %d"
                                   % (len(neighbors), npts))

    counts = np.array([len(n) for n in neighbors], dtype=int)
    row = np.repeat(np.arange(npts), counts)
    if counts.sum() > 0:
        col = np.hstack([np.asarray(list(n)).ravel() for n in neighbors if len(n) > 0])
        if not np.issubdtype(col.dtype, np.integer):
            raise InvalidConfiguration("Neighbor indices must be integers, got %s" % col.dtype)
        col = col.astype(int)
    else:
        col = np.zeros((0,), dtype=int)

    if len(col) > 0 and (col.min() < 0 or col.max() >= npts):
        raise InvalidConfiguration("Neighbor indices must be in [0, %d)" % npts)

    keep = row != col
    return row[keep], col[keep]
