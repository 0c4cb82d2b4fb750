"""Sparse interpolation operators from geodesic distances

The operator maps values known at the source subset onto every surface
vertex. Each row is a normalized kernel weighting of the sources within the
cancel distance of that vertex, or all zero if there are none.
"""
import logging

import numpy as np
import numexpr as ne
from scipy import sparse

from .options import config
from .polyutils.misc import InvalidConfiguration

logger = logging.getLogger(__name__)

# sigma of the gaussian kernel, as a fraction of the cancel distance
GAUSSIAN_WIDTH = config.getfloat("interpolation", "gaussian_width")


def _falloff(dist, cancel_dist, power):
    dist = np.asarray(dist, dtype=np.double)
    if cancel_dist <= 0 or dist.size == 0:
        return np.zeros(dist.shape)
    c = float(cancel_dist)
    return ne.evaluate("where(dist < c, (1 - dist / c) ** power, 0.0)",
                       local_dict=dict(dist=dist, c=c, power=float(power)))

def linear(dist, cancel_dist):
    """1 - d/c inside the cancel distance, 0 outside"""
    return _falloff(dist, cancel_dist, 1)

def square(dist, cancel_dist):
    """(1 - d/c)**2 inside the cancel distance, 0 outside"""
    return _falloff(dist, cancel_dist, 2)

def cubic(dist, cancel_dist):
    """(1 - d/c)**3 inside the cancel distance, 0 outside"""
    return _falloff(dist, cancel_dist, 3)

def gaussian(dist, cancel_dist):
    """exp(-d**2 / (2 sigma**2)) with sigma = GAUSSIAN_WIDTH * c, 0 outside the
    cancel distance"""
    dist = np.asarray(dist, dtype=np.double)
    if cancel_dist <= 0 or dist.size == 0:
        return np.zeros(dist.shape)
    c = float(cancel_dist)
    s = GAUSSIAN_WIDTH * c
    return ne.evaluate("where(dist <= c, exp(-(dist ** 2) / (2 * s ** 2)), 0.0)",
                       local_dict=dict(dist=dist, c=c, s=s))

_functions = dict(
    linear=linear,
    square=square,
    cubic=cubic,
    gaussian=gaussian)

functions = tuple(_functions)


def get_function(name):
    """Kernel function for `name` (case-insensitive): one of `functions`.
    """
    try:
        return _functions[str(name).lower()]
    except KeyError:
        raise InvalidConfiguration("Unknown interpolation function %r, expected one of %s"
                                   % (name, ', '.join(functions)))


def create_interpolation_mat(subset, distances, function, cancel_dist):
    """Builds the sparse interpolation operator.

    Parameters
    ----------
    subset : 1D array-like of ints
        Source subset the distances were solved for. Its order is the column
        order of the operator.
    distances : DistanceMatrix
        Output of `polyutils.geodesic.scdc` for `subset`.
    function : str or callable
        Kernel name or kernel function f(dist, cancel_dist).
    cancel_dist : float
        Pairs farther apart than this get no weight.

    Returns
    -------
    interp : scipy.sparse.csr_matrix, shape (total_verts, len(subset))
        Every row sums to 1, or is entirely zero where no source is in reach.
    """
    if not callable(function):
        function = get_function(function)
    subset = np.asarray(subset, dtype=int).ravel()
    nsrc, npt = distances.shape
    if nsrc != len(subset):
        raise ValueError("Distance matrix has %d sources, subset has %d" % (nsrc, len(subset)))

    rows, cols, dist = distances.vertices, distances.sources, distances.distances
    inreach = dist <= cancel_dist
    rows, cols, dist = rows[inreach], cols[inreach], dist[inreach]

    weights = function(dist, cancel_dist)
    good = weights > 0
    rows, cols, weights = rows[good], cols[good], weights[good]

    # rows left with no positive weight are dropped entirely
    rowsum = np.bincount(rows, weights=weights, minlength=npt)
    weights = weights / rowsum[rows]

    interp = sparse.csr_matrix((weights, (rows, cols)), shape=(npt, nsrc))
    logger.debug("Interpolation matrix: %d of %d vertices covered, %d nonzeros",
                 np.count_nonzero(rowsum), npt, interp.nnz)
    return interp


def interpolate(interp, values):
    """Applies an interpolation operator to values at the source subset.

    Parameters
    ----------
    interp : sparse matrix, shape (total_verts, n_sources)
        Raises ValueError for None, which is what `InterpolationMatWorker.operator`
        holds until its first build is published.
    values : ndarray, shape (n_sources,) or (n_sources, n_times)

    Returns
    -------
    ndarray, shape (total_verts,) or (total_verts, n_times)
        Zero at vertices without a source in reach.
    """
    if interp is None:
        raise ValueError("No interpolation operator has been built yet")
    values = np.asarray(values)
    if values.shape[0] != interp.shape[1]:
        raise ValueError("Expected %d source values, got %d" % (interp.shape[1], values.shape[0]))
    return interp.dot(values)


def save(filename, interp):
    """Caches an interpolation operator to an npz file."""
    interp = sparse.csr_matrix(interp)
    np.savez(filename,
             data=interp.data,
             indices=interp.indices,
             indptr=interp.indptr,
             shape=interp.shape)

def load(filename):
    """Loads an operator cached by `save`."""
    with np.load(filename) as npz:
        return sparse.csr_matrix((npz['data'], npz['indices'], npz['indptr']),
                                 shape=tuple(npz['shape']))
