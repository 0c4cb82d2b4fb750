# -*- coding: utf-8 -*-

import numpy as np
from scipy import sparse
from scipy.sparse import csgraph
from scipy.spatial import cKDTree

from .misc import _memo, InvalidConfiguration, polys_to_neighbors, neighbors_to_edges


class Surface(object):
    """Represents a cortical surface mesh as an immutable vertex graph: vertex
    positions plus the set of directly adjacent vertices for each vertex.

    This is all the geodesic solver needs, so surfaces can be handed over
    either as neighbor lists (as the source-space loader provides them) or as
    triangles (see `from_polys`).

    Parameters
    ----------
    pts : 2D ndarray, shape (total_verts, 3)
        Location of each vertex in space. Order is x, y, z.
    neighbors : sequence of sequences of ints, length total_verts
        Indices of the vertices adjacent to each vertex. Adjacency is made
        symmetric, and self loops are ignored.
    """
    def __init__(self, pts, neighbors):
        pts = np.asarray(pts, dtype=np.double)
        if pts.ndim != 2 or pts.shape[0] == 0:
            raise InvalidConfiguration("Surface has no vertices")
        if pts.shape[1] != 3:
            raise InvalidConfiguration("Vertex positions must have shape (n, 3), got %r"
                                       % (pts.shape,))

        self.pts = pts
        self._edges = neighbors_to_edges(neighbors, len(pts))

        self._cache = dict()

    @classmethod
    def from_polys(cls, pts, polys):
        """Creates a surface from triangles, deriving adjacency from triangle edges.

        Parameters
        ----------
        pts : 2D ndarray, shape (total_verts, 3)
            Location of each vertex in space.
        polys : 2D ndarray, shape (total_polys, 3)
            Indices of the vertices in each triangle in the surface.
        """
        polys = np.asarray(polys, dtype=int)
        npts = len(pts)
        if polys.size > 0 and (polys.min() < 0 or polys.max() >= npts):
            raise InvalidConfiguration("Triangle indices must be in [0, %d)" % npts)
        return cls(pts, polys_to_neighbors(polys, npts))

    def __len__(self):
        return len(self.pts)

    def __repr__(self):
        return '<Surface with %d vertices, %d edges>' % (len(self.pts), self.adj.nnz // 2)

    @property
    @_memo
    def adj(self):
        """Sparse vertex adjacency matrix (symmetric, CSR).
        """
        npt = len(self.pts)
        row, col = self._edges
        adj = sparse.coo_matrix((np.ones((len(row),)), (row, col)), (npt, npt)).tocsr()
        adj = (adj + adj.T).tocsr()
        adj.sort_indices()
        return adj

    @property
    @_memo
    def neighbors(self):
        """List of neighbor index arrays for each vertex, sorted by index.
        """
        adj = self.adj
        return [adj.indices[adj.indptr[i]:adj.indptr[i+1]] for i in range(len(self.pts))]

    @property
    @_memo
    def edge_lengths(self):
        """Euclidean length of each stored edge in `adj`, in CSR data order.
        """
        adj = self.adj
        row = np.repeat(np.arange(len(self.pts)), np.diff(adj.indptr))
        edges = self.pts[row] - self.pts[adj.indices]
        edges **= 2
        distances = edges.sum(axis=1)
        distances **= 0.5
        return distances

    @property
    @_memo
    def distance_graph(self):
        """Sparse CSR matrix of Euclidean edge lengths between adjacent vertices.

        Built directly from the adjacency structure so zero-length edges stay
        stored as explicit zeros, which scipy.sparse.csgraph treats as edges.
        """
        adj = self.adj
        return sparse.csr_matrix((self.edge_lengths, adj.indices.copy(), adj.indptr.copy()),
                                 shape=adj.shape)

    @property
    @_memo
    def avg_edge_length(self):
        """Average length of all edges in the surface.
        """
        if len(self.edge_lengths) == 0:
            return 0.0
        return self.edge_lengths.mean()

    @property
    @_memo
    def connected_components(self):
        """Label of the connected component each vertex belongs to.
        """
        _, labels = csgraph.connected_components(self.adj, directed=False)
        return labels

    def nearest_vertices(self, points):
        """Index of the surface vertex closest (Euclidean) to each of `points`.

        Used to map source-space positions onto the displayed surface, which
        yields the source subset for the interpolation.

        Parameters
        ----------
        points : 2D ndarray, shape (n, 3)

        Returns
        -------
        1D ndarray of ints, shape (n,)
        """
        points = np.atleast_2d(np.asarray(points, dtype=np.double))
        _, idx = self._kdtree.query(points)
        return idx

    @property
    @_memo
    def _kdtree(self):
        return cKDTree(self.pts)

    def check_subset(self, subset):
        """Validates a source subset against this surface.

        Returns the subset as an int array, order preserved. Raises
        InvalidConfiguration for out-of-range or duplicate indices.
        """
        subset = np.asarray(subset)
        if subset.size == 0:
            return np.zeros((0,), dtype=int)
        if subset.ndim != 1 or not np.issubdtype(subset.dtype, np.integer):
            raise InvalidConfiguration("Source subset must be a 1D sequence of vertex indices")
        subset = subset.astype(int)
        if subset.min() < 0 or subset.max() >= len(self.pts):
            raise InvalidConfiguration("Source subset indices must be in [0, %d)" % len(self.pts))
        if len(np.unique(subset)) != len(subset):
            raise InvalidConfiguration("Source subset contains duplicate vertices")
        return subset
