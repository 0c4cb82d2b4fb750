"""Module containing small synthetic surfaces for testing"""
import numpy as np

from .polyutils import Surface


def make_chain(n, spacing=1.0, offset=(0, 0, 0)):
    """`n` vertices on the x axis, each adjacent to the previous one.

    Returns pts, neighbors.
    """
    pts = np.zeros((n, 3))
    pts[:, 0] = np.arange(n) * spacing
    pts += offset
    neighbors = [[j for j in (i - 1, i + 1) if 0 <= j < n] for i in range(n)]
    return pts, neighbors


def make_grid(nx, ny, spacing=1.0):
    """Flat triangulated grid of nx by ny vertices in the z=0 plane.

    Vertex (i, j) has index j * nx + i. Returns pts, polys.
    """
    x, y = np.meshgrid(np.arange(nx) * spacing, np.arange(ny) * spacing)
    pts = np.vstack([x.ravel(), y.ravel(), np.zeros(nx * ny)]).T
    polys = []
    for j in range(ny - 1):
        for i in range(nx - 1):
            a = j * nx + i
            b, c, d = a + 1, a + nx, a + nx + 1
            polys.append([a, b, d])
            polys.append([a, d, c])
    return pts, np.array(polys, dtype=int).reshape(-1, 3)


def make_two_chains(n, gap=0.5):
    """Two separate chains of `n` vertices, the second shifted `gap` along y
    so that they are close in space but not connected.
    """
    pts1, nb1 = make_chain(n)
    pts2, nb2 = make_chain(n, offset=(0, gap, 0))
    neighbors = nb1 + [[j + n for j in nb] for nb in nb2]
    return np.vstack([pts1, pts2]), neighbors


def grid_surface(nx, ny, spacing=1.0):
    pts, polys = make_grid(nx, ny, spacing)
    return Surface.from_polys(pts, polys)
