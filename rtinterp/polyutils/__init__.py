
from .misc import (
    _memo,
    InvalidConfiguration,
    polys_to_neighbors,
    neighbors_to_edges,
)
from .surface import Surface
from .geodesic import DistanceMatrix, scdc
