import tempfile
import os

import numpy as np
import pytest

from rtinterp import interpolation
from rtinterp.polyutils import Surface, InvalidConfiguration, scdc
from rtinterp.testing_utils import make_chain, make_two_chains, grid_surface


def _build(surf, subset, function, cancel_dist):
    dist = scdc(surf, subset, cancel_dist)
    return interpolation.create_interpolation_mat(subset, dist, function, cancel_dist)

def _check_rows(interp):
    rowsum = np.asarray(interp.sum(1)).ravel()
    nonempty = np.diff(interp.indptr) > 0
    assert np.allclose(rowsum[nonempty], 1)
    assert (rowsum[~nonempty] == 0).all()
    assert (interp.data > 0).all()

def test_line_scenario():
    surf = Surface(*make_chain(5))
    interp = _build(surf, [0, 4], 'linear', 1.5).toarray()
    assert interp.shape == (5, 2)
    assert np.allclose(interp[0], [1, 0])
    assert np.allclose(interp[1], [1, 0])
    assert np.allclose(interp[2], [0, 0])
    assert np.allclose(interp[3], [0, 1])
    assert np.allclose(interp[4], [0, 1])

def test_mixed_row():
    surf = Surface(*make_chain(3))
    interp = _build(surf, [0, 2], 'linear', 4.0).toarray()
    # vertex 0: distances 0 and 2 -> raw weights 1, 0.5
    assert np.allclose(interp[0], [2 / 3., 1 / 3.])
    assert np.allclose(interp[1], [0.5, 0.5])

@pytest.mark.parametrize("function", interpolation.functions)
def test_rows_normalized(function):
    surf = grid_surface(8, 7)
    subset = [0, 9, 20, 33, 47, 55]
    interp = _build(surf, subset, function, 2.5)
    assert interp.shape == (56, 6)
    _check_rows(interp)

@pytest.mark.parametrize("function", interpolation.functions)
def test_cutoff_boundary(function):
    surf = grid_surface(8, 7)
    subset = [3, 17, 40]
    cancel_dist = 1.8
    interp = _build(surf, subset, function, cancel_dist).tocoo()
    full = scdc(surf, subset, 100).dense()
    assert (full[interp.col, interp.row] <= cancel_dist).all()

@pytest.mark.parametrize("function", ['linear', 'square', 'cubic', 'gaussian'])
def test_kernel_monotone(function):
    func = interpolation.get_function(function)
    dist = np.linspace(0, 2, 41)
    weights = func(dist, 2.0)
    assert (weights >= 0).all()
    assert (np.diff(weights) <= 0).all()
    assert weights[0] == 1

@pytest.mark.parametrize("function", ['linear', 'square', 'cubic'])
def test_kernel_zero_at_cutoff(function):
    func = interpolation.get_function(function)
    assert func(np.array([1.5, 2.0]), 1.5).tolist() == [0, 0]

def test_kernel_values():
    d = np.array([0.5])
    assert np.allclose(interpolation.linear(d, 2), 0.75)
    assert np.allclose(interpolation.square(d, 2), 0.75 ** 2)
    assert np.allclose(interpolation.cubic(d, 2), 0.75 ** 3)
    sigma = interpolation.GAUSSIAN_WIDTH * 2
    assert np.allclose(interpolation.gaussian(d, 2), np.exp(-0.25 / (2 * sigma ** 2)))

def test_zero_cancel_distance():
    for function in interpolation.functions:
        func = interpolation.get_function(function)
        assert (func(np.zeros(3), 0) == 0).all()

def test_degenerate_rows():
    # every source sits exactly at the cancel distance of vertex 1
    surf = Surface(*make_chain(3))
    interp = _build(surf, [0, 2], 'cubic', 1.0).toarray()
    assert np.allclose(interp[1], 0)
    assert np.allclose(interp[0], [1, 0])

def test_empty_subset():
    surf = grid_surface(4, 4)
    interp = _build(surf, [], 'cubic', 2.0)
    assert interp.shape == (16, 0)
    assert interp.nnz == 0
    assert np.allclose(interpolation.interpolate(interp, np.zeros(0)), 0)

def test_disconnected():
    pts, neighbors = make_two_chains(5, gap=0.1)
    surf = Surface(pts, neighbors)
    for cancel_dist in (0.5, 3, 1000):
        interp = _build(surf, [0, 2], 'linear', cancel_dist).toarray()
        assert (interp[5:] == 0).all()

def test_deterministic():
    surf = grid_surface(6, 6)
    subset = [0, 14, 35]
    a = _build(surf, subset, 'gaussian', 2.0)
    b = _build(surf, subset, 'gaussian', 2.0)
    assert (a != b).nnz == 0

def test_names():
    assert interpolation.get_function('Cubic') is interpolation.cubic
    assert interpolation.get_function('GAUSSIAN') is interpolation.gaussian
    with pytest.raises(InvalidConfiguration):
        interpolation.get_function('lanczos')

def test_subset_mismatch():
    surf = Surface(*make_chain(5))
    dist = scdc(surf, [0, 4], 1.5)
    with pytest.raises(ValueError):
        interpolation.create_interpolation_mat([0], dist, 'linear', 1.5)

def test_interpolate():
    surf = Surface(*make_chain(5))
    interp = _build(surf, [0, 4], 'linear', 1.5)
    vals = interpolation.interpolate(interp, np.array([2., -3.]))
    assert np.allclose(vals, [2, 2, 0, -3, -3])
    frames = interpolation.interpolate(interp, np.array([[1., 2.], [3., 4.]]))
    assert frames.shape == (5, 2)
    assert np.allclose(frames[:, 1], [2, 2, 0, 4, 4])
    with pytest.raises(ValueError):
        interpolation.interpolate(interp, np.ones(3))

def test_interpolate_before_first_build():
    with pytest.raises(ValueError):
        interpolation.interpolate(None, np.ones(2))

def test_cache():
    surf = grid_surface(5, 5)
    interp = _build(surf, [0, 12, 24], 'square', 2.0)
    with tempfile.TemporaryDirectory() as tmpdir:
        fname = os.path.join(tmpdir, "interp.npz")
        interpolation.save(fname, interp)
        loaded = interpolation.load(fname)
    assert loaded.shape == interp.shape
    assert (loaded != interp).nnz == 0
