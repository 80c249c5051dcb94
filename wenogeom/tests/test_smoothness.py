"""Tests for wenogeom._smoothness."""

import numpy as np
import numpy.testing as npt
import pytest

from wenogeom._coefficients import basis_exponents
from wenogeom._moments import init_integrals
from wenogeom._smoothness import get_b, smooth_ind_integrals
from wenogeom.mesh import convex_cell, hex_mesh


@pytest.fixture
def unit_cube():
    mesh = hex_mesh((1, 1, 1))
    _, frame = init_integrals(mesh, 0, 1, frame_method="cell-vertices")
    return mesh, frame


@pytest.fixture
def polyhedron():
    pts = np.random.default_rng(3).random((20, 3)) * [2.0, 1.0, 0.5]
    mesh = convex_cell(pts)
    _, frame = init_integrals(mesh, 0, 1)
    return mesh, frame


class TestSmoothIndIntegrals:
    def test_shape(self, unit_cube):
        mesh, frame = unit_cube
        S = smooth_ind_integrals(mesh, 0, 3, frame)
        assert S.shape == (5, 5, 5)

    def test_unit_cube_values(self, unit_cube):
        mesh, frame = unit_cube
        S = smooth_ind_integrals(mesh, 0, 3, frame)
        npt.assert_allclose(S[0, 0, 0], 1.0, rtol=1e-14)
        npt.assert_allclose(S[2, 0, 0], 1.0 / 3.0, rtol=1e-13)
        npt.assert_allclose(S[2, 2, 0], 1.0 / 9.0, rtol=1e-13)
        npt.assert_allclose(S[4, 0, 0], 1.0 / 5.0, rtol=1e-13)

    def test_reference_measure(self, polyhedron):
        # same integrals as the volume moments, without the |det| scaling
        mesh, _ = polyhedron
        moments, frame = init_integrals(mesh, 0, 2)
        S = smooth_ind_integrals(mesh, 0, 2, frame)
        npt.assert_allclose(S * frame.det, moments, rtol=1e-12, atol=1e-14)

    def test_order_zero_rejected(self, unit_cube):
        mesh, frame = unit_cube
        with pytest.raises(ValueError):
            smooth_ind_integrals(mesh, 0, 0, frame)


class TestGetB:
    def test_linear_basis_on_unit_cube(self, unit_cube):
        mesh, frame = unit_cube
        B = get_b(mesh, 0, 1, 3, frame)
        npt.assert_allclose(B, np.eye(3), atol=1e-14)

    def test_quadratic_entries_on_unit_cube(self, unit_cube):
        mesh, frame = unit_cube
        basis = basis_exponents(2)
        B = get_b(mesh, 0, 2, len(basis), frame)
        xx = basis.index((2, 0, 0))
        x = basis.index((1, 0, 0))
        xy = basis.index((1, 1, 0))
        y = basis.index((0, 1, 0))
        # (2ξ)^2 over the cube plus (2)^2
        npt.assert_allclose(B[xx, xx], 16.0 / 3.0, rtol=1e-13)
        npt.assert_allclose(B[x, xx], 1.0, rtol=1e-13)
        npt.assert_allclose(B[xy, xy], 5.0 / 3.0, rtol=1e-13)
        npt.assert_allclose(B[x, y], 0.0, atol=1e-14)

    @pytest.mark.parametrize("order", [1, 2, 3, 4])
    def test_symmetric(self, polyhedron, order):
        mesh, frame = polyhedron
        n_dvt = len(basis_exponents(order))
        B = get_b(mesh, 0, order, n_dvt, frame)
        npt.assert_allclose(B, B.T, rtol=1e-14, atol=1e-14)

    def test_positive_semidefinite(self, polyhedron):
        mesh, frame = polyhedron
        B = get_b(mesh, 0, 3, 19, frame)
        assert np.linalg.eigvalsh(B).min() > -1e-10

    def test_two_dimensional_selection(self, unit_cube):
        mesh, frame = unit_cube
        B = get_b(mesh, 0, 2, 5, frame, dim=(1, 1, 0))
        assert B.shape == (5, 5)
        npt.assert_allclose(B, B.T, atol=1e-14)

    def test_scale_invariant(self):
        # B lives in reference space: scaling the cell (and its frame) leaves it unchanged
        small = hex_mesh((1, 1, 1), upper=(0.1, 0.2, 0.05))
        large = hex_mesh((1, 1, 1), upper=(10.0, 20.0, 5.0))
        _, f_small = init_integrals(small, 0, 2, frame_method="cell-vertices")
        _, f_large = init_integrals(large, 0, 2, frame_method="cell-vertices")
        npt.assert_allclose(get_b(small, 0, 2, 9, f_small),
                            get_b(large, 0, 2, 9, f_large), rtol=1e-12)

    def test_order_zero_is_empty(self, unit_cube):
        mesh, frame = unit_cube
        B = get_b(mesh, 0, 0, 0, frame)
        assert B.shape == (0, 0)

    def test_n_dvt_mismatch(self, unit_cube):
        mesh, frame = unit_cube
        with pytest.raises(ValueError, match="n_dvt"):
            get_b(mesh, 0, 2, 8, frame)
