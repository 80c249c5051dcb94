"""
Smoothness indicator matrices in a cell's reference frame.

For the basis φ_i = ξ^n_i η^m_i ζ^l_i (0 < n_i + m_i + l_i <= order) the
oscillation indicator of a polynomial p = Σ a_i φ_i is a^T B a with

    B_ij = Σ_α ∫_V_ref D^α φ_i D^α φ_j dξ,    1 <= |α| <= order.

D^α φ_i is a monomial times a tabulated coefficient (DERIVATIVE_TABLE), so
every entry reduces to lookups into the reference-space moments
S[p, q, s] = ∫ ξ^p η^q ζ^s dξ of degree up to 2 (order - 1).
"""

import logging

import numpy as np

from wenogeom._coefficients import (
    basis_exponents,
    derivative_orders,
    monomial_derivative,
)
from wenogeom._moments import _to_reference, volume_integrals
from wenogeom._quadrature import check_polynomial_order, gauss_quad_b

logger = logging.getLogger(__name__)


def smooth_ind_integrals(mesh, cell, order, frame):
    """Reference-measure moments of ``cell`` up to degree 2 (order - 1).

    Returns
    -------
    ndarray, shape (2 order - 1,) * 3
        S[p, q, s] = ∫ ξ^p η^q ζ^s dξ over the cell in reference space,
        about the frame origin.
    """
    order = check_polynomial_order(order)
    if order < 1:
        raise ValueError("smoothness integrals need a polynomial order >= 1")
    ref = _to_reference(mesh.cell_triangles(cell), frame, frame.ref_point)
    return volume_integrals(ref, 2 * (order - 1), flux=gauss_quad_b)


def get_b(mesh, cell, order, n_dvt, frame, dim=(1, 1, 1)):
    """Smoothness indicator matrix B of one cell.

    Parameters
    ----------
    mesh : MeshGeometryProvider
    cell : int
    order : int
        Polynomial order of the reconstruction.
    n_dvt : int
        Number of non-constant basis functions; must match ``order``/``dim``.
    frame : ReferenceFrame
        The cell's own frame.
    dim : sequence of int
        Derivative-direction selection (1 = active).

    Returns
    -------
    ndarray, shape (n_dvt, n_dvt)
        Symmetric matrix.
    """
    basis = basis_exponents(order, dim)
    if n_dvt != len(basis):
        raise ValueError(
            f"n_dvt = {n_dvt} does not match the {len(basis)} basis functions "
            f"of order {order} with dim = {tuple(dim)}"
        )
    if n_dvt == 0:
        # order 0: no derivatives, nothing oscillates
        return np.zeros((0, 0))

    S = smooth_ind_integrals(mesh, cell, order, frame)
    B = np.zeros((n_dvt, n_dvt))

    for alpha in derivative_orders(order, dim):
        derived = [monomial_derivative(e, alpha) for e in basis]
        for i, (ci, ei) in enumerate(derived):
            if ci == 0.0:
                continue
            for j in range(i, n_dvt):
                cj, ej = derived[j]
                if cj == 0.0:
                    continue
                B[i, j] += ci * cj * S[ei[0] + ej[0], ei[1] + ej[1], ei[2] + ej[2]]

    iu = np.triu_indices(n_dvt, k=1)
    B[(iu[1], iu[0])] = B[iu]
    logger.debug("cell %d: smoothness indicator of size %d assembled", cell, n_dvt)
    return B
