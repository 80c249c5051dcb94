"""
Volume moments of cells via the divergence theorem.

A volume integral over a cell mapped into a reference frame,

    ∫_V ξ^n η^m ζ^l dξ,

is rewritten with the divergence theorem applied to the field
(ξ^(n+1)/(n+1) η^m ζ^l, 0, 0) as the boundary flux

    Σ_T (N_ξ / |N|) ∫_T ξ^(n+1)/(n+1) η^m ζ^l dA,

summed over the outward-oriented boundary triangles T of the cell in
reference space (N their area normal). Each triangle integral is a Gauss
quadrature from wenogeom._quadrature. Moment arrays are returned in the
physical volume measure, i.e. the reference integral times |det J|, so
that moments[0, 0, 0] is the physical volume.

Usage
-----
    moments, frame = init_integrals(mesh, cellI, order=3)
    neighbour = transform_integral(mesh, cellJ, frame.ref_point, 3, frame)
    halo = get_halo_moments(frame.ref_point, get_tri_faces(mesh, cellK), 3, frame)
"""

import logging

import numpy as np

from wenogeom._coefficients import monomial_exponents
from wenogeom._frame import (
    CONDITION_LIMIT,
    FRAME_TOLERANCE,
    build_reference_frame,
    frame_candidates,
)
from wenogeom._quadrature import check_polynomial_order, gauss_quad

logger = logging.getLogger(__name__)


def _moment_flux(n, m, l, x0, v0, v1):
    """∫_T ξ^(n+1)/(n+1) η^m ζ^l dA."""
    return gauss_quad(n + 1, m, l, x0, v0, v1) / (n + 1)


def volume_integrals(tris, degree, flux=_moment_flux):
    """Reference-measure volume integrals from a closed triangulated surface.

    Parameters
    ----------
    tris : ndarray, shape (T, 3, 3)
        Outward-oriented boundary triangles, already in the coordinates the
        monomials are expressed in.
    degree : int
        Highest total degree n + m + l to integrate.
    flux : callable
        ``flux(n, m, l, x0, v0, v1)`` returning the triangle integral of the
        ξ-antiderivative of ξ^n η^m ζ^l.

    Returns
    -------
    ndarray, shape (degree + 1, degree + 1, degree + 1)
    """
    out = np.zeros((degree + 1,) * 3)
    exponents = monomial_exponents(degree)
    for tri in np.asarray(tris, dtype=float):
        v0 = tri[1] - tri[0]
        v1 = tri[2] - tri[0]
        normal = np.cross(v0, v1)
        mag = np.linalg.norm(normal)
        if mag == 0.0 or normal[0] == 0.0:
            # no ξ-flux through this triangle
            continue
        n_xi = normal[0] / mag
        for (n, m, l) in exponents:
            out[n, m, l] += n_xi * flux(n, m, l, tri[0], v0, v1)
    return out


def _to_reference(tris, frame, centre):
    """Map physical triangles into ``frame`` and shift them to ``centre``."""
    tris = np.asarray(tris, dtype=float)
    ref = frame.transform_point(tris.reshape(-1, 3)).reshape(tris.shape)
    return ref - frame.transform_point(centre)


def frame_moments(tris, order, frame, centre):
    """Moment array of the region bounded by ``tris`` in ``frame`` about ``centre``."""
    ref = _to_reference(tris, frame, centre)
    return abs(frame.det) * volume_integrals(ref, order)


def init_integrals(mesh, cell, order, frame_method="tet-decomposition",
                   tolerance=FRAME_TOLERANCE, condition_limit=CONDITION_LIMIT):
    """Reference frame and own volume moments of one cell.

    Parameters
    ----------
    mesh : MeshGeometryProvider
    cell : int
    order : int
        Polynomial order; checked against the quadrature table first.
    frame_method : str
        Defining-tetrahedron candidate policy (see ``frame_candidates``).
    tolerance, condition_limit : float
        Forwarded to :func:`build_reference_frame`.

    Returns
    -------
    moments : ndarray, shape (order + 1,) * 3
        ∫_V ξ^n η^m ζ^l dV about the frame origin.
    frame : ReferenceFrame

    Raises
    ------
    QuadratureDegreeError
        If ``order`` is not supported.
    DegenerateFrameError
        If no candidate tetrahedron gives a valid frame.
    """
    order = check_polynomial_order(order)
    candidates = frame_candidates[frame_method](mesh, cell)
    frame = build_reference_frame(candidates, tolerance=tolerance,
                                  condition_limit=condition_limit, cell=cell)
    moments = frame_moments(mesh.cell_triangles(cell), order, frame, frame.ref_point)
    logger.debug("cell %d: volume %.6e, det %.6e", cell, moments[0, 0, 0], frame.det)
    return moments, frame


def transform_integral(mesh, cell_j, trans_center, order, frame):
    """Volume moments of ``cell_j`` in the reference frame of another cell.

    All faces of ``cell_j`` are traversed through the provider's outward
    triangulation, mapped through ``frame`` and integrated about the
    reference image of ``trans_center``. The owner's |det| converts back to
    physical measure, so the moments of every stencil member share one basis.

    Parameters
    ----------
    mesh : MeshGeometryProvider
    cell_j : int
        Stencil cell.
    trans_center : array_like, shape (3,)
        Physical expansion point of the monomials.
    order : int
    frame : ReferenceFrame
        Frame of the owner cell.
    """
    order = check_polynomial_order(order)
    return frame_moments(get_tri_faces(mesh, cell_j), order, frame, trans_center)


def get_tri_faces(mesh, cell):
    """Outward-oriented boundary triangles of ``cell``, shape (T, 3, 3)."""
    return np.asarray(mesh.cell_triangles(cell), dtype=float)


def get_halo_moments(trans_center, tri_faces, order, frame):
    """Moments of a triangulated halo region in the owner's reference frame.

    The result only covers the region enclosed by ``tri_faces`` and is meant
    to be added to a stencil's collection.
    """
    order = check_polynomial_order(order)
    tri_faces = np.asarray(tri_faces, dtype=float).reshape(-1, 3, 3)
    return frame_moments(tri_faces, order, frame, trans_center)


def stencil_moments(mesh, cells, order, frame, trans_center=None, halo=()):
    """Moments of every stencil member in the owner's frame.

    Parameters
    ----------
    mesh : MeshGeometryProvider
    cells : sequence of int
        Stencil members in order (usually starting with the owner).
    order : int
    frame : ReferenceFrame
        Frame of the owner cell.
    trans_center : array_like, optional
        Expansion point, defaults to the frame's reference point.
    halo : iterable of int
        Members integrated from their triangulated boundary with
        :func:`get_halo_moments` instead of full face traversal.

    Returns
    -------
    list of ndarray
    """
    centre = frame.ref_point if trans_center is None else np.asarray(trans_center, dtype=float)
    halo = set(halo)
    out = []
    for cell in cells:
        if cell in halo:
            out.append(get_halo_moments(centre, get_tri_faces(mesh, cell), order, frame))
        else:
            out.append(transform_integral(mesh, cell, centre, order, frame))
    return out
