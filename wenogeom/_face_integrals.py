"""
Transformed basis integrals on faces for flux evaluation.

For a face f and an adjoining cell c with frame ξ = J_c^-1 (x - x_c), the
stored basis integral is the face average, in c's reference space, of the
zero-mean basis

    I_c[n, m, l] = (1/A_ref) ∫_f_ref ξ^n η^m ζ^l dA - M_c[n, m, l] / M_c[0, 0, 0]

where M_c are c's own volume moments and A_ref is the area of f mapped into
c's frame. Owner and neighbour sides are evaluated independently so a
reconstruction can be evaluated consistently from both sides.

Every side is self-checked: the first-degree entries must equal the
reference-space face centroid minus the cell centroid, which is computed
from vertex averages rather than quadrature. A mismatch is a defect and
raises ConsistencyCheckError.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from wenogeom._coefficients import monomial_exponents
from wenogeom._errors import ConsistencyCheckError, DegenerateFaceError
from wenogeom._quadrature import check_polynomial_order, gauss_quad

logger = logging.getLogger(__name__)

CONSISTENCY_TOLERANCE = 1e-8


@dataclass
class FaceBasisTransform:
    """Basis integrals of one face seen from its owner and neighbour.

    Attributes
    ----------
    owner : ndarray, shape (order + 1,) * 3
    neighbour : ndarray or None
        None for boundary faces.
    ref_areas : ndarray, shape (2,)
        Face area in the owner's and in the neighbour's reference space
        (0.0 for the missing neighbour of a boundary face).
    """
    owner: np.ndarray
    neighbour: Optional[np.ndarray]
    ref_areas: np.ndarray

    @property
    def is_boundary(self) -> bool:
        return self.neighbour is None


def face_basis_integrals(tris, order, frame, vol_mom):
    """Face-averaged zero-mean basis of one face in one cell's frame.

    Parameters
    ----------
    tris : ndarray, shape (T, 3, 3)
        Physical face triangles.
    order : int
    frame : ReferenceFrame
        Frame of the cell the basis belongs to.
    vol_mom : ndarray
        That cell's own moments about its frame origin.

    Returns
    -------
    basis : ndarray, shape (order + 1,) * 3
    ref_area : float
    face_centroid : ndarray, shape (3,)
        Reference-space face centroid from area-weighted vertex averages.

    Raises
    ------
    DegenerateFaceError
        If the face has no area in reference space.
    """
    tris = np.asarray(tris, dtype=float)
    ref = frame.transform_point(tris.reshape(-1, 3)).reshape(tris.shape)
    exponents = monomial_exponents(order)

    integrals = np.zeros((order + 1,) * 3)
    ref_area = 0.0
    weighted_centroid = np.zeros(3)
    for tri in ref:
        v0 = tri[1] - tri[0]
        v1 = tri[2] - tri[0]
        area = 0.5 * np.linalg.norm(np.cross(v0, v1))
        if area == 0.0:
            continue
        ref_area += area
        weighted_centroid += area * tri.mean(axis=0)
        for (n, m, l) in exponents:
            integrals[n, m, l] += gauss_quad(n, m, l, tri[0], v0, v1)

    if ref_area == 0.0:
        raise DegenerateFaceError("face has zero area in reference space")

    mean = np.zeros_like(integrals)
    for (n, m, l) in exponents:
        mean[n, m, l] = vol_mom[n, m, l] / vol_mom[0, 0, 0]

    return integrals / ref_area - mean, ref_area, weighted_centroid / ref_area


def comp_check(basis, face_centroid, cell_centroid):
    """Discrepancy of the first-degree face basis entries.

    The face average of a linear function equals its value at the face
    centroid, so I[1,0,0], I[0,1,0], I[0,0,1] must equal
    ``face_centroid - cell_centroid``.

    Returns
    -------
    ndarray, shape (3,)
    """
    computed = np.array([basis[1, 0, 0], basis[0, 1, 0], basis[0, 0, 1]])
    return computed - (np.asarray(face_centroid) - np.asarray(cell_centroid))


def _checked_side(mesh, face, cell, order, vol_mom, frame, tolerance):
    tris = np.asarray(mesh.face_triangles(face), dtype=float)
    basis, ref_area, face_centroid = face_basis_integrals(tris, order, frame, vol_mom)
    if order >= 1:
        cell_centroid = np.array([vol_mom[1, 0, 0], vol_mom[0, 1, 0],
                                  vol_mom[0, 0, 1]]) / vol_mom[0, 0, 0]
        delta = comp_check(basis, face_centroid, cell_centroid)
        scale = 1.0 + np.linalg.norm(face_centroid - cell_centroid)
        if np.max(np.abs(delta)) > tolerance * scale:
            raise ConsistencyCheckError(
                f"face {face}, cell {cell}: basis integral check failed, "
                f"discrepancy {delta}"
            )
    return basis, ref_area


def face_transform(mesh, face, order, vol_mom, frames,
                   tolerance=CONSISTENCY_TOLERANCE):
    """Basis integrals of a single face from both adjoining cells.

    ``vol_mom`` and ``frames`` are indexable by cell.
    """
    own, nei = mesh.face_cells(face)
    b_own, a_own = _checked_side(mesh, face, own, order, vol_mom[own],
                                 frames[own], tolerance)
    if nei < 0:
        return FaceBasisTransform(owner=b_own, neighbour=None,
                                  ref_areas=np.array([a_own, 0.0]))
    b_nei, a_nei = _checked_side(mesh, face, nei, order, vol_mom[nei],
                                 frames[nei], tolerance)
    return FaceBasisTransform(owner=b_own, neighbour=b_nei,
                              ref_areas=np.array([a_own, a_nei]))


def surf_int_trans(mesh, order, vol_mom, frames, tolerance=CONSISTENCY_TOLERANCE):
    """Face basis transforms for every face of ``mesh``.

    Parameters
    ----------
    mesh : MeshGeometryProvider
    order : int
    vol_mom : sequence of ndarray
        Own volume moments of every cell (about its frame origin).
    frames : sequence of ReferenceFrame
        Frame of every cell.
    tolerance : float
        Tolerance of the built-in consistency check.

    Returns
    -------
    list of FaceBasisTransform

    Raises
    ------
    ConsistencyCheckError
        If any face side fails the self-check.
    """
    order = check_polynomial_order(order)
    out = [face_transform(mesh, face, order, vol_mom, frames, tolerance)
           for face in range(mesh.n_faces)]
    logger.debug("face basis transforms for %d faces", len(out))
    return out
