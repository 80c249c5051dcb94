"""
Affine reference frames built from a defining tetrahedron.

A frame maps the tetrahedron (x0, x1, x2, x3) onto the canonical reference
tetrahedron (0,0,0), (1,0,0), (0,1,0), (0,0,1):

    x = x0 + J ξ,    J = [x1 - x0 | x2 - x0 | x3 - x0]
    ξ = J^-1 (x - x0)

Frames are only created through :func:`check_ref_frame`; degenerate or
inverted tetrahedra (det J <= 0 up to tolerance) are rejected with
DegenerateFrameError. Which tetrahedra are tried, and in which order, is a
deterministic policy taken from the ``frame_candidates`` registry.

Usage
-----
    from wenogeom._frame import build_reference_frame, frame_candidates

    candidates = frame_candidates["tet-decomposition"](mesh, cellI)
    frame = build_reference_frame(candidates)
    xi = frame.transform_point(mesh.cell_centre(cellI))
"""

import itertools
import logging
import warnings
from dataclasses import dataclass

import numpy as np

from wenogeom._errors import DegenerateFrameError, IllConditionedFrameWarning
from wenogeom._registry import MethodRegistry

logger = logging.getLogger(__name__)

FRAME_TOLERANCE = 1e-10
CONDITION_LIMIT = 1e8


def _edge_matrix(x0, x1, x2, x3):
    x0 = np.asarray(x0, dtype=float)
    return np.column_stack((
        np.asarray(x1, dtype=float) - x0,
        np.asarray(x2, dtype=float) - x0,
        np.asarray(x3, dtype=float) - x0,
    ))


def _det3(J):
    return float(np.dot(J[:, 0], np.cross(J[:, 1], J[:, 2])))


def check_ref_frame(x0, x1, x2, x3, tolerance=FRAME_TOLERANCE):
    """Check whether a tetrahedron defines a usable reference frame.

    The determinant of the edge matrix is compared against
    ``tolerance * |e1| |e2| |e3|``, which makes the test independent of the
    cell size. Negative determinants (inverted vertex order) fail as well.

    Returns
    -------
    bool
    """
    J = _edge_matrix(x0, x1, x2, x3)
    scale = np.prod(np.linalg.norm(J, axis=0))
    if scale == 0.0:
        return False
    return _det3(J) > tolerance * scale


def jacobi_inverse(x0, x1, x2, x3):
    """Inverse of the edge matrix by cofactors.

    For columns a, b, c the rows of the inverse are b×c, c×a and a×b,
    divided by det = a·(b×c).
    """
    J = _edge_matrix(x0, x1, x2, x3)
    a, b, c = J[:, 0], J[:, 1], J[:, 2]
    det = _det3(J)
    return np.vstack((np.cross(b, c), np.cross(c, a), np.cross(a, b))) / det


def determinant_jac_inv(x0, x1, x2, x3):
    """Determinant of the inverse Jacobian, 1 / det J."""
    return 1.0 / _det3(_edge_matrix(x0, x1, x2, x3))


def transform_point(jinv, xp, x0):
    """Map physical point(s) ``xp`` into the frame with origin ``x0``.

    ``xp`` may be a single point of shape (3,) or an array of shape (N, 3).
    """
    d = np.asarray(xp, dtype=float) - np.asarray(x0, dtype=float)
    return d @ np.asarray(jinv).T


@dataclass(frozen=True, eq=False)
class ReferenceFrame:
    """Validated affine frame of one cell.

    Attributes
    ----------
    jinv : ndarray, shape (3, 3)
        Inverse Jacobian, physical -> reference.
    ref_point : ndarray, shape (3,)
        Physical origin of the frame.
    det : float
        Determinant of the forward Jacobian (six times the volume of the
        defining tetrahedron), always positive.
    condition : float
        2-norm condition number of the forward Jacobian.
    """
    jinv: np.ndarray
    ref_point: np.ndarray
    det: float
    condition: float = 1.0

    @classmethod
    def from_tetrahedron(cls, tet, tolerance=FRAME_TOLERANCE,
                         condition_limit=CONDITION_LIMIT):
        """Validate ``tet`` (shape (4, 3)) and build its frame.

        Raises
        ------
        DegenerateFrameError
            If the tetrahedron fails :func:`check_ref_frame`.
        """
        x0, x1, x2, x3 = np.asarray(tet, dtype=float)
        if not check_ref_frame(x0, x1, x2, x3, tolerance=tolerance):
            raise DegenerateFrameError(
                "defining tetrahedron is degenerate or inverted"
            )

        J = _edge_matrix(x0, x1, x2, x3)
        condition = float(np.linalg.cond(J))
        if condition > condition_limit:
            msg = (f"Reference frame Jacobian is ill-conditioned "
                   f"(cond = {condition:.3e} > {condition_limit:.3e})")
            logger.warning(msg)
            warnings.warn(msg, IllConditionedFrameWarning, stacklevel=2)

        return cls(
            jinv=jacobi_inverse(x0, x1, x2, x3),
            ref_point=x0.copy(),
            det=_det3(J),
            condition=condition,
        )

    @property
    def jacobian(self):
        """Forward Jacobian, reference -> physical."""
        return np.linalg.inv(self.jinv)

    def transform_point(self, xp):
        """Reference coordinates of physical point(s) ``xp``."""
        return transform_point(self.jinv, xp, self.ref_point)


def build_reference_frame(candidates, tolerance=FRAME_TOLERANCE,
                          condition_limit=CONDITION_LIMIT, cell=None):
    """Build the first valid frame from an ordered list of tetrahedra.

    Each candidate is tried as given and then with its last two vertices
    swapped (which flips the orientation), in candidate order.

    Parameters
    ----------
    candidates : iterable of array_like, each shape (4, 3)
        Defining tetrahedra in order of preference.
    tolerance : float
        Relative determinant tolerance, see :func:`check_ref_frame`.
    condition_limit : float
        Condition number above which IllConditionedFrameWarning is issued.
    cell : int, optional
        Cell index used in log and error messages.

    Raises
    ------
    DegenerateFrameError
        If no candidate gives a valid frame.
    """
    tried = 0
    for i, tet in enumerate(candidates):
        tet = np.asarray(tet, dtype=float)
        for ordering in (tet, tet[[0, 1, 3, 2]]):
            tried += 1
            if check_ref_frame(*ordering, tolerance=tolerance):
                if tried > 1:
                    logger.debug("cell %s: reference frame from candidate %d "
                                 "after %d rejected orderings", cell, i, tried - 1)
                return ReferenceFrame.from_tetrahedron(
                    ordering, tolerance=tolerance,
                    condition_limit=condition_limit,
                )
    raise DegenerateFrameError(
        f"none of {tried} candidate tetrahedron orderings is valid", cell=cell
    )


# Candidate policies

frame_candidates = MethodRegistry("frame candidate")


@frame_candidates.register("tet-decomposition")
def _tet_decomposition(mesh, cell):
    """Tetrahedra of the provider's cell decomposition, in provider order."""
    return mesh.cell_tetrahedra(cell)


@frame_candidates.register("cell-vertices")
def _cell_vertices(mesh, cell):
    """All 4-vertex combinations of the cell, in lexicographic index order."""
    pts = np.asarray(mesh.cell_points(cell), dtype=float)
    return (pts[list(idx)] for idx in itertools.combinations(range(len(pts)), 4))
