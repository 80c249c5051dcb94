"""
Error and warning taxonomy for the WENO geometry core.

Usage
-----
    from wenogeom._errors import DegenerateFrameError

    try:
        moments, frame = init_integrals(mesh, cellI, order=3)
    except DegenerateFrameError as err:
        logger.warning("cell %s skipped: %s", err.cell, err)
"""

from typing import Optional


class WENOGeometryError(Exception):
    """Base class for all errors raised by wenogeom."""


class DegenerateFrameError(WENOGeometryError):
    """No valid reference frame could be built from the candidate tetrahedra.

    Parameters
    ----------
    message : str
        Human-readable description.
    cell : int or None
        Index of the cell whose frame was rejected, when known.
    """

    def __init__(self, message: str, cell: Optional[int] = None):
        if cell is not None:
            message = f"cell {cell}: {message}"
        super().__init__(message)
        self.cell = cell


class DegenerateFaceError(WENOGeometryError):
    """A face has zero area once mapped into a cell's reference frame."""


class QuadratureDegreeError(WENOGeometryError, ValueError):
    """The requested polynomial degree exceeds the quadrature rule table."""


class ConsistencyCheckError(WENOGeometryError, AssertionError):
    """An internal invariant of the face integral pipeline was violated."""


class IllConditionedFrameWarning(RuntimeWarning):
    """A reference frame was accepted but its Jacobian is poorly conditioned."""
