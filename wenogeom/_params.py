"""
Configuration of a WENO geometry pass.

Usage
-----
    from wenogeom._params import WENOGeometryParams

    params = WENOGeometryParams(order=3, dim=(1, 1, 0), workers=4, on_error="skip")
    params.n_dvt  # number of non-constant basis functions
"""

from dataclasses import dataclass
from typing import Optional

from wenogeom._coefficients import basis_exponents
from wenogeom._frame import CONDITION_LIMIT, FRAME_TOLERANCE, frame_candidates
from wenogeom._quadrature import check_polynomial_order

ERROR_POLICIES = ("raise", "skip")


@dataclass
class WENOGeometryParams:
    """Parameters shared by all per-cell and per-face computations.

    Attributes
    ----------
    order : int
        Polynomial order of the reconstruction.
    dim : tuple of int
        Derivative-direction selection (1 = active) for the basis and the
        smoothness indicator; (1, 1, 0) for meshes that are 2D in z.
    frame_tolerance : float
        Relative determinant tolerance for reference frames.
    condition_limit : float
        Jacobian condition number above which a warning is issued.
    frame_method : str
        Name of the defining-tetrahedron candidate policy
        ("tet-decomposition" or "cell-vertices").
    consistency_tolerance : float
        Absolute tolerance of the face basis self-check.
    workers : int or None
        Thread pool size for the mesh pass; None or 1 runs inline.
    on_error : str
        "raise" aborts the mesh pass on the first failing cell or face,
        "skip" logs the failure and leaves an empty slot.
    """
    order: int = 2
    dim: tuple = (1, 1, 1)
    frame_tolerance: float = FRAME_TOLERANCE
    condition_limit: float = CONDITION_LIMIT
    frame_method: str = "tet-decomposition"
    consistency_tolerance: float = 1e-8
    workers: Optional[int] = None
    on_error: str = "raise"

    def __post_init__(self):
        self.order = check_polynomial_order(self.order)
        self.dim = tuple(int(bool(d)) for d in self.dim)
        if len(self.dim) != 3:
            raise ValueError(f"dim must have three entries, got {self.dim}")
        if not any(self.dim):
            raise ValueError("dim must activate at least one direction")
        if self.frame_tolerance <= 0.0:
            raise ValueError("frame_tolerance must be positive")
        if self.consistency_tolerance <= 0.0:
            raise ValueError("consistency_tolerance must be positive")
        if self.frame_method not in frame_candidates:
            # raises KeyError listing the available policies
            frame_candidates[self.frame_method]
        if self.on_error not in ERROR_POLICIES:
            raise ValueError(
                f"on_error must be one of {ERROR_POLICIES}, got {self.on_error!r}"
            )
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")

    @property
    def n_dvt(self) -> int:
        """Number of non-constant basis functions."""
        return len(basis_exponents(self.order, self.dim))
