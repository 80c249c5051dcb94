"""
Whole-mesh driver for the WENO geometry computations.

Cells (frames, moments, smoothness indicators) and faces (basis
transforms) are independent units of work. They are mapped over a thread
pool and gathered in index order; each unit only writes its own slot.

Usage
-----
    from wenogeom import compute_mesh_geometry, WENOGeometryParams
    from wenogeom.mesh import hex_mesh

    mesh = hex_mesh((4, 4, 4))
    geo = compute_mesh_geometry(mesh, WENOGeometryParams(order=2, workers=4))
    geo.cells[0].moments[0, 0, 0]     # volume of cell 0
    geo.stencil(mesh, 0, [0] + mesh.face_neighbours(0),
                halo=mesh.halo_cells(0))
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from wenogeom._errors import (
    ConsistencyCheckError,
    QuadratureDegreeError,
    WENOGeometryError,
)
from wenogeom._face_integrals import FaceBasisTransform, face_transform
from wenogeom._frame import ReferenceFrame
from wenogeom._moments import init_integrals, stencil_moments
from wenogeom._params import WENOGeometryParams
from wenogeom._smoothness import get_b

logger = logging.getLogger(__name__)

# Defects and configuration errors are never skipped
_FATAL = (ConsistencyCheckError, QuadratureDegreeError)


class _SkippedUnit(WENOGeometryError):
    """A face whose adjoining cell was skipped."""


@dataclass
class CellGeometry:
    """Own moments and reference frame of one cell."""
    cell: int
    moments: np.ndarray
    frame: ReferenceFrame

    @property
    def jinv(self) -> np.ndarray:
        return self.frame.jinv

    @property
    def ref_point(self) -> np.ndarray:
        return self.frame.ref_point

    @property
    def det(self) -> float:
        return self.frame.det


@dataclass
class MeshGeometry:
    """Results of :func:`compute_mesh_geometry`.

    Slots of skipped units hold None; ``failures`` maps the pass name
    ("cells", "smoothness", "faces") to {index: error message}.
    """
    params: WENOGeometryParams
    cells: list
    smoothness: list
    faces: list
    failures: dict = field(default_factory=dict)

    def stencil(self, mesh, owner, cells, halo=(), trans_center=None):
        """Moments of ``cells`` in the frame of ``owner``."""
        geo = self.cells[owner]
        if geo is None:
            raise WENOGeometryError(f"cell {owner} has no reference frame")
        return stencil_moments(mesh, cells, self.params.order, geo.frame,
                               trans_center=trans_center, halo=halo)


def _run_units(fn, n_units, params, kind, failures):
    """Evaluate ``fn(i)`` for i in range(n_units) under the error policy."""

    def unit(i):
        try:
            return fn(i), None
        except _FATAL:
            raise
        except WENOGeometryError as err:
            if params.on_error == "raise" and not isinstance(err, _SkippedUnit):
                raise
            return None, err

    if params.workers is None or params.workers == 1:
        outcomes = [unit(i) for i in range(n_units)]
    else:
        with ThreadPoolExecutor(max_workers=params.workers) as pool:
            outcomes = list(pool.map(unit, range(n_units)))

    results = []
    failed = {}
    for i, (res, err) in enumerate(outcomes):
        if err is not None:
            failed[i] = str(err)
            if not isinstance(err, _SkippedUnit):
                logger.warning("%s %d skipped: %s", kind, i, err)
        results.append(res)
    failures[kind] = failed
    logger.info("%s pass: %d computed, %d skipped",
                kind, n_units - len(failed), len(failed))
    return results


def compute_mesh_geometry(mesh, params: Optional[WENOGeometryParams] = None):
    """Frames, moments, smoothness indicators and face transforms of a mesh.

    Parameters
    ----------
    mesh : MeshGeometryProvider
    params : WENOGeometryParams, optional

    Returns
    -------
    MeshGeometry

    Raises
    ------
    DegenerateFrameError
        With ``on_error="raise"``, for the first cell without a valid frame.
    ConsistencyCheckError
        Always, if a face basis fails its self-check.
    """
    params = params if params is not None else WENOGeometryParams()
    failures = {}

    def cell_unit(cell):
        moments, frame = init_integrals(
            mesh, cell, params.order,
            frame_method=params.frame_method,
            tolerance=params.frame_tolerance,
            condition_limit=params.condition_limit,
        )
        return CellGeometry(cell=cell, moments=moments, frame=frame)

    cells = _run_units(cell_unit, mesh.n_cells, params, "cells", failures)

    def smoothness_unit(cell):
        geo = cells[cell]
        if geo is None:
            raise _SkippedUnit(f"cell {cell} has no reference frame")
        return get_b(mesh, cell, params.order, params.n_dvt, geo.frame, params.dim)

    smoothness = _run_units(smoothness_unit, mesh.n_cells, params,
                            "smoothness", failures)

    vol_mom = [None if g is None else g.moments for g in cells]
    frames = [None if g is None else g.frame for g in cells]

    def face_unit(face) -> FaceBasisTransform:
        own, nei = mesh.face_cells(face)
        for c in (own, nei):
            if c >= 0 and cells[c] is None:
                raise _SkippedUnit(f"adjoining cell {c} has no reference frame")
        return face_transform(mesh, face, params.order, vol_mom, frames,
                              tolerance=params.consistency_tolerance)

    faces = _run_units(face_unit, mesh.n_faces, params, "faces", failures)

    return MeshGeometry(params=params, cells=cells, smoothness=smoothness,
                        faces=faces, failures=failures)
