"""
wenogeom: geometric data for WENO reconstructions on polyhedral meshes.

Submodules
----------
_quadrature     : Gauss quadrature on triangles (gauss_quad, gauss_quad_b)
_coefficients   : pos, fac and tabulated derivative coefficients
_frame          : reference frames and candidate-tetrahedron policies
_moments        : cell moments, stencil and halo moment transforms
_smoothness     : smoothness indicator matrices
_face_integrals : face basis transforms with self-check
_geometry       : whole-mesh driver
mesh            : mesh provider interface and reference PolyMesh
"""

from wenogeom._errors import (
    WENOGeometryError,
    DegenerateFrameError,
    DegenerateFaceError,
    QuadratureDegreeError,
    ConsistencyCheckError,
    IllConditionedFrameWarning,
)
from wenogeom._quadrature import (
    gauss_quad,
    gauss_quad_b,
    check_polynomial_order,
)
from wenogeom._coefficients import pos, fac, basis_exponents
from wenogeom._frame import (
    ReferenceFrame,
    build_reference_frame,
    check_ref_frame,
    determinant_jac_inv,
    frame_candidates,
    jacobi_inverse,
    transform_point,
)
from wenogeom._moments import (
    init_integrals,
    transform_integral,
    get_tri_faces,
    get_halo_moments,
    stencil_moments,
)
from wenogeom._smoothness import smooth_ind_integrals, get_b
from wenogeom._face_integrals import FaceBasisTransform, comp_check, surf_int_trans
from wenogeom._params import WENOGeometryParams
from wenogeom._geometry import CellGeometry, MeshGeometry, compute_mesh_geometry

__all__ = [
    'WENOGeometryError', 'DegenerateFrameError', 'DegenerateFaceError',
    'QuadratureDegreeError',
    'ConsistencyCheckError', 'IllConditionedFrameWarning',
    'gauss_quad', 'gauss_quad_b', 'check_polynomial_order',
    'pos', 'fac', 'basis_exponents',
    'ReferenceFrame', 'build_reference_frame', 'check_ref_frame',
    'determinant_jac_inv', 'frame_candidates', 'jacobi_inverse', 'transform_point',
    'init_integrals', 'transform_integral', 'get_tri_faces',
    'get_halo_moments', 'stencil_moments',
    'smooth_ind_integrals', 'get_b',
    'FaceBasisTransform', 'comp_check', 'surf_int_trans',
    'WENOGeometryParams',
    'CellGeometry', 'MeshGeometry', 'compute_mesh_geometry',
]
