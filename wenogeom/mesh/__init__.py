"""
Mesh geometry provider interface and a reference polyhedral mesh.

Submodules
----------
_provider : MeshGeometryProvider abstract capability
_polymesh : PolyMesh, owner/neighbour face-addressed polyhedral mesh
_builders : hex_mesh, convex_cell, delaunay_mesh
"""

from wenogeom.mesh._provider import MeshGeometryProvider
from wenogeom.mesh._polymesh import PolyMesh
from wenogeom.mesh._builders import hex_mesh, convex_cell, delaunay_mesh

__all__ = [
    'MeshGeometryProvider',
    'PolyMesh',
    'hex_mesh', 'convex_cell', 'delaunay_mesh',
]
