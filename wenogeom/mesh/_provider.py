"""
Abstract mesh geometry capability consumed by the WENO geometry core.

The core never touches a concrete mesh class. Anything that can answer
the questions below (an OpenFOAM-style face-addressed mesh, a wrapper
around a simulation code's mesh, ...) can be used.

Conventions
-----------
* Faces are addressed owner -> neighbour; ``face_cells`` returns
  ``(owner, -1)`` for boundary faces.
* ``face_triangles`` is oriented with the face normal (pointing from owner
  to neighbour); ``cell_triangles`` is oriented outward from the cell.
* ``cell_tetrahedra`` lists defining-tetrahedron candidates in a fixed,
  deterministic order.
"""

from abc import ABC, abstractmethod

import numpy as np


class MeshGeometryProvider(ABC):
    """Read-only topology and geometry of a polyhedral mesh."""

    @property
    @abstractmethod
    def n_cells(self) -> int:
        """Number of cells."""

    @property
    @abstractmethod
    def n_faces(self) -> int:
        """Number of faces (internal and boundary)."""

    @abstractmethod
    def cell_faces(self, cell: int) -> list:
        """Face indices bounding ``cell``."""

    @abstractmethod
    def face_cells(self, face: int) -> tuple:
        """``(owner, neighbour)`` of ``face``; neighbour is -1 on the boundary."""

    @abstractmethod
    def face_points(self, face: int) -> np.ndarray:
        """Ordered vertex coordinates of ``face``, shape (k, 3)."""

    @abstractmethod
    def cell_points(self, cell: int) -> np.ndarray:
        """Vertex coordinates of ``cell``, shape (p, 3)."""

    @abstractmethod
    def face_centre(self, face: int) -> np.ndarray:
        """Centroid of ``face``."""

    @abstractmethod
    def cell_centre(self, cell: int) -> np.ndarray:
        """Volume centroid of ``cell``."""

    @abstractmethod
    def cell_volume(self, cell: int) -> float:
        """Volume of ``cell``."""

    @abstractmethod
    def face_triangles(self, face: int) -> np.ndarray:
        """Triangulation of ``face``, shape (T, 3, 3), oriented owner -> neighbour."""

    @abstractmethod
    def cell_tetrahedra(self, cell: int) -> list:
        """Tetrahedral decomposition of ``cell``; each entry has shape (4, 3)."""

    def is_boundary_face(self, face: int) -> bool:
        return self.face_cells(face)[1] < 0

    def cell_triangles(self, cell: int) -> np.ndarray:
        """Closed, outward-oriented triangulated boundary of ``cell``, shape (T, 3, 3)."""
        tris = []
        for face in self.cell_faces(cell):
            ft = np.asarray(self.face_triangles(face), dtype=float)
            if self.face_cells(face)[0] != cell:
                # cell is the neighbour: reverse the winding
                ft = ft[:, ::-1, :]
            tris.append(ft)
        return np.concatenate(tris, axis=0)
