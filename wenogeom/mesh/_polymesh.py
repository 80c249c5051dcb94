"""
Face-addressed polyhedral mesh implementing MeshGeometryProvider.

A mesh is given by its points, a list of faces (each an ordered list of
point labels), and the owner/neighbour cell of every face. The face normal
obtained from the right-hand rule on the vertex order points from the
owner into the neighbour; boundary faces have neighbour -1 and point out
of the domain.

Faces are triangulated as a fan about the face centroid (a single
triangle for triangular faces). Cell volumes and centroids are exact for
that triangulated surface.
"""

from collections import defaultdict

import numpy as np

from wenogeom.mesh._provider import MeshGeometryProvider


def _face_centroid(pts):
    """Area-weighted centroid of a polygon, fan-triangulated about its vertex average."""
    if len(pts) == 3:
        return pts.mean(axis=0)
    c_est = pts.mean(axis=0)
    nxt = np.roll(pts, -1, axis=0)
    areas = np.linalg.norm(np.cross(pts - c_est, nxt - c_est), axis=1)
    if areas.sum() == 0.0:
        return c_est
    centroids = (pts + nxt + c_est) / 3.0
    return areas @ centroids / areas.sum()


class PolyMesh(MeshGeometryProvider):
    """Polyhedral mesh in owner/neighbour face addressing.

    Parameters
    ----------
    points : array_like, shape (N, 3)
        Vertex coordinates.
    faces : sequence of sequence of int
        Point labels of each face, ordered so that the right-hand normal
        points from owner to neighbour.
    owner : sequence of int
        Owner cell of each face.
    neighbour : sequence of int
        Neighbour cell of each face, -1 for boundary faces. May be shorter
        than ``faces`` (OpenFOAM style); missing entries are boundary faces.
    """

    def __init__(self, points, faces, owner, neighbour):
        self.points = np.asarray(points, dtype=float)
        self.faces = [np.asarray(f, dtype=int) for f in faces]
        n_f = len(self.faces)
        self.owner = np.asarray(owner, dtype=int)
        nb = np.full(n_f, -1, dtype=int)
        nb[:len(neighbour)] = np.asarray(neighbour, dtype=int)
        self.neighbour = nb

        if len(self.owner) != n_f:
            raise ValueError(
                f"owner has {len(self.owner)} entries for {n_f} faces"
            )

        self._n_cells = int(max(self.owner.max(), self.neighbour.max()) + 1)
        self._cell_faces = [[] for _ in range(self._n_cells)]
        for f in range(n_f):
            self._cell_faces[self.owner[f]].append(f)
            if self.neighbour[f] >= 0:
                self._cell_faces[self.neighbour[f]].append(f)

        self._face_centres = np.array([_face_centroid(self.points[f])
                                       for f in self.faces])
        self._face_tris = [self._triangulate(f) for f in range(n_f)]
        self._cell_volumes, self._cell_centres = self._cell_geometry()

    # Triangulation

    def _triangulate(self, face):
        pts = self.points[self.faces[face]]
        if len(pts) == 3:
            return pts[np.newaxis].copy()
        c = self._face_centres[face]
        nxt = np.roll(pts, -1, axis=0)
        return np.stack([np.broadcast_to(c, pts.shape), pts, nxt], axis=1)

    def _cell_geometry(self):
        volumes = np.zeros(self._n_cells)
        centres = np.zeros((self._n_cells, 3))
        for cell in range(self._n_cells):
            tris = self.cell_triangles(cell)
            c_est = self._face_centres[self._cell_faces[cell]].mean(axis=0)
            a, b, c = tris[:, 0] - c_est, tris[:, 1] - c_est, tris[:, 2] - c_est
            vols = np.einsum('ij,ij->i', a, np.cross(b, c)) / 6.0
            # centroid of each tet (c_est, p0, p1, p2) relative to c_est
            cents = (a + b + c) / 4.0
            volumes[cell] = vols.sum()
            centres[cell] = c_est + vols @ cents / vols.sum()
        return volumes, centres

    # MeshGeometryProvider

    @property
    def n_cells(self):
        return self._n_cells

    @property
    def n_faces(self):
        return len(self.faces)

    def cell_faces(self, cell):
        return list(self._cell_faces[cell])

    def face_cells(self, face):
        return int(self.owner[face]), int(self.neighbour[face])

    def face_points(self, face):
        return self.points[self.faces[face]]

    def cell_point_labels(self, cell):
        """Sorted point labels used by ``cell``."""
        return np.unique(np.concatenate([self.faces[f] for f in self._cell_faces[cell]]))

    def cell_points(self, cell):
        return self.points[self.cell_point_labels(cell)]

    def face_centre(self, face):
        return self._face_centres[face].copy()

    def face_area_vector(self, face):
        """Area-weighted normal of ``face`` (owner -> neighbour)."""
        tris = self._face_tris[face]
        return 0.5 * np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0]).sum(axis=0)

    def cell_centre(self, cell):
        return self._cell_centres[cell].copy()

    def cell_volume(self, cell):
        return float(self._cell_volumes[cell])

    def face_triangles(self, face):
        return self._face_tris[face].copy()

    def cell_tetrahedra(self, cell):
        """Tetrahedra (cell centre, p0, p1, p2) over the outward cell triangles.

        For fan-triangulated faces p0 is the face centroid, so the list runs
        face by face, in ``cell_faces`` order, around each face.
        """
        centre = self._cell_centres[cell]
        return [np.vstack((centre, tri)) for tri in self.cell_triangles(cell)]

    # Topology helpers for stencil construction

    def face_neighbours(self, cell):
        """Cells sharing a face with ``cell``, in face order."""
        out = []
        for f in self._cell_faces[cell]:
            own, nei = self.face_cells(f)
            if nei < 0:
                continue
            out.append(nei if own == cell else own)
        return out

    def _point_cells(self):
        if not hasattr(self, '_point_cells_cache'):
            pc = defaultdict(set)
            for f, labels in enumerate(self.faces):
                for p in labels:
                    pc[int(p)].add(int(self.owner[f]))
                    if self.neighbour[f] >= 0:
                        pc[int(p)].add(int(self.neighbour[f]))
            self._point_cells_cache = pc
        return self._point_cells_cache

    def halo_cells(self, cell):
        """Cells sharing only a vertex or an edge with ``cell``, sorted."""
        pc = self._point_cells()
        touching = set()
        for p in self.cell_point_labels(cell):
            touching |= pc[int(p)]
        touching.discard(cell)
        return sorted(touching - set(self.face_neighbours(cell)))
