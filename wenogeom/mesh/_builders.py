"""
Small mesh builders producing PolyMesh instances.

Usage
-----
    from wenogeom.mesh import hex_mesh, convex_cell, delaunay_mesh

    mesh = hex_mesh((3, 3, 3), lower=(0.0, 0.0, 0.0), upper=(1.0, 1.0, 1.0))
    cell = convex_cell(np.random.default_rng(0).random((20, 3)))
    tets = delaunay_mesh(points)
"""

import numpy as np
from scipy.spatial import ConvexHull, Delaunay

from wenogeom.mesh._polymesh import PolyMesh


def hex_mesh(shape=(1, 1, 1), lower=(0.0, 0.0, 0.0), upper=(1.0, 1.0, 1.0)):
    """Structured block of hexahedra on the box [lower, upper].

    Parameters
    ----------
    shape : tuple of int
        Number of cells (nx, ny, nz).
    lower, upper : array_like, shape (3,)
        Opposite corners of the box.

    Returns
    -------
    PolyMesh
    """
    nx, ny, nz = (int(s) for s in shape)
    if min(nx, ny, nz) < 1:
        raise ValueError(f"shape must be positive in every direction, got {shape}")
    lower = np.asarray(lower, dtype=float)
    upper = np.asarray(upper, dtype=float)

    xs = np.linspace(lower[0], upper[0], nx + 1)
    ys = np.linspace(lower[1], upper[1], ny + 1)
    zs = np.linspace(lower[2], upper[2], nz + 1)
    Z, Y, X = np.meshgrid(zs, ys, xs, indexing='ij')
    points = np.column_stack((X.ravel(), Y.ravel(), Z.ravel()))

    def pid(i, j, k):
        return i + (nx + 1) * (j + (ny + 1) * k)

    def cid(i, j, k):
        return i + nx * (j + ny * k)

    faces, owner, neighbour = [], [], []

    def add(verts, lo, hi):
        # lo/hi: cells below/above the face along its normal, None outside
        if lo is None:
            faces.append(verts[::-1])
            owner.append(hi)
            neighbour.append(-1)
        else:
            faces.append(verts)
            owner.append(lo)
            neighbour.append(-1 if hi is None else hi)

    # x-normal faces
    for k in range(nz):
        for j in range(ny):
            for i in range(nx + 1):
                verts = [pid(i, j, k), pid(i, j + 1, k),
                         pid(i, j + 1, k + 1), pid(i, j, k + 1)]
                lo = cid(i - 1, j, k) if i > 0 else None
                hi = cid(i, j, k) if i < nx else None
                add(verts, lo, hi)
    # y-normal faces
    for k in range(nz):
        for j in range(ny + 1):
            for i in range(nx):
                verts = [pid(i, j, k), pid(i, j, k + 1),
                         pid(i + 1, j, k + 1), pid(i + 1, j, k)]
                lo = cid(i, j - 1, k) if j > 0 else None
                hi = cid(i, j, k) if j < ny else None
                add(verts, lo, hi)
    # z-normal faces
    for k in range(nz + 1):
        for j in range(ny):
            for i in range(nx):
                verts = [pid(i, j, k), pid(i + 1, j, k),
                         pid(i + 1, j + 1, k), pid(i, j + 1, k)]
                lo = cid(i, j, k - 1) if k > 0 else None
                hi = cid(i, j, k) if k < nz else None
                add(verts, lo, hi)

    return PolyMesh(points, faces, owner, neighbour)


def _outward(tri_labels, points, interior):
    """Order a triangle's labels so that its normal points away from ``interior``."""
    a, b, c = points[tri_labels]
    n = np.cross(b - a, c - a)
    if np.dot(n, (a + b + c) / 3.0 - interior) < 0.0:
        return [tri_labels[0], tri_labels[2], tri_labels[1]]
    return list(tri_labels)


def convex_cell(points):
    """Single-cell mesh from the convex hull of a point cloud.

    Hull facets become triangular boundary faces oriented outward; interior
    points are dropped.
    """
    points = np.asarray(points, dtype=float)
    hull = ConvexHull(points)
    keep = np.sort(hull.vertices)
    relabel = {int(old): new for new, old in enumerate(keep)}
    pts = points[keep]
    interior = pts.mean(axis=0)

    faces = [_outward([relabel[int(p)] for p in simplex], pts, interior)
             for simplex in hull.simplices]
    owner = [0] * len(faces)
    return PolyMesh(pts, faces, owner, [-1] * len(faces))


def delaunay_mesh(points):
    """Tetrahedral mesh of the Delaunay triangulation of ``points``.

    Each tetrahedron becomes a cell; shared triangles are owned by the lower
    cell index.
    """
    points = np.asarray(points, dtype=float)
    tri = Delaunay(points)

    faces, owner, neighbour = [], [], []
    seen = {}
    for cell, simplex in enumerate(tri.simplices):
        interior = points[simplex].mean(axis=0)
        for skip in range(4):
            labels = [int(p) for i, p in enumerate(simplex) if i != skip]
            key = tuple(sorted(labels))
            if key in seen:
                neighbour[seen[key]] = cell
                continue
            seen[key] = len(faces)
            faces.append(_outward(labels, points, interior))
            owner.append(cell)
            neighbour.append(-1)

    return PolyMesh(points, faces, owner, neighbour)
