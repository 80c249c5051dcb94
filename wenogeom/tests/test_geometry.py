"""Tests for the whole-mesh driver and its parameters."""

import numpy as np
import numpy.testing as npt
import pytest

import wenogeom._face_integrals as face_integrals
from wenogeom import (
    CellGeometry,
    ConsistencyCheckError,
    DegenerateFaceError,
    DegenerateFrameError,
    MeshGeometry,
    QuadratureDegreeError,
    WENOGeometryParams,
    compute_mesh_geometry,
)
from wenogeom.mesh import PolyMesh, hex_mesh


@pytest.fixture
def block():
    return hex_mesh((2, 2, 2))


@pytest.fixture
def broken_pair(monkeypatch):
    """Two cells where cell 1 only offers degenerate defining tetrahedra."""
    mesh = hex_mesh((2, 1, 1))
    base_candidates = mesh.cell_tetrahedra

    def tetrahedra(cell):
        if cell == 1:
            return [np.zeros((4, 3))]
        return base_candidates(cell)

    monkeypatch.setattr(mesh, "cell_tetrahedra", tetrahedra)
    return mesh


@pytest.fixture
def collapsed_face():
    """Two cells where cell 1 carries an extra boundary face of zero area."""
    mesh = hex_mesh((2, 1, 1))
    faces = [list(f) for f in mesh.faces] + [[0, 1, 0]]
    owner = list(mesh.owner) + [1]
    return PolyMesh(mesh.points, faces, owner, list(mesh.neighbour))


class TestParams:
    def test_defaults(self):
        params = WENOGeometryParams()
        assert params.order == 2
        assert params.dim == (1, 1, 1)
        assert params.n_dvt == 9

    def test_two_dimensional(self):
        params = WENOGeometryParams(order=3, dim=(1, 0, 1))
        assert params.n_dvt == 9

    def test_unsupported_order(self):
        with pytest.raises(QuadratureDegreeError):
            WENOGeometryParams(order=11)

    @pytest.mark.parametrize("kwargs", [
        {"dim": (0, 0, 0)},
        {"dim": (1, 1)},
        {"on_error": "ignore"},
        {"workers": 0},
        {"frame_tolerance": 0.0},
        {"consistency_tolerance": -1.0},
        {"order": -1},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            WENOGeometryParams(**kwargs)

    def test_order_zero(self):
        params = WENOGeometryParams(order=0)
        assert params.n_dvt == 0

    def test_unknown_frame_method(self):
        with pytest.raises(KeyError, match="Available"):
            WENOGeometryParams(frame_method="random")


class TestComputeMeshGeometry:
    def test_all_units_computed(self, block):
        geo = compute_mesh_geometry(block, WENOGeometryParams(order=2))
        assert isinstance(geo, MeshGeometry)
        assert len(geo.cells) == block.n_cells
        assert len(geo.smoothness) == block.n_cells
        assert len(geo.faces) == block.n_faces
        assert geo.failures == {"cells": {}, "smoothness": {}, "faces": {}}
        for cell, cg in enumerate(geo.cells):
            assert isinstance(cg, CellGeometry)
            assert cg.cell == cell
            npt.assert_allclose(cg.moments[0, 0, 0], 0.125, rtol=1e-13)
            assert cg.det > 0.0
            npt.assert_allclose(cg.ref_point, block.cell_centre(cell))
            assert cg.jinv.shape == (3, 3)

    def test_smoothness_symmetric(self, block):
        geo = compute_mesh_geometry(block, WENOGeometryParams(order=3))
        for B in geo.smoothness:
            assert B.shape == (19, 19)
            npt.assert_allclose(B, B.T, atol=1e-13)

    def test_threaded_matches_inline(self, block):
        inline = compute_mesh_geometry(block, WENOGeometryParams(order=2))
        threaded = compute_mesh_geometry(block, WENOGeometryParams(order=2, workers=4))
        for a, b in zip(inline.cells, threaded.cells):
            npt.assert_array_equal(a.moments, b.moments)
        for a, b in zip(inline.smoothness, threaded.smoothness):
            npt.assert_array_equal(a, b)
        for a, b in zip(inline.faces, threaded.faces):
            npt.assert_array_equal(a.owner, b.owner)
            npt.assert_array_equal(a.ref_areas, b.ref_areas)

    def test_stencil(self):
        mesh = hex_mesh((3, 3, 3))
        geo = compute_mesh_geometry(mesh, WENOGeometryParams(order=2, workers=2))
        cells = [13] + mesh.face_neighbours(13)
        moments = geo.stencil(mesh, 13, cells, halo=mesh.halo_cells(13))
        assert len(moments) == 7
        npt.assert_allclose(moments[0], geo.cells[13].moments, rtol=1e-12, atol=1e-15)

    def test_default_params(self, block):
        geo = compute_mesh_geometry(block)
        assert geo.params.order == 2

    @pytest.mark.parametrize("workers", [None, 2])
    def test_order_zero(self, workers):
        mesh = hex_mesh((2, 1, 1))
        geo = compute_mesh_geometry(mesh, WENOGeometryParams(order=0, workers=workers))
        assert geo.failures == {"cells": {}, "smoothness": {}, "faces": {}}
        for cg, B in zip(geo.cells, geo.smoothness):
            assert cg.moments.shape == (1, 1, 1)
            npt.assert_allclose(cg.moments[0, 0, 0], 0.5, rtol=1e-13)
            assert B.shape == (0, 0)
        for t in geo.faces:
            assert t.owner.shape == (1, 1, 1)
            npt.assert_allclose(t.owner[0, 0, 0], 0.0, atol=1e-14)


class TestErrorPolicy:
    def test_raise(self, broken_pair):
        with pytest.raises(DegenerateFrameError, match="cell 1"):
            compute_mesh_geometry(broken_pair, WENOGeometryParams(order=1))

    @pytest.mark.parametrize("workers", [None, 2])
    def test_skip(self, broken_pair, workers):
        params = WENOGeometryParams(order=1, on_error="skip", workers=workers)
        geo = compute_mesh_geometry(broken_pair, params)
        assert geo.cells[0] is not None
        assert geo.cells[1] is None
        assert geo.smoothness[1] is None
        assert list(geo.failures["cells"]) == [1]
        for face in range(broken_pair.n_faces):
            if 1 in broken_pair.face_cells(face):
                assert geo.faces[face] is None
                assert face in geo.failures["faces"]
            else:
                assert geo.faces[face] is not None

    def test_skip_siblings_unaffected(self, broken_pair):
        clean = compute_mesh_geometry(hex_mesh((2, 1, 1)), WENOGeometryParams(order=1))
        geo = compute_mesh_geometry(broken_pair,
                                    WENOGeometryParams(order=1, on_error="skip"))
        npt.assert_array_equal(geo.cells[0].moments, clean.cells[0].moments)

    def test_stencil_without_frame(self, broken_pair):
        geo = compute_mesh_geometry(broken_pair,
                                    WENOGeometryParams(order=1, on_error="skip"))
        with pytest.raises(Exception, match="no reference frame"):
            geo.stencil(broken_pair, 1, [1, 0])

    def test_consistency_failure_always_raises(self, block, monkeypatch):
        real = face_integrals.gauss_quad
        monkeypatch.setattr(face_integrals, "gauss_quad",
                            lambda n, m, l, *a: 2.0 * real(n, m, l, *a))
        with pytest.raises(ConsistencyCheckError):
            compute_mesh_geometry(block, WENOGeometryParams(order=1, on_error="skip"))

    def test_collapsed_face_raise(self, collapsed_face):
        with pytest.raises(DegenerateFaceError, match="zero area"):
            compute_mesh_geometry(collapsed_face, WENOGeometryParams(order=1))

    def test_collapsed_face_skip(self, collapsed_face):
        params = WENOGeometryParams(order=1, on_error="skip")
        geo = compute_mesh_geometry(collapsed_face, params)
        extra = collapsed_face.n_faces - 1
        assert list(geo.failures["faces"]) == [extra]
        assert geo.faces[extra] is None
        assert all(geo.faces[f] is not None for f in range(extra))
        assert all(cg is not None for cg in geo.cells)
        npt.assert_allclose([cg.moments[0, 0, 0] for cg in geo.cells], 0.5, rtol=1e-13)
