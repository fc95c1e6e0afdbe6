import numpy as np
import pytest

from coastal_geodata.contour import contour_graph
from coastal_geodata.geodata import GeoDataConfig, build_geodata
from coastal_geodata.graph import walk_loops
from coastal_geodata.raster import ArrayRaster
from coastal_geodata.rings import is_closed, signed_area

AXIS = np.linspace(-2, 2, 41)


def _bowl():
    xx, yy = np.meshgrid(AXIS, AXIS, indexing='ij')
    return xx ** 2 + yy ** 2 - 1


def test_contour_graph_traces_circle():
    nodes, edges = contour_graph(AXIS, AXIS, _bowl(), 0.0)

    loops = walk_loops(nodes, edges, min_nodes=10)

    assert len(loops) == 1
    loop = loops[0]
    assert is_closed(loop)
    assert signed_area(loop) < 0
    radius = np.hypot(loop[:, 0], loop[:, 1])
    np.testing.assert_allclose(radius, 1.0, atol=0.02)


def test_contour_graph_no_level():
    nodes, edges = contour_graph(AXIS, AXIS, _bowl(), 100.0)

    assert len(edges) == 0


def test_extract_contour_rebuilds_geodata():
    dem = ArrayRaster(AXIS, AXIS, _bowl())
    gdat = build_geodata(GeoDataConfig(h0=5000, bbox=[[-2, 2], [-2, 2]],
                                       dem=dem))

    new = gdat.extract_contour(0.0)

    assert new is not gdat
    assert len(new.inner) == 1
    assert len(new.outer) == 1
    assert new.interpolant is not None
    assert new.config.shp is None
    np.testing.assert_array_equal(new.bbox, gdat.bbox)
    radius = np.hypot(new.inner[0][:, 0], new.inner[0][:, 1])
    np.testing.assert_allclose(radius, 1.0, atol=0.05)


def test_extract_contour_requires_dem():
    gdat = build_geodata(GeoDataConfig(h0=5000, bbox=[[-2, 2], [-2, 2]]))

    with pytest.raises(ValueError, match='DEM'):
        gdat.extract_contour(0.0)


def test_extract_contour_missing_level():
    dem = ArrayRaster(AXIS, AXIS, _bowl())
    gdat = build_geodata(GeoDataConfig(h0=5000, bbox=[[-2, 2], [-2, 2]],
                                       dem=dem))

    with pytest.raises(ValueError, match='No contour'):
        gdat.extract_contour(100.0)
