import numpy as np
import pytest
import shapefile

from coastal_geodata.region import BoundingRegion
from coastal_geodata.sources import (
    PointListSource,
    ShapefileSource,
    as_source,
    split_rings,
)

ISLAND = [[4, 4], [6, 4], [6, 6], [4, 6], [4, 4]]
ENCLOSING = [[-5, -5], [-5, 15], [15, 15], [15, -5], [-5, -5]]
FAR = [[50, 50], [51, 50], [51, 51], [50, 50]]


def _region():
    return BoundingRegion.from_bbox([[0, 10], [0, 10]])


def _write_shapefile(path):
    with shapefile.Writer(str(path), shapeType=shapefile.POLYGON) as w:
        w.field('TYPE', 'C', size=10)
        w.field('HEIGHT', 'N', size=10, decimal=3)
        w.poly([ISLAND])
        w.record('Lake', 1.5)
        w.poly([FAR])
        w.record('ocean', 0.0)
        w.poly([ENCLOSING])
        w.record('ocean', None)


def test_split_rings_sorts_by_role():
    crossing = [[-1, 5], [5, 5]]
    rings = [ISLAND, crossing, FAR, ENCLOSING]

    raw = split_rings([np.asarray(r, dtype=float) for r in rings], _region())

    assert len(raw.inner) == 1
    np.testing.assert_array_equal(raw.inner[0], ISLAND)
    assert len(raw.mainland) == 2
    np.testing.assert_array_equal(raw.mainland[0], crossing)
    np.testing.assert_array_equal(raw.mainland[1], ENCLOSING)
    # bounding polygon first, then the mainland
    assert len(raw.outer) == 3
    np.testing.assert_array_equal(raw.outer[0], _region().boubox)


def test_point_list_source_nan_delimited():
    arr = np.vstack([ISLAND, [[np.nan, np.nan]], [[-1, 5], [5, 5]]])

    raw = PointListSource(arr).read(_region())

    assert len(raw.inner) == 1
    assert len(raw.mainland) == 1


def test_shapefile_source_reads_attributes(tmp_path, capsys):
    _write_shapefile(tmp_path / 'coast')

    raw = ShapefileSource(tmp_path / 'coast.shp').read(_region())

    assert 'Read 2 ring(s)' in capsys.readouterr().out
    assert raw.inner.kinds == ['lake']
    np.testing.assert_allclose(raw.inner.heights, [1.5])
    assert raw.mainland.kinds == ['ocean']
    assert np.isnan(raw.mainland.heights[0])


def test_shapefile_source_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ShapefileSource(tmp_path / 'nothing.shp').read(_region())


def test_as_source(tmp_path):
    assert as_source(None) is None
    assert isinstance(as_source(str(tmp_path / 'coast.shp')), ShapefileSource)
    assert isinstance(as_source([tmp_path / 'a.shp', tmp_path / 'b.shp']),
                      ShapefileSource)
    assert isinstance(as_source([ISLAND]), PointListSource)
    src = PointListSource([ISLAND])
    assert as_source(src) is src
