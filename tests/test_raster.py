import netCDF4
import numpy as np
import pytest

from coastal_geodata.interpolant import BathyInterpolant
from coastal_geodata.raster import (
    ArrayRaster,
    NetCDFRaster,
    find_height_variable,
    load_window,
    open_raster,
)

Y = np.arange(-10.0, 11.0)


def _write_dem(path, x, y, z, layout='yx'):
    with netCDF4.Dataset(path, 'w') as ds:
        ds.createDimension('lon', len(x))
        ds.createDimension('lat', len(y))
        ds.createVariable('lon', 'f8', ('lon',))[:] = x
        ds.createVariable('lat', 'f8', ('lat',))[:] = y
        if layout == 'yx':
            var = ds.createVariable('elevation', 'f4', ('lat', 'lon'),
                                    fill_value=-99999.0)
            var[:] = z.T
        else:
            var = ds.createVariable('elevation', 'f4', ('lon', 'lat'),
                                    fill_value=-99999.0)
            var[:] = z
    return path


def _longitude_dem(x):
    # height encodes the longitude in 0..360 so stitching can be checked
    return -np.repeat(np.mod(x, 360)[:, None], len(Y), axis=1)


@pytest.mark.parametrize('x', [np.arange(0.0, 360.0), np.arange(-180.0, 180.0)])
def test_antimeridian_window(tmp_path, x):
    path = _write_dem(tmp_path / 'dem.nc', x, Y, _longitude_dem(x))

    with NetCDFRaster(path) as src:
        grid = load_window(src, [[170, 190], [-5, 5]])

    np.testing.assert_array_equal(grid.x, np.arange(170.0, 191.0))
    assert np.all(np.diff(grid.x) > 0)
    np.testing.assert_array_equal(grid.y, np.arange(-5.0, 6.0))
    np.testing.assert_array_equal(grid.z[:, 0], -grid.x)
    assert grid.z.dtype == np.float32


def test_negative_bbox_on_0_360_raster():
    x = np.arange(0.0, 360.0)
    src = ArrayRaster(x, Y, _longitude_dem(x))

    grid = load_window(src, [[-20, -10], [-5, 5]])

    # x stays in the bbox convention
    np.testing.assert_array_equal(grid.x, np.arange(-20.0, -9.0))
    np.testing.assert_array_equal(grid.z[:, 0], -np.mod(grid.x, 360))


def test_bbox_crossing_zero_on_0_360_raster():
    x = np.arange(0.0, 360.0)
    src = ArrayRaster(x, Y, _longitude_dem(x))

    grid = load_window(src, [[-10, 10], [-5, 5]])

    np.testing.assert_array_equal(grid.x, np.arange(-10.0, 11.0))
    np.testing.assert_array_equal(grid.z[:, 0], -np.mod(grid.x, 360))


def test_bbox_over_180_on_minus_180_raster_single_side():
    x = np.arange(-180.0, 180.0)
    src = ArrayRaster(x, Y, _longitude_dem(x))

    grid = load_window(src, [[190, 200], [-5, 5]])

    np.testing.assert_array_equal(grid.x, np.arange(190.0, 201.0))
    np.testing.assert_array_equal(grid.z[:, 0], -grid.x)


def test_longitudes_outside_raster():
    x = np.arange(0.0, 10.0)
    src = ArrayRaster(x, Y, _longitude_dem(x))

    with pytest.raises(ValueError, match='does not cover'):
        load_window(src, [[50, 60], [-5, 5]])


def test_xy_layout_and_open_raster(tmp_path):
    x = np.arange(0.0, 10.0)
    z = np.repeat(x[:, None], len(Y), axis=1) - 50
    path = _write_dem(tmp_path / 'dem.nc', x, Y, z, layout='xy')

    with open_raster(str(path)) as src:
        assert isinstance(src, NetCDFRaster)
        grid = load_window(src, [[2, 5], [0, 3]])

    assert grid.z.shape == (4, 4)
    np.testing.assert_array_equal(grid.z[:, 0], [-48, -47, -46, -45])


def test_descending_latitude_is_flipped():
    x = np.arange(0.0, 5.0)
    y = Y[::-1]
    z = np.repeat(y[None, :], len(x), axis=0)

    grid = load_window(ArrayRaster(x, y, z), [[0, 4], [-3, 3]])

    np.testing.assert_array_equal(grid.y, np.arange(-3.0, 4.0))
    np.testing.assert_array_equal(grid.z[0], grid.y)


def _bad_raster():
    x = np.arange(0.0, 5.0)
    y = np.arange(0.0, 5.0)
    z = np.full((5, 5), -20.0)
    z[1, 1] = np.nan
    z[2, 3] = 20000.0
    return ArrayRaster(x, y, z)


def test_invalid_values_without_backup():
    with pytest.warns(UserWarning, match='Invalid and/or missing DEM values'):
        grid = load_window(_bad_raster(), [[0, 4], [0, 4]])

    assert np.isnan(grid.z[1, 1])
    assert np.isnan(grid.z[2, 3])
    assert np.count_nonzero(np.isnan(grid.z)) == 2


def test_invalid_values_replaced_from_backup():
    x = np.linspace(-1, 5, 7)
    backup = BathyInterpolant(x, x, np.full((7, 7), -5.0))

    with pytest.warns(UserWarning):
        grid = load_window(_bad_raster(), [[0, 4], [0, 4]], backup=backup)

    assert grid.z[1, 1] == -5.0
    assert grid.z[2, 3] == -5.0
    assert grid.z[0, 0] == -20.0


def test_backup_raster_is_not_repaired(recwarn):
    grid = load_window(_bad_raster(), [[0, 4], [0, 4]], is_backup=True)

    assert len(recwarn) == 0
    assert np.isnan(grid.z[1, 1])
    assert grid.z[2, 3] == 20000.0


def test_masked_fill_values_become_nan(tmp_path):
    x = np.arange(0.0, 4.0)
    z = np.full((4, len(Y)), -10.0)
    path = tmp_path / 'dem.nc'
    _write_dem(path, x, Y, z)
    with netCDF4.Dataset(path, 'a') as ds:
        ds['elevation'][0, 0] = np.ma.masked

    with NetCDFRaster(path) as src:
        with pytest.warns(UserWarning):
            grid = load_window(src, [[0, 3], [-10, 10]])

    assert np.isnan(grid.z[0, 0])


def test_no_height_variable(tmp_path):
    path = tmp_path / 'axes.nc'
    with netCDF4.Dataset(path, 'w') as ds:
        ds.createDimension('lon', 3)
        ds.createDimension('lat', 3)
        ds.createVariable('lon', 'f8', ('lon',))[:] = [0, 1, 2]
        ds.createVariable('lat', 'f8', ('lat',))[:] = [0, 1, 2]

    with NetCDFRaster(path) as src:
        with pytest.raises(ValueError, match='two-dimensional'):
            find_height_variable(src)


def test_window_outside_raster():
    with pytest.raises(ValueError, match='does not cover'):
        load_window(_bad_raster(), [[0, 4], [50, 60]])


def test_missing_axes():
    src = ArrayRaster([0, 1], [0, 1], np.zeros((2, 2)), xname='i', yname='j')
    with pytest.raises(ValueError, match='Could not locate'):
        load_window(src, [[0, 1], [0, 1]])
