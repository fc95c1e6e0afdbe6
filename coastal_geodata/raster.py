"""DEM raster sources and windowed loading.

Provides two raster sources with the same interface:

    NetCDFRaster  - netCDF4-backed DEM file
    ArrayRaster   - in-memory axes and heights

and ``load_window``, which reads the part of a DEM covering a bounding box,
handling the 180/-180 meridian, descending latitudes and invalid heights.
"""

import os
import warnings
from dataclasses import dataclass

import netCDF4 as nc
import numpy as np

from .region import resolve_axes

INVALID_HEIGHT = 10e3


@dataclass
class RasterGrid:
    """Windowed DEM.

    Attributes:
        x: Strictly increasing x (longitude) axis, shape (nx,).
        y: Strictly increasing y (latitude) axis, shape (ny,).
        z: Heights, shape (nx, ny).
    """
    x: np.ndarray
    y: np.ndarray
    z: np.ndarray


class NetCDFRaster:
    """DEM stored in a NetCDF file.

    Use as a context manager; the file is open only inside the ``with``
    block.

    Args:
        filepath: Path to the NetCDF file.
    """

    def __init__(self, filepath):
        self.filepath = os.fspath(filepath)
        self._ds = None

    def __repr__(self):
        return f"NetCDFRaster({self.filepath!r})"

    def __enter__(self):
        self._ds = nc.Dataset(self.filepath, 'r')
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        if self._ds is not None:
            self._ds.close()
            self._ds = None

    @property
    def ds(self):
        if self._ds is None:
            raise RuntimeError(f"{self!r} is not open; use it in a with block")
        return self._ds

    def has_variable(self, name):
        return name in self.ds.variables

    def variables(self):
        return [(name, var.ndim) for name, var in self.ds.variables.items()]

    def read_axis(self, name):
        values = self.ds.variables[name][:]
        return np.asarray(np.ma.filled(values, np.nan), dtype=float).ravel()

    def read_window(self, name, xname, islice, jslice):
        """Read ``name`` over x indices ``islice`` and y indices ``jslice``.

        Returns:
            Array of shape (len(islice), len(jslice)); fill values are NaN.
        """
        var = self.ds.variables[name]
        xdim = self.ds.variables[xname].dimensions[0]
        if var.dimensions[0] == xdim:
            data = var[islice, jslice]
        else:
            data = var[jslice, islice].T
        return np.asarray(np.ma.filled(data, np.nan), dtype=float)


class ArrayRaster:
    """In-memory DEM.

    Args:
        x: x (longitude) axis, shape (nx,).
        y: y (latitude) axis, shape (ny,).
        z: Heights, shape (nx, ny).
        xname, yname, zname: Variable names reported to the loader.
    """

    def __init__(self, x, y, z, xname='lon', yname='lat', zname='z'):
        self.x = np.asarray(x, dtype=float)
        self.y = np.asarray(y, dtype=float)
        self.z = np.asarray(z, dtype=float)
        if self.z.shape != (len(self.x), len(self.y)):
            raise ValueError(
                f"z has shape {self.z.shape}, expected "
                f"({len(self.x)}, {len(self.y)})")
        self._vars = {xname: self.x, yname: self.y, zname: self.z}

    def __repr__(self):
        return f"ArrayRaster({len(self.x)} x {len(self.y)})"

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        pass

    def has_variable(self, name):
        return name in self._vars

    def variables(self):
        return [(name, v.ndim) for name, v in self._vars.items()]

    def read_axis(self, name):
        return self._vars[name].copy()

    def read_window(self, name, xname, islice, jslice):
        return self._vars[name][islice, jslice].copy()


def open_raster(dem):
    """Wrap a path in a NetCDFRaster; raster sources pass through."""
    if isinstance(dem, (str, os.PathLike)):
        return NetCDFRaster(dem)
    return dem


def find_height_variable(source):
    """Name of the first variable with exactly two dimensions."""
    for name, ndim in source.variables():
        if ndim == 2:
            return name
    raise ValueError(f"No two-dimensional height variable found in {source!r}")


def _index_slice(axis, lo, hi):
    idx = np.flatnonzero((axis >= lo) & (axis <= hi))
    if len(idx) == 0:
        return None
    return slice(idx.min(), idx.max() + 1)


def _index_range(axis, lo, hi):
    islice = _index_slice(axis, lo, hi)
    if islice is None:
        raise ValueError(
            f"DEM does not cover [{lo}, {hi}] (axis spans "
            f"[{np.nanmin(axis)}, {np.nanmax(axis)}])")
    return islice


def _longitude_windows(x, bbox):
    """Index windows of ``x`` covering the bbox longitudes.

    The bbox is tried at its own longitudes and shifted by +/-360 so that
    either longitude convention of the DEM (-180..180 or 0..360) is
    matched, including boxes that straddle 180 or 0.

    Returns:
        List of (islice, shift): subtracting ``shift`` from ``x[islice]``
        maps the DEM longitudes back to the bbox convention.
    """
    xmin, xmax = bbox[0]
    windows = []
    for shift in (0.0, 360.0, -360.0):
        islice = _index_slice(x, xmin + shift, xmax + shift)
        if islice is not None:
            windows.append((islice, shift))
    if not windows:
        raise ValueError(
            f"DEM does not cover [{xmin}, {xmax}] (axis spans "
            f"[{np.nanmin(x)}, {np.nanmax(x)}])")
    return windows


def load_window(source, bbox, backup=None, is_backup=False):
    """Read the part of a DEM covering ``bbox``.

    The returned x axis is in the longitude convention of ``bbox``
    whatever the convention of the DEM.

    Args:
        source: Raster source (NetCDFRaster or ArrayRaster), open.
        bbox: Bounding box ``[[xmin, xmax], [ymin, ymax]]``.
        backup: BathyInterpolant used to replace invalid heights, or None.
        is_backup: True when loading the backup DEM itself; invalid values
                   are then left as they are.

    Returns:
        RasterGrid with strictly increasing axes and heights as float32.
    """
    bbox = np.asarray(bbox, dtype=float)
    xname, yname = resolve_axes(source)
    x = source.read_axis(xname)
    y = source.read_axis(yname)
    zname = find_height_variable(source)

    jslice = _index_range(y, bbox[1, 0], bbox[1, 1])
    xs, zs = [], []
    for islice, shift in _longitude_windows(x, bbox):
        xs.append(x[islice] - shift)
        zs.append(source.read_window(zname, xname, islice, jslice))
    x = np.concatenate(xs)
    y = y[jslice]
    z = np.concatenate(zs, axis=0)

    x, ia = np.unique(x, return_index=True)
    z = z[ia, :]

    if len(y) > 1 and y[1] < y[0]:
        y = y[::-1]
        z = z[:, ::-1]

    z = z.astype(np.float32)
    if not is_backup:
        bad = ~np.isfinite(z) | (np.abs(z) > INVALID_HEIGHT)
        if bad.any():
            warnings.warn(
                f'Invalid and/or missing DEM values detected in {source!r} '
                f'({int(bad.sum())} cells)..check DEM',
                UserWarning,
                stacklevel=2,
            )
            if backup is not None:
                print("  Replacing invalid values with back-up DEM")
                xx, yy = np.meshgrid(x, y, indexing='ij')
                z[bad] = backup(xx[bad], yy[bad])
            else:
                z[bad] = np.nan

    return RasterGrid(x=x, y=np.ascontiguousarray(y), z=z)
