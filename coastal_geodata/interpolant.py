"""Gridded bathymetry interpolant."""

import numpy as np
from scipy.interpolate import RegularGridInterpolator


class BathyInterpolant:
    """Bilinear interpolant over a DEM window.

    Inside the grid envelope heights are interpolated linearly; outside it
    the nearest grid value is returned. NaN cells propagate.

    Args:
        x: Strictly increasing x axis, shape (nx,).
        y: Strictly increasing y axis, shape (ny,).
        values: Heights, shape (nx, ny).
    """

    def __init__(self, x, y, values):
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        values = np.asarray(values)
        if values.shape != (len(x), len(y)):
            raise ValueError(
                f"values has shape {values.shape}, expected ({len(x)}, {len(y)})")
        self._linear = RegularGridInterpolator(
            (x, y), values, method='linear', bounds_error=False,
            fill_value=None)
        self._nearest = RegularGridInterpolator(
            (x, y), values, method='nearest', bounds_error=False,
            fill_value=None)

    @classmethod
    def from_grid(cls, grid):
        """Build from a RasterGrid."""
        return cls(grid.x, grid.y, grid.z)

    def __repr__(self):
        (x0, x1), (y0, y1) = self.bounds
        return (f"BathyInterpolant(x=[{x0:g}, {x1:g}], y=[{y0:g}, {y1:g}], "
                f"shape={self.values.shape})")

    @property
    def grid_vectors(self):
        return self._linear.grid

    @property
    def values(self):
        return self._linear.values

    @property
    def bounds(self):
        x, y = self.grid_vectors
        return np.array([[x[0], x[-1]], [y[0], y[-1]]])

    def __call__(self, xq, yq):
        """Evaluate at query points.

        Args:
            xq, yq: Query coordinates, broadcastable to a common shape.

        Returns:
            Heights with the broadcast shape of ``xq`` and ``yq``.
        """
        xq, yq = np.broadcast_arrays(np.asarray(xq, dtype=float),
                                     np.asarray(yq, dtype=float))
        shape = xq.shape
        pts = np.column_stack((xq.ravel(), yq.ravel()))
        lo, hi = self.bounds[:, 0], self.bounds[:, 1]
        inside = np.all((pts >= lo) & (pts <= hi), axis=1)

        out = np.empty(len(pts))
        if inside.any():
            out[inside] = self._linear(pts[inside])
        if (~inside).any():
            out[~inside] = self._nearest(np.clip(pts[~inside], lo, hi))
        return out.reshape(shape)
