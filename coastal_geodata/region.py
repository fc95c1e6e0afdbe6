"""Bounding region of the meshing domain.

Canonicalizes a bounding box, an arbitrary polygon, a raster extent or a raw
boundary point list into a bounding box ``[[xmin, xmax], [ymin, ymax]]`` and a
closed, clockwise bounding polygon (the "boubox").
"""

import numpy as np
from dataclasses import dataclass

from .rings import RingCollection, as_collection, is_closed, signed_area

# Well-known coordinate variable names in CF-compliant DEM files, tried
# pairwise in this order.
WELL_KNOWN_X = ('x', 'Longitude', 'longitude', 'lon')
WELL_KNOWN_Y = ('y', 'Latitude', 'latitude', 'lat')


def make_boubox(bbox):
    """Build the clockwise five-point polygon of a 2x2 bounding box."""
    (xmin, xmax), (ymin, ymax) = np.asarray(bbox, dtype=float)
    return np.array([
        [xmin, ymin],
        [xmin, ymax],
        [xmax, ymax],
        [xmax, ymin],
        [xmin, ymin],
    ])


def bbox_from_boubox(boubox):
    """Return ``[[xmin, xmax], [ymin, ymax]]`` spanned by a polygon."""
    b = np.asarray(boubox, dtype=float)
    return np.array([
        [np.nanmin(b[:, 0]), np.nanmax(b[:, 0])],
        [np.nanmin(b[:, 1]), np.nanmax(b[:, 1])],
    ])


def resolve_axes(source):
    """Find the names of the x and y coordinate variables of a raster.

    Args:
        source: Raster source exposing ``has_variable(name)``.

    Returns:
        (xname, yname) of the first well-known pair present in ``source``.

    Raises:
        ValueError: if none of the well-known names resolve.
    """
    for xname, yname in zip(WELL_KNOWN_X, WELL_KNOWN_Y):
        if source.has_variable(xname) and source.has_variable(yname):
            return xname, yname
    raise ValueError(
        "Could not locate x/y coordinate in DEM, tried "
        f"{list(zip(WELL_KNOWN_X, WELL_KNOWN_Y))}")


@dataclass(eq=False)
class BoundingRegion:
    """Bounding box plus its closed clockwise polygon.

    Attributes:
        bbox: Array ``[[xmin, xmax], [ymin, ymax]]``. May straddle the
              antimeridian (xmax > 180 > xmin).
        boubox: Closed clockwise polygon, shape (n, 2), first == last.
    """
    bbox: np.ndarray
    boubox: np.ndarray

    @classmethod
    def from_bbox(cls, bbox):
        bbox = np.asarray(bbox, dtype=float)
        if bbox.shape != (2, 2):
            raise ValueError(f"bbox must be 2x2, got shape {bbox.shape}")
        if np.any(bbox[:, 0] > bbox[:, 1]):
            raise ValueError(f"bbox minimum exceeds maximum: {bbox.tolist()}")
        return cls(bbox=bbox, boubox=make_boubox(bbox))

    @classmethod
    def from_polygon(cls, poly):
        """Region from an arbitrary polygon, with or without a NaN terminator."""
        poly = np.asarray(poly, dtype=float).reshape(-1, 2)
        poly = poly[~np.isnan(poly).any(axis=1)]
        if len(poly) < 3:
            raise ValueError("Bounding polygon needs at least three points.")
        if not is_closed(poly):
            poly = np.vstack((poly, poly[:1]))
        if signed_area(poly) > 0:
            poly = poly[::-1].copy()
        return cls(bbox=bbox_from_boubox(poly), boubox=poly)

    @classmethod
    def from_raster(cls, source):
        """Region spanning the coordinate axes of a raster source."""
        xname, yname = resolve_axes(source)
        x = source.read_axis(xname)
        y = source.read_axis(yname)
        return cls.from_bbox([[x.min(), x.max()], [y.min(), y.max()]])

    @classmethod
    def from_points(cls, points):
        """Region spanning the extents of a raw boundary point list."""
        pts = as_collection(points).points
        if len(pts) == 0:
            raise ValueError("Cannot derive a bounding box from no points.")
        return cls.from_bbox(bbox_from_boubox(pts))

    @property
    def boubox_rings(self):
        return RingCollection([self.boubox])

    @property
    def lower_left(self):
        return np.array([self.bbox[0, 0], self.bbox[1, 0]])
