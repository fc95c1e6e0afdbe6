"""Resampling, smoothing and coarsening of boundary rings.

All functions operate ring by ring so ring boundaries are never merged.
Distances are in degrees of longitude/latitude.
"""

import numpy as np
from matplotlib.path import Path
from scipy.spatial import cKDTree

from .rings import as_collection

INFLATE_FACTOR = 1.10


def great_circle_distance(p, q):
    """Haversine distance in degrees between rows of ``p`` and ``q``."""
    lon1, lat1 = np.radians(p[:, 0]), np.radians(p[:, 1])
    lon2, lat2 = np.radians(q[:, 0]), np.radians(q[:, 1])
    a = (np.sin((lat2 - lat1) / 2) ** 2
         + np.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2) ** 2)
    return np.degrees(2 * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0))))


def densify_ring(ring, spacing):
    """Insert points so consecutive points are at most ``spacing`` apart.

    Each segment is split into equal parts; the original vertices, and
    therefore the closure of a closed ring, are kept.

    Args:
        ring: Points, shape (n, 2).
        spacing: Target spacing (degrees).

    Returns:
        Densified ring, shape (m, 2) with m >= n.
    """
    if len(ring) < 2:
        return ring.copy()
    d = great_circle_distance(ring[:-1], ring[1:])
    n = np.maximum(np.ceil(d / spacing).astype(int), 1)
    seg = np.repeat(np.arange(len(d)), n)
    start = np.repeat(np.cumsum(n) - n, n)
    t = (np.arange(n.sum()) - start) / n[seg]
    pts = ring[seg] + t[:, None] * (ring[seg + 1] - ring[seg])
    return np.vstack((pts, ring[-1:]))


def resample_rings(rings, spacing):
    """Densify every ring of a collection to ``spacing``."""
    if spacing <= 0:
        raise ValueError(f"Resampling spacing must be positive, got {spacing}")
    return as_collection(rings).map(lambda r: densify_ring(r, spacing))


def moving_average(v, window):
    """Centered moving average with a window that shrinks at the ends.

    An even ``window`` is reduced by one. The end values are unchanged.
    """
    n = len(v)
    w = min(window, n)
    if w % 2 == 0:
        w -= 1
    if w <= 1:
        return v.copy()
    half = w // 2
    idx = np.arange(n)
    h = np.minimum(np.minimum(idx, n - 1 - idx), half)
    c = np.concatenate(([0.0], np.cumsum(v)))
    out = (c[idx + h + 1] - c[idx - h]) / (2 * h + 1)
    out[[0, -1]] = v[[0, -1]]
    return out


def smooth_ring(ring, window):
    return np.column_stack([moving_average(ring[:, k], window)
                            for k in range(2)])


def smooth_rings(rings, window):
    """Apply a ``window``-point moving average to each ring and channel."""
    rings = as_collection(rings)
    if window <= 1:
        return rings
    return rings.map(lambda r: smooth_ring(r, window))


def inflate_polygon(poly, factor=INFLATE_FACTOR):
    """Scale a closed polygon by ``factor`` about the mean of its vertices."""
    poly = np.asarray(poly, dtype=float)
    verts = poly[:-1] if np.allclose(poly[0], poly[-1]) else poly
    center = verts.mean(axis=0)
    return factor * poly + (1 - factor) * center


def _coarsen_keep(ring, inside):
    keep = inside.copy()
    outside = ~inside
    edges = np.flatnonzero(np.diff(np.r_[0, outside.astype(int), 0]))
    for a, b in zip(edges[::2], edges[1::2]):
        run = ring[a:b]
        keep[a] = keep[b - 1] = True
        for k in range(2):
            keep[a:b] |= run[:, k] == run[:, k].min()
            keep[a:b] |= run[:, k] == run[:, k].max()
    return keep


def coarsen_ring(ring, region):
    """Coarsen the parts of ``ring`` lying outside the polygon ``region``.

    Points inside ``region`` are kept. Every run of consecutive outside
    points is reduced to its first and last points plus the points reaching
    the run's x/y extremes. Consecutive duplicate points are then merged.
    Applying this twice gives the same result as applying it once.
    """
    if len(ring) == 0:
        return ring
    inside = Path(region).contains_points(ring)
    out = ring[_coarsen_keep(ring, inside)]
    dup = np.r_[False, np.all(np.diff(out, axis=0) == 0, axis=1)]
    return out[~dup]


def coarsen_rings(rings, region):
    return as_collection(rings).map(lambda r: coarsen_ring(r, region))


def member_tol(a, b, tol=1e-4):
    """Flag rows of ``a`` that match a row of ``b`` within a tolerance.

    The tolerance is relative: ``tol`` times the largest absolute
    coordinate of ``a`` and ``b``. Rows match when every coordinate differs
    by no more than that.

    Returns:
        Boolean array of shape (len(a),).
    """
    a = np.asarray(a, dtype=float).reshape(-1, 2)
    b = np.asarray(b, dtype=float).reshape(-1, 2)
    if len(a) == 0 or len(b) == 0:
        return np.zeros(len(a), dtype=bool)
    scale = tol * max(np.abs(a).max(), np.abs(b).max())
    dist, _ = cKDTree(b).query(a, p=np.inf)
    return dist <= scale
