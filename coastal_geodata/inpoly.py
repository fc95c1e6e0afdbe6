"""Point-in-polygon tests over ring collections.

Membership follows the even-odd rule across all rings of a collection: a
point is "in" when it is enclosed by an odd number of rings. Open rings are
closed implicitly.
"""

import numpy as np
from matplotlib.path import Path

from .rings import as_collection


def inpoly(points, rings):
    """Even-odd point-in-polygon test.

    Args:
        points: Query points, shape (n, 2).
        rings: RingCollection, list of rings or NaN-delimited array.

    Returns:
        inside: Boolean array of shape (n,).
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    inside = np.zeros(len(points), dtype=bool)
    for ring in as_collection(rings):
        if len(ring) < 3:
            continue
        inside ^= Path(ring).contains_points(points)
    return inside


def sample_grid(bbox, n=100):
    """Regular ``n`` x ``n`` grid of test points spanning ``bbox``."""
    x = np.linspace(bbox[0][0], bbox[0][1], n)
    y = np.linspace(bbox[1][0], bbox[1][1], n)
    xx, yy = np.meshgrid(x, y, indexing='ij')
    return np.column_stack((xx.ravel(), yy.ravel()))
