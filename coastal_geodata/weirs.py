"""Weir geometry.

A weir is a thin barrier given by its crestline and width. It is meshed as
a faux island: two offset copies of the crestline joined into a closed
ring, with every node on one side paired to its counterpart on the other.
"""

import numpy as np
from dataclasses import dataclass

from .resample import densify_ring
from .rings import RingCollection

WEIR_KIND = 'weir'


@dataclass
class WeirFeature:
    """Weir crestline (n, 2) and its width in coordinate units."""
    crestline: np.ndarray
    width: float

    def __post_init__(self):
        self.crestline = np.asarray(self.crestline, dtype=float).reshape(-1, 2)
        self.width = float(self.width)
        if len(self.crestline) < 2:
            raise ValueError("A weir crestline needs at least two points.")
        if self.width <= 0:
            raise ValueError(f"Weir width must be positive, got {self.width}")


def _as_weir(obj):
    if isinstance(obj, WeirFeature):
        return obj
    crestline, width = obj
    return WeirFeature(crestline, width)


def generate_weir_geometry(crestline, width, spacing):
    """Expand a crestline into a closed faux-island boundary.

    Args:
        crestline: Crestline points, shape (n, 2).
        width: Distance between the two sides of the weir.
        spacing: Point spacing along the crestline (degrees).

    Returns:
        pfix: Boundary points, shape (2m, 2): the left side followed by the
              reversed right side.
        egfix: Closed edge list into ``pfix``, shape (2m, 2).
        ibconn: Paired node indices (i, 2m-1-i), shape (m, 2).
    """
    crest = densify_ring(np.asarray(crestline, dtype=float).reshape(-1, 2),
                         spacing)
    tangent = np.gradient(crest, axis=0)
    norm = np.hypot(tangent[:, 0], tangent[:, 1])
    norm[norm == 0] = 1.0
    normal = np.column_stack((-tangent[:, 1], tangent[:, 0])) / norm[:, None]

    left = crest + 0.5 * width * normal
    right = crest - 0.5 * width * normal
    pfix = np.vstack((left, right[::-1]))

    n = len(pfix)
    egfix = np.column_stack((np.arange(n), np.roll(np.arange(n), -1)))
    m = len(crest)
    i = np.arange(m)
    ibconn = np.column_stack((i, n - 1 - i))
    return pfix, egfix, ibconn


def build_weirs(weirs, h0):
    """Generate the geometry of every weir.

    Args:
        weirs: List of WeirFeature or (crestline, width) pairs.
        h0: Minimum edge length (m); weir points are spaced ``2 * h0``.

    Returns:
        pfix: All weir points, shape (n, 2).
        egfix: All weir edges, indices into ``pfix``.
        ibconn_pts: List of paired-node arrays, one per weir, indexed into
                    that weir's own points.
        rings: RingCollection of the closed weir outlines, kind 'weir'.
    """
    weirs = [_as_weir(w) for w in weirs]
    print(f"  User has passed {len(weirs)} weir crestline(s)")
    spacing = 2 * abs(h0) / 111e3

    pfix, egfix, ibconn_pts, rings = [], [], [], []
    offset = 0
    for weir in weirs:
        p, e, ib = generate_weir_geometry(weir.crestline, weir.width, spacing)
        pfix.append(p)
        egfix.append(e + offset)
        ibconn_pts.append(ib)
        rings.append(np.vstack((p, p[:1])))
        offset += len(p)

    if not weirs:
        return (np.empty((0, 2)), np.empty((0, 2), dtype=int), [],
                RingCollection())
    return (np.vstack(pfix), np.vstack(egfix), ibconn_pts,
            RingCollection(rings).with_kind(WEIR_KIND))
