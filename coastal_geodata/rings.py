"""Ring collections for boundary geometry.

A ring collection is an ordered list of polylines (closed or open), each
stored as an (n, 2) array of x/y (longitude/latitude) points. Every ring
carries a kind ('ocean', 'lake', 'river' or 'weir') and a height.

Collections can be converted to and from the NaN-delimited layout used by
shapefile readers and mesh generators, where a row of NaNs separates rings.
"""

import numpy as np

DEFAULT_KIND = 'ocean'


def _as_ring(ring):
    return np.asarray(ring, dtype=float).reshape(-1, 2)


class RingCollection:
    """Ordered collection of rings with per-ring metadata.

    Empty rings are never stored. Operations return new collections and
    leave the original untouched.

    Attributes:
        rings: List of (n, 2) float arrays.
        kinds: List of ring kinds, one per ring.
        heights: Array of ring heights (NaN where unknown), one per ring.
    """

    def __init__(self, rings=(), kinds=None, heights=None):
        rings = [_as_ring(r) for r in rings]
        n = len(rings)
        if kinds is None:
            kinds = [DEFAULT_KIND] * n
        if heights is None:
            heights = np.full(n, np.nan)
        kinds = list(kinds)
        heights = np.asarray(heights, dtype=float).reshape(-1)
        if len(kinds) != n or len(heights) != n:
            raise ValueError(
                f"Got {n} rings but {len(kinds)} kinds and "
                f"{len(heights)} heights.")

        keep = [i for i, r in enumerate(rings) if len(r) > 0]
        self.rings = [rings[i] for i in keep]
        self.kinds = [kinds[i] for i in keep]
        self.heights = heights[keep]

    @classmethod
    def from_nan_delimited(cls, arr, kind=DEFAULT_KIND):
        """Split a NaN-delimited (n, 2) array into rings.

        Leading, trailing and repeated separator rows produce no rings.
        """
        arr = _as_ring(arr)
        if len(arr) == 0:
            return cls()
        sep = np.isnan(arr).any(axis=1)
        edges = np.flatnonzero(np.diff(np.r_[0, (~sep).astype(int), 0]))
        starts, stops = edges[::2], edges[1::2]
        rings = [arr[a:b] for a, b in zip(starts, stops)]
        return cls(rings, kinds=[kind] * len(rings))

    def to_nan_delimited(self):
        """Return the rings stacked into one array, each followed by a NaN row."""
        if not self.rings:
            return np.empty((0, 2))
        sep = np.full((1, 2), np.nan)
        return np.vstack([np.vstack((r, sep)) for r in self.rings])

    def __len__(self):
        return len(self.rings)

    def __iter__(self):
        return iter(self.rings)

    def __getitem__(self, i):
        return self.rings[i]

    def __add__(self, other):
        return RingCollection(
            self.rings + other.rings,
            kinds=self.kinds + other.kinds,
            heights=np.concatenate([self.heights, other.heights]))

    def __repr__(self):
        return (f"RingCollection({len(self)} rings, "
                f"{self.n_points} points)")

    @property
    def n_points(self):
        return int(sum(len(r) for r in self.rings))

    @property
    def points(self):
        """All points of all rings stacked into one (n, 2) array."""
        if not self.rings:
            return np.empty((0, 2))
        return np.vstack(self.rings)

    def is_empty(self):
        return len(self.rings) == 0

    def select(self, indices):
        """Return a collection holding only the rings at ``indices``."""
        indices = list(indices)
        return RingCollection(
            [self.rings[i] for i in indices],
            kinds=[self.kinds[i] for i in indices],
            heights=self.heights[indices])

    def map(self, func):
        """Apply ``func`` to every ring.

        ``func`` returns either a single ring array or a list of ring arrays
        (when a ring is split). Metadata of a split ring is copied to every
        piece.
        """
        rings, kinds, heights = [], [], []
        for ring, kind, height in zip(self.rings, self.kinds, self.heights):
            out = func(ring)
            pieces = out if isinstance(out, list) else [out]
            for piece in pieces:
                rings.append(piece)
                kinds.append(kind)
                heights.append(height)
        return RingCollection(rings, kinds=kinds, heights=heights)

    def with_kind(self, kind):
        return RingCollection(self.rings, kinds=[kind] * len(self),
                              heights=self.heights)


def is_closed(ring, tol=0.0):
    """True when the first and last points of ``ring`` coincide."""
    ring = _as_ring(ring)
    if len(ring) < 2:
        return False
    return bool(np.all(np.abs(ring[0] - ring[-1]) <= tol))


def signed_area(ring):
    """Shoelace signed area; positive for counter-clockwise rings."""
    x, y = ring[:, 0], ring[:, 1]
    return 0.5 * (np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def as_collection(obj):
    """Coerce a collection, a list of arrays or a NaN-delimited array."""
    if isinstance(obj, RingCollection):
        return obj
    if isinstance(obj, np.ndarray) and obj.ndim == 2:
        return RingCollection.from_nan_delimited(obj)
    obj = list(obj)
    if obj and np.ndim(obj[0]) == 1:
        # a single ring given as a list of points
        return RingCollection.from_nan_delimited(np.asarray(obj, dtype=float))
    return RingCollection(obj)
