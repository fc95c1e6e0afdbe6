"""Shoreline classification.

Turns raw boundary rings into the outer/mainland/inner description used by
the mesh generator: rings are densified to a target spacing, smoothed,
coarsened away from the bounding region, and islands that touch the
bounding box are moved to the mainland.
"""

import numpy as np
from dataclasses import dataclass, field

from .resample import (
    coarsen_rings,
    inflate_polygon,
    member_tol,
    resample_rings,
    smooth_rings,
)
from .rings import RingCollection

MEMBER_TOL = 1e-4


@dataclass
class ClassifiedShoreline:
    """Classified meshing boundary.

    Attributes:
        outer: Outer edge of the meshing domain. The first ring is the
               bounding polygon, followed by the mainland rings.
        mainland: Land boundary, used for clipping and distance functions
                  only (not for point-in-polygon tests).
        inner: Island, lake and weir rings.
    """
    outer: RingCollection = field(default_factory=RingCollection)
    mainland: RingCollection = field(default_factory=RingCollection)
    inner: RingCollection = field(default_factory=RingCollection)

    @property
    def mainland_types(self):
        return list(self.mainland.kinds)

    @property
    def mainland_heights(self):
        return self.mainland.heights.copy()

    @property
    def inner_types(self):
        return list(self.inner.kinds)

    @property
    def inner_heights(self):
        return self.inner.heights.copy()


def migrate_touching_inner(inner, outerbox, tol=MEMBER_TOL):
    """Split ``inner`` into rings that touch ``outerbox`` and the rest.

    Returns:
        (kept, migrated): two RingCollections.
    """
    hit = [bool(member_tol(ring, outerbox, tol).any()) for ring in inner]
    rest = [i for i, h in enumerate(hit) if not h]
    touching = [i for i, h in enumerate(hit) if h]
    return inner.select(rest), inner.select(touching)


def _split_at(ring, drop):
    pieces = []
    edges = np.flatnonzero(np.diff(np.r_[0, (~drop).astype(int), 0]))
    for a, b in zip(edges[::2], edges[1::2]):
        if b - a >= 2:
            pieces.append(ring[a:b])
    return pieces


def strip_outerbox(mainland, outerbox, tol=MEMBER_TOL):
    """Remove mainland points lying on ``outerbox``.

    Rings are split where points are removed; pieces shorter than two
    points are dropped.
    """
    return mainland.map(
        lambda ring: _split_at(ring, member_tol(ring, outerbox, tol)))


def classify_shoreline(raw, region, spacing, window):
    """Classify, resample and coarsen raw boundary rings.

    Args:
        raw: RawShoreline from a boundary source.
        region: BoundingRegion.
        spacing: Target point spacing along rings (degrees).
        window: Moving-average window; <= 1 disables smoothing.

    Returns:
        ClassifiedShoreline.
    """
    mainland = raw.mainland
    inner = raw.inner
    if mainland.is_empty():
        outer = region.boubox_rings
    else:
        outer = raw.outer

    outer = resample_rings(outer, spacing)
    outerbox = outer[0]
    if not mainland.is_empty():
        mainland = resample_rings(mainland, spacing)
    if not inner.is_empty():
        inner = resample_rings(inner, spacing)

    if window > 1:
        print(f"  Smoothing coastline with {window} point window")
        outer = smooth_rings(outer, window)
        mainland = smooth_rings(mainland, window)
        inner = smooth_rings(inner, window)
    else:
        print("  No smoothing of coastline enabled")

    iboubox = inflate_polygon(region.boubox)

    outer = coarsen_rings(outer, iboubox)

    if not inner.is_empty():
        inner = coarsen_rings(inner, iboubox)
        inner, migrated = migrate_touching_inner(inner, outerbox)
        if len(migrated):
            print(f"  Moving {len(migrated)} inner ring(s) touching the "
                  "bounding box to mainland")
            outer = outer + migrated
            mainland = mainland + migrated

    if not mainland.is_empty():
        mainland = coarsen_rings(mainland, iboubox)
        mainland = strip_outerbox(mainland, outerbox)

    return ClassifiedShoreline(outer=outer, mainland=mainland, inner=inner)
