"""Boundary connectivity checks and repair.

``check_consistency`` cross-checks the point-in-polygon interpretation of
a classified shoreline against a reference coastline and decides whether
"in" must be flipped. ``close_boundary`` derives a single connected outer
boundary by searching the mainland + bounding-box graph from a seed point
in deep water.
"""

import warnings

import numpy as np

from .graph import build_pslg, seed_polygon
from .inpoly import inpoly, sample_grid
from .resample import resample_rings
from .rings import is_closed

DEG_PER_M = 1.0 / 111e3
SEED_DEPTH = -10.0
SEED_ORDINAL = 50
FLIP_THRESHOLD = 50


def check_connected(outer):
    """Warn when the longest ring of ``outer`` is not closed.

    Returns:
        True when the longest ring is closed.
    """
    if outer.is_empty():
        return True
    longest = max(outer, key=len)
    if not is_closed(longest, tol=np.finfo(float).eps):
        warnings.warn(
            'Meshing boundary is unconnected... continuing anyway',
            UserWarning,
            stacklevel=2,
        )
        return False
    return True


def check_consistency(shoreline, region, reference=None, floodplain=False,
                      n=100, threshold=FLIP_THRESHOLD):
    """Decide whether point-in-polygon results must be inverted.

    An ``n`` x ``n`` grid of test points over the bounding box is tested
    against the reference coastline and against ``outer`` + ``inner``. When
    more than ``threshold`` points disagree the flag is set. Floodplain
    meshing inverts the flag. This is a best-effort heuristic, not a proof
    that the boundary is oriented correctly.

    Args:
        shoreline: ClassifiedShoreline.
        region: BoundingRegion.
        reference: Boundary source for the reference coastline, or None to
                   skip the comparison.
        floodplain: Invert the result for floodplain meshing.
        n: Test grid size per axis.
        threshold: Number of disagreeing points that triggers the flip.

    Returns:
        inpoly_flip: bool.
    """
    flip = False
    if reference is None:
        print("  No reference coastline supplied, skipping inpoly check")
    else:
        ref = reference.read(region)
        pts = sample_grid(region.bbox, n)
        in_ref = inpoly(pts, ref.outer + ref.inner)
        in_shp = inpoly(pts, shoreline.outer + shoreline.inner)
        n_bad = int(np.count_nonzero(in_ref ^ in_shp))
        if n_bad > threshold:
            flip = True
            print(f"  Shoreline inpoly is inconsistent with reference coastline "
                  f"({n_bad} points disagree), flipping the inpoly test")

    if floodplain:
        flip = not flip
    return flip


def select_seed(interpolant, region, h0, x0y0, depth=SEED_DEPTH,
                ordinal=SEED_ORDINAL):
    """Pick a submerged point inside the bounding polygon.

    A regular grid with spacing ``h0`` (metres, converted to degrees) is
    laid from ``x0y0`` to the upper bounds of the bounding box. Points
    deeper than ``depth`` and inside the bounding polygon are candidates;
    the ``ordinal``-th candidate (1-based) is returned. With fewer
    candidates the first one is used and a warning is issued.

    Raises:
        ValueError: if no candidate exists.
    """
    step = abs(h0) * DEG_PER_M
    xs = np.arange(x0y0[0], region.bbox[0, 1], step)
    ys = np.arange(x0y0[1], region.bbox[1, 1], step)
    xx, yy = np.meshgrid(xs, ys, indexing='ij')
    zz = interpolant(xx, yy)

    deep = zz.ravel() < depth
    cands = np.column_stack((xx.ravel()[deep], yy.ravel()[deep]))
    cands = cands[inpoly(cands, region.boubox_rings)]

    if len(cands) == 0:
        raise ValueError(
            f"No points deeper than {depth} m found inside the bounding box "
            "to seed the boundary search; supply a seed explicitly")
    if len(cands) < ordinal:
        warnings.warn(
            f'Only {len(cands)} deep seed candidates found, using the first',
            UserWarning,
            stacklevel=2,
        )
        return cands[0]
    return cands[ordinal - 1]


def close_boundary(mainland, region, h0, interpolant=None, x0y0=None,
                   seed=None):
    """Clip the mainland against the bounding polygon from a seed point.

    Args:
        mainland: Mainland RingCollection.
        region: BoundingRegion.
        h0: Minimum edge length (m).
        interpolant: BathyInterpolant used to pick a seed, or None.
        x0y0: Reference origin for the seed search grid.
        seed: Explicit (x, y) seed; required when there is no interpolant.

    Returns:
        (outer, partition): the new outer RingCollection, resampled to
        ``h0 / 2``, and the ConnectivityPartition that produced it.

    Raises:
        ValueError: if no seed can be determined or the seed is not
                    enclosed by the boundary graph.
    """
    if seed is None:
        if interpolant is None:
            raise ValueError(
                "A DEM is required to choose a seed for clipping the "
                "mainland against the bounding box; supply a seed")
        if x0y0 is None:
            x0y0 = region.lower_left
        seed = select_seed(interpolant, region, h0, x0y0)
    seed = np.asarray(seed, dtype=float)

    pslg = build_pslg(mainland + region.boubox_rings)
    partition, poly = seed_polygon(pslg, seed)
    print(f"  Seed ({seed[0]:.4f}, {seed[1]:.4f}) reaches "
          f"{len(partition.edges)} of {len(pslg.edges)} boundary edges")

    outer = resample_rings(poly, abs(h0) / 2 * DEG_PER_M)
    return outer, partition
