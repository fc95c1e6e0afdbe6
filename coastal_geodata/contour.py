"""Iso-contour extraction from a bathymetry grid."""

import numpy as np
from dataclasses import replace
from matplotlib.figure import Figure

from .graph import walk_loops
from .resample import resample_rings
from .rings import RingCollection

DEG_PER_M = 1.0 / 111e3


def contour_graph(x, y, z, level, decimals=10):
    """Trace the ``level`` iso-line of a grid as a node/edge graph.

    Args:
        x: Grid x axis, shape (nx,).
        y: Grid y axis, shape (ny,).
        z: Heights, shape (nx, ny); NaN cells are masked.
        level: Contour level.
        decimals: Rounding used to merge coincident segment endpoints.

    Returns:
        nodes: Node coordinates, shape (n, 2).
        edges: Node index pairs, shape (m, 2).
    """
    fig = Figure()
    ax = fig.add_subplot()
    cs = ax.contour(x, y, np.ma.masked_invalid(np.asarray(z, dtype=float)).T,
                    levels=[level])

    segments = []
    if hasattr(cs, 'allsegs') and len(cs.allsegs) > 0:
        segments = [np.asarray(s) for s in cs.allsegs[0]]
    else:
        for path in cs.get_paths():
            segments.extend(path.to_polygons(closed_only=False))
    segments = [s[:, :2] for s in segments if len(s) >= 2]
    if not segments:
        return np.empty((0, 2)), np.empty((0, 2), dtype=int)

    pts = np.round(np.vstack([np.stack((s[:-1], s[1:]), axis=1)
                              for s in segments]).reshape(-1, 2), decimals)
    nodes, inverse = np.unique(pts, axis=0, return_inverse=True)
    edges = np.asarray(inverse).reshape(-1, 2)
    edges = edges[edges[:, 0] != edges[:, 1]]
    edges = np.unique(np.sort(edges, axis=1), axis=0)
    return nodes, edges


def extract_contour(geodata, level):
    """Rebuild ``geodata`` with the ``level`` iso-contour as its boundary.

    The contour is traced on the interpolant grid, ordered into loops,
    resampled to ``h0 / 2`` and used as the raw boundary points of a new
    GeoData over the same bounding box, with the same DEMs, smoothing
    window, reference coastline and floodplain setting.

    Raises:
        ValueError: if ``geodata`` has no DEM or no contour exists.
    """
    from .geodata import build_geodata

    if geodata.interpolant is None:
        raise ValueError("A DEM is required to extract a contour")

    x, y = geodata.interpolant.grid_vectors
    nodes, edges = contour_graph(x, y, geodata.interpolant.values, level)
    loops = walk_loops(nodes, edges, min_nodes=10)
    if not loops:
        raise ValueError(f"No contour found at level {level}")
    print(f"  Extracted {len(loops)} contour line(s) at level {level}")

    h0 = geodata.config.h0
    points = resample_rings(RingCollection(loops), abs(h0) / 2 * DEG_PER_M)
    config = replace(geodata.config, points=points, bbox=geodata.region.bbox,
                     shp=None, weirs=None, boubox=None)
    return build_geodata(config)
