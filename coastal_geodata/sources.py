"""Boundary sources.

A boundary source reads raw shoreline rings for a bounding region and sorts
them into ``outer``, ``mainland`` and ``inner`` collections:

    PointListSource  - rings supplied directly (arrays or NaN-delimited)
    ShapefileSource  - ESRI shapefile(s) read with pyshp

Both expose ``read(region) -> RawShoreline``.
"""

import os
from dataclasses import dataclass, field

import numpy as np
import shapefile
import shapely.geometry
from matplotlib.path import Path

from .rings import DEFAULT_KIND, RingCollection, as_collection, is_closed


@dataclass
class RawShoreline:
    """Unprocessed boundary rings sorted by role."""
    outer: RingCollection = field(default_factory=RingCollection)
    mainland: RingCollection = field(default_factory=RingCollection)
    inner: RingCollection = field(default_factory=RingCollection)


def _touches(ring, box_line, box_ring):
    if len(ring) >= 2 and shapely.geometry.LineString(ring).intersects(box_line):
        return True
    # a closed ring around the whole box
    return (len(ring) >= 3 and is_closed(ring)
            and bool(Path(ring).contains_point(box_ring[0])))


def split_rings(rings, region):
    """Sort raw rings into inner, mainland and outer boundaries.

    Rings lying entirely inside the bounding polygon are islands (``inner``).
    Rings that otherwise touch the polygon, including closed rings that
    enclose it, are ``mainland``. Everything else is discarded. ``outer`` is
    the bounding polygon followed by the mainland rings.

    Args:
        rings: Raw rings (RingCollection, list of arrays or NaN-delimited).
        region: BoundingRegion.

    Returns:
        RawShoreline.
    """
    rings = as_collection(rings)
    path = Path(region.boubox)
    box_line = shapely.geometry.LineString(region.boubox)

    inner_idx, mainland_idx = [], []
    for i, ring in enumerate(rings):
        if path.contains_points(ring).all():
            inner_idx.append(i)
        elif _touches(ring, box_line, region.boubox):
            mainland_idx.append(i)

    mainland = rings.select(mainland_idx)
    return RawShoreline(
        outer=region.boubox_rings + mainland,
        mainland=mainland,
        inner=rings.select(inner_idx),
    )


class PointListSource:
    """Boundary rings supplied as points.

    Args:
        points: RingCollection, list of (n, 2) arrays, or a NaN-delimited
                (n, 2) array.
    """

    def __init__(self, points):
        self.rings = as_collection(points)

    def __repr__(self):
        return f"PointListSource({self.rings!r})"

    def read(self, region):
        return split_rings(self.rings, region)


def _record_value(record, names, key):
    for name in names:
        if name.lower() == key.lower():
            return record[name]
    return None


def _overlaps(shape_bbox, bbox):
    xmin, ymin, xmax, ymax = shape_bbox
    return (xmin <= bbox[0][1] and bbox[0][0] <= xmax
            and ymin <= bbox[1][1] and bbox[1][0] <= ymax)


class ShapefileSource:
    """Boundary rings read from one or more ESRI shapefiles.

    Each part of each polygon or polyline shape whose extent overlaps the
    region becomes one ring. The ring kind and height are taken from the
    record fields named ``type_field`` and ``height_field`` (matched case
    insensitively) when present.

    Args:
        paths: Shapefile path or list of paths.
        type_field: Attribute holding the ring kind ('ocean', 'lake', 'river').
        height_field: Attribute holding the ring height.
    """

    def __init__(self, paths, type_field='type', height_field='height'):
        if isinstance(paths, (str, os.PathLike)):
            paths = [paths]
        self.paths = [os.fspath(p) for p in paths]
        self.type_field = type_field
        self.height_field = height_field

    def __repr__(self):
        return f"ShapefileSource({self.paths!r})"

    def _read_rings(self, bbox):
        rings, kinds, heights = [], [], []
        for path in self.paths:
            base = path[:-4] if path.lower().endswith('.shp') else path
            if not os.path.isfile(base + '.shp'):
                raise FileNotFoundError(f"Shapefile not found: {base}.shp")

            with shapefile.Reader(base) as reader:
                names = [f[0] for f in reader.fields[1:]]
                for sr in reader.iterShapeRecords():
                    shape = sr.shape
                    if len(shape.points) < 2:
                        continue
                    if not _overlaps(shape.bbox, bbox):
                        continue
                    record = dict(zip(names, sr.record))
                    kind = _record_value(record, names, self.type_field)
                    height = _record_value(record, names, self.height_field)
                    pts = np.asarray(shape.points, dtype=float)[:, :2]
                    bounds = list(shape.parts) + [len(pts)]
                    for a, b in zip(bounds[:-1], bounds[1:]):
                        rings.append(pts[a:b])
                        kinds.append(str(kind).lower() if kind else DEFAULT_KIND)
                        heights.append(
                            np.nan if height in (None, '') else float(height))
        return RingCollection(rings, kinds=kinds, heights=heights)

    def read(self, region):
        rings = self._read_rings(region.bbox)
        print(f"  Read {len(rings)} ring(s) from {', '.join(self.paths)}")
        return split_rings(rings, region)


def as_source(obj):
    """Wrap paths, arrays or ring collections in a boundary source."""
    if obj is None or hasattr(obj, 'read'):
        return obj
    if isinstance(obj, (str, os.PathLike)):
        return ShapefileSource(obj)
    if isinstance(obj, (list, tuple)) and obj and all(
            isinstance(p, (str, os.PathLike)) for p in obj):
        return ShapefileSource(obj)
    return PointListSource(obj)
