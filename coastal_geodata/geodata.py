"""Geodata assembly.

``build_geodata`` turns a GeoDataConfig into a GeoData: it resolves the
bounding region, reads and classifies the boundary, adds weirs, checks the
boundary, and loads the DEM window into an interpolant.

Example:
    config = GeoDataConfig(h0=500, bbox=[[-80, -70], [30, 40]],
                           shp='coastline.shp', dem='topo.nc')
    gdat = build_geodata(config)
    gdat = gdat.close()
"""

import numpy as np
from dataclasses import dataclass, field, replace

from . import contour
from .connectivity import check_connected, check_consistency, close_boundary
from .interpolant import BathyInterpolant
from .raster import load_window, open_raster
from .region import BoundingRegion
from .shoreline import ClassifiedShoreline, classify_shoreline
from .sources import as_source
from .weirs import build_weirs

DEFAULT_WINDOW = 5


@dataclass(frozen=True)
class GeoDataConfig:
    """Inputs of a geodata build.

    Attributes:
        h0: Minimum mesh edge length (m). Must be nonzero.
        bbox: Bounding box ``[[xmin, xmax], [ymin, ymax]]`` or a polygon.
        shp: Shapefile path or list of paths with the coastline.
        dem: DEM path (NetCDF) or raster source.
        backupdem: Backup DEM used to fill invalid values of ``dem``.
        floodplain: Invert the point-in-polygon flag for floodplain meshing.
        weirs: List of WeirFeature or (crestline, width) pairs.
        points: Raw boundary rings, used when no shapefile is given.
        boubox: Explicit bounding polygon, overrides ``bbox``.
        window: Smoothing window in points; 0 selects 5, <= 1 disables.
        reference: Reference coastline (path or rings) for the inpoly check.
        spacing_ratio: Boundary points are spaced ``h0 / spacing_ratio``.
    """
    h0: float
    bbox: object = None
    shp: object = None
    dem: object = None
    backupdem: object = None
    floodplain: bool = False
    weirs: list = None
    points: object = None
    boubox: object = None
    window: int = 0
    reference: object = None
    spacing_ratio: float = 2.0

    def __post_init__(self):
        if self.h0 is None or self.h0 == 0:
            raise ValueError("h0 (minimum edge length) must be nonzero")
        if self.window == 0:
            object.__setattr__(self, 'window', DEFAULT_WINDOW)
        if self.spacing_ratio <= 0:
            raise ValueError(
                f"spacing_ratio must be positive, got {self.spacing_ratio}")
        if (self.bbox is None and self.boubox is None and self.dem is None
                and self.points is None):
            raise ValueError(
                "No extent given: supply a bbox, a boubox, a DEM or points")


def resolve_region(config):
    """Bounding region from, in order: boubox, bbox, DEM axes, points."""
    if config.boubox is not None:
        return BoundingRegion.from_polygon(config.boubox)
    if config.bbox is not None:
        bbox = np.asarray(config.bbox, dtype=float)
        if bbox.shape == (2, 2):
            return BoundingRegion.from_bbox(bbox)
        return BoundingRegion.from_polygon(bbox)
    if config.dem is not None:
        with open_raster(config.dem) as src:
            return BoundingRegion.from_raster(src)
    if config.points is not None:
        return BoundingRegion.from_points(config.points)
    raise ValueError("No extent given: supply a bbox, a boubox, a DEM or points")


@dataclass(frozen=True)
class GeoData:
    """Meshing boundary and bathymetry of a region.

    Attributes:
        config: The GeoDataConfig that produced this value.
        region: BoundingRegion.
        shoreline: ClassifiedShoreline (outer, mainland, inner).
        interpolant: BathyInterpolant over the DEM window, or None.
        x0y0: Lower-left reference point of the DEM (or of the bbox).
        inpoly_flip: True when point-in-polygon results must be inverted.
        weir_pfix: Weir boundary points.
        weir_egfix: Weir boundary edges.
        ibconn_pts: Paired weir node indices, one array per weir.
    """
    config: GeoDataConfig
    region: BoundingRegion
    shoreline: ClassifiedShoreline
    interpolant: BathyInterpolant = None
    x0y0: np.ndarray = None
    inpoly_flip: bool = False
    weir_pfix: np.ndarray = field(default_factory=lambda: np.empty((0, 2)))
    weir_egfix: np.ndarray = field(
        default_factory=lambda: np.empty((0, 2), dtype=int))
    ibconn_pts: list = field(default_factory=list)

    def __repr__(self):
        (x0, x1), (y0, y1) = self.bbox
        return (f"GeoData(bbox=[[{x0:g}, {x1:g}], [{y0:g}, {y1:g}]], "
                f"outer={len(self.outer)}, mainland={len(self.mainland)}, "
                f"inner={len(self.inner)}, dem={self.interpolant is not None})")

    @property
    def bbox(self):
        return self.region.bbox

    @property
    def boubox(self):
        return self.region.boubox

    @property
    def outer(self):
        return self.shoreline.outer

    @property
    def mainland(self):
        return self.shoreline.mainland

    @property
    def inner(self):
        return self.shoreline.inner

    def close(self, seed=None):
        """Return a copy whose outer boundary is the face reached from a seed.

        Args:
            seed: (x, y) in the domain. Chosen from the DEM when omitted.
        """
        outer, _ = close_boundary(self.mainland, self.region, self.config.h0,
                                  interpolant=self.interpolant, x0y0=self.x0y0,
                                  seed=seed)
        return replace(self, shoreline=replace(self.shoreline, outer=outer),
                       inpoly_flip=False)

    def extract_contour(self, level):
        """Return a new GeoData bounded by the ``level`` iso-contour."""
        return contour.extract_contour(self, level)


def _load_interpolant(dem, bbox, backup=None, is_backup=False):
    with open_raster(dem) as src:
        grid = load_window(src, bbox, backup=backup, is_backup=is_backup)
    interp = BathyInterpolant.from_grid(grid)
    x0y0 = np.array([grid.x[0], grid.y[0]])
    del grid
    return interp, x0y0


def build_geodata(config):
    """Build a GeoData from a GeoDataConfig.

    Args:
        config: GeoDataConfig.

    Returns:
        GeoData.
    """
    gridspace = abs(config.h0) / 111e3
    region = resolve_region(config)

    source = as_source(config.shp if config.shp is not None else config.points)

    weir_pfix = np.empty((0, 2))
    weir_egfix = np.empty((0, 2), dtype=int)
    ibconn_pts = []
    weir_rings = None
    if config.weirs:
        weir_pfix, weir_egfix, ibconn_pts, weir_rings = build_weirs(
            config.weirs, config.h0)

    if source is None:
        shoreline = ClassifiedShoreline(outer=region.boubox_rings)
    else:
        raw = source.read(region)
        shoreline = classify_shoreline(
            raw, region, gridspace / config.spacing_ratio, config.window)

    if weir_rings is not None:
        shoreline = replace(shoreline, inner=shoreline.inner + weir_rings)

    check_connected(shoreline.outer)
    inpoly_flip = check_consistency(
        shoreline, region, reference=as_source(config.reference),
        floodplain=config.floodplain)

    backup = None
    if config.backupdem is not None:
        backup, _ = _load_interpolant(config.backupdem, region.bbox,
                                      is_backup=True)
        print(f"  Read in backup demfile {config.backupdem}")

    interpolant = None
    x0y0 = region.lower_left
    if config.dem is not None:
        interpolant, x0y0 = _load_interpolant(config.dem, region.bbox,
                                              backup=backup)
        print(f"  Read in demfile {config.dem}")

    return GeoData(
        config=config,
        region=region,
        shoreline=shoreline,
        interpolant=interpolant,
        x0y0=x0y0,
        inpoly_flip=inpoly_flip,
        weir_pfix=weir_pfix,
        weir_egfix=weir_egfix,
        ibconn_pts=ibconn_pts,
    )
