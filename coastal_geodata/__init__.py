"""Coastal geodata pipeline.

Prepares the boundary and bathymetry inputs of an unstructured coastal mesh
generator: a bounding region, a classified and resampled shoreline, a
connectivity-repaired outer boundary, and an interpolant over a windowed
DEM that may straddle the 180/-180 meridian.

Main classes:
    GeoDataConfig     - Validated build configuration
    GeoData           - Boundary + bathymetry of a region
    BoundingRegion    - Bounding box and its clockwise polygon
    RingCollection    - Boundary rings with per-ring kind and height
    BathyInterpolant  - Bilinear/nearest DEM interpolant
    NetCDFRaster      - NetCDF DEM source
    ArrayRaster       - In-memory DEM source
    ShapefileSource   - Shapefile boundary source (pyshp)
    PointListSource   - Point list boundary source
    WeirFeature       - Weir crestline and width

Main functions:
    build_geodata()         - Build a GeoData from a GeoDataConfig
    classify_shoreline()    - Resample, smooth and coarsen boundary rings
    check_consistency()     - Point-in-polygon cross-check
    close_boundary()        - Outer boundary from a seed by graph search
    load_window()           - Read a DEM window (antimeridian aware)
    extract_contour()       - GeoData bounded by an iso-contour
    inpoly()                - Even-odd point-in-polygon test
"""

from .rings import RingCollection
from .region import BoundingRegion
from .inpoly import inpoly
from .sources import ShapefileSource, PointListSource
from .shoreline import ClassifiedShoreline, classify_shoreline
from .connectivity import check_connected, check_consistency, close_boundary
from .raster import ArrayRaster, NetCDFRaster, RasterGrid, load_window
from .interpolant import BathyInterpolant
from .weirs import WeirFeature, build_weirs
from .contour import extract_contour
from .geodata import GeoData, GeoDataConfig, build_geodata

__all__ = [
    'RingCollection',
    'BoundingRegion',
    'inpoly',
    'ShapefileSource',
    'PointListSource',
    'ClassifiedShoreline',
    'classify_shoreline',
    'check_connected',
    'check_consistency',
    'close_boundary',
    'ArrayRaster',
    'NetCDFRaster',
    'RasterGrid',
    'load_window',
    'BathyInterpolant',
    'WeirFeature',
    'build_weirs',
    'extract_contour',
    'GeoData',
    'GeoDataConfig',
    'build_geodata',
]
