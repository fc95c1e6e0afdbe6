#!/usr/bin/env python3
"""Build meshing geodata for a bounding box.

Reads a coastline shapefile and a NetCDF DEM over a bounding box, classifies
the shoreline, and optionally clips the mainland from a deep-water seed or
replaces the boundary with an iso-contour of the DEM.

Usage:
    python example_bbox.py --bbox -75 -70 38 42 --h0 500 --shp coast.shp --dem topo.nc
    python example_bbox.py --bbox -75 -70 38 42 --h0 500 --dem topo.nc --contour 0
    python example_bbox.py ... --close --plot
"""

import argparse
import numpy as np
import matplotlib.pyplot as plt

from coastal_geodata import GeoDataConfig, build_geodata


def summarize(gdat):
    print(f"\n  bbox      = {gdat.bbox.tolist()}")
    print(f"  outer     = {len(gdat.outer)} ring(s), {gdat.outer.n_points} points")
    print(f"  mainland  = {len(gdat.mainland)} ring(s), {gdat.mainland.n_points} points")
    print(f"  inner     = {len(gdat.inner)} ring(s), {gdat.inner.n_points} points")
    print(f"  inpoly flip = {gdat.inpoly_flip}")
    if gdat.interpolant is not None:
        values = gdat.interpolant.values
        print(f"  DEM {values.shape}: {np.nanmin(values):.1f} to "
              f"{np.nanmax(values):.1f} m, x0y0 = {gdat.x0y0.tolist()}")


def plot(gdat, filename='geodata.png'):
    fig, ax = plt.subplots(figsize=(9, 8))
    if gdat.interpolant is not None:
        x, y = gdat.interpolant.grid_vectors
        im = ax.pcolormesh(x, y, gdat.interpolant.values.T, cmap='terrain',
                           shading='auto')
        plt.colorbar(im, ax=ax, label='Height (m)')

    for i, ring in enumerate(gdat.outer):
        ax.plot(ring[:, 0], ring[:, 1], 'k-', lw=1.5,
                label='outer' if i == 0 else None)
    for i, ring in enumerate(gdat.mainland):
        ax.plot(ring[:, 0], ring[:, 1], 'g-', lw=1,
                label='mainland' if i == 0 else None)
    for i, (ring, kind) in enumerate(zip(gdat.inner, gdat.inner.kinds)):
        ax.plot(ring[:, 0], ring[:, 1], 'm-' if kind == 'weir' else 'r-',
                lw=1, label='inner' if i == 0 else None)

    ax.set_title(f'Geodata, h0={gdat.config.h0:g} m')
    ax.set_aspect('equal')
    ax.legend(loc='upper left')
    plt.tight_layout()
    plt.savefig(filename, dpi=150, bbox_inches='tight')
    print(f"\nFigure saved: {filename}")


def main():
    parser = argparse.ArgumentParser(
        description='Build meshing boundary and bathymetry for a region')
    parser.add_argument('--bbox', type=float, nargs=4,
                        metavar=('XMIN', 'XMAX', 'YMIN', 'YMAX'),
                        help='Bounding box (defaults to the DEM extent)')
    parser.add_argument('--h0', type=float, required=True,
                        help='Minimum edge length (m)')
    parser.add_argument('--shp', nargs='+', help='Coastline shapefile(s)')
    parser.add_argument('--dem', help='NetCDF DEM')
    parser.add_argument('--backupdem', help='Backup NetCDF DEM')
    parser.add_argument('--window', type=int, default=0,
                        help='Smoothing window in points (0 selects 5)')
    parser.add_argument('--floodplain', action='store_true',
                        help='Invert the inpoly test for floodplain meshing')
    parser.add_argument('--contour', type=float,
                        help='Use the iso-contour at this level as boundary')
    parser.add_argument('--close', action='store_true',
                        help='Clip the mainland from a deep-water seed')
    parser.add_argument('--plot', action='store_true',
                        help='Save a figure of the result')
    args = parser.parse_args()

    bbox = None
    if args.bbox is not None:
        bbox = [args.bbox[:2], args.bbox[2:]]

    config = GeoDataConfig(
        h0=args.h0, bbox=bbox, shp=args.shp, dem=args.dem,
        backupdem=args.backupdem, window=args.window,
        floodplain=args.floodplain,
    )
    gdat = build_geodata(config)

    if args.contour is not None:
        print(f"\n--- Extracting contour at {args.contour:g} m ---")
        gdat = gdat.extract_contour(args.contour)

    if args.close:
        print("\n--- Closing outer boundary ---")
        gdat = gdat.close()

    summarize(gdat)
    if args.plot:
        plot(gdat)


if __name__ == '__main__':
    main()
