#!/usr/bin/env python3
"""Cluster a memory file for one zoom level and export the result.

Loads memories, groups them the way the map does at the given zoom, writes
the clusters as JSON and GeoJSON, and optionally renders a PNG snapshot of
the markers and badges.

Usage:
    # Cluster at the default zoom (12)
    python run_cluster_map.py --input memories.jsonl

    # Zoomed out, with a rendered snapshot
    python run_cluster_map.py --input memories.jsonl --zoom 8 --render
"""

import argparse
import json
import os
import sys
from typing import List, Optional

import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend

from memories import load_points, load_config
from clustering import clusterer_from_config, clusters_to_gdf, clusters_to_json, REPRESENTATIVE_RULES
from overlays import OverlayRenderer, MarkerStyle, WebMercatorProjector, RecordingSurface, RecordingOverlay, fit_view
from overlays.mpl_backend import MatplotlibMapCanvas, MatplotlibOverlay


def parse_center(text: str):
    """Parse "lat,lng" into a (lat, lng) tuple."""
    try:
        lat_s, lng_s = text.split(",")
        return float(lat_s), float(lng_s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected 'lat,lng', got {text!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Cluster memories for a zoom level and export markers"
    )
    parser.add_argument(
        "--input",
        required=True,
        help="Path to memories file (JSONL, JSON array, or CSV with lat/lng columns)"
    )
    parser.add_argument(
        "--out",
        default="map_out",
        help="Output directory (default: map_out)"
    )
    parser.add_argument(
        "--zoom",
        type=float,
        default=None,
        help="Map zoom level (default: map.default_zoom from config, 12)"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to JSON config overriding the defaults"
    )
    parser.add_argument(
        "--rule",
        choices=REPRESENTATIVE_RULES,
        default=None,
        help="Representative rule (default: clustering.representative_rule from config)"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on invalid memory rows instead of skipping them"
    )
    parser.add_argument(
        "--render",
        action="store_true",
        help="Also render a PNG snapshot of the markers"
    )
    parser.add_argument("--width", type=int, default=1024, help="Snapshot width in px (default: 1024)")
    parser.add_argument("--height", type=int, default=768, help="Snapshot height in px (default: 768)")
    parser.add_argument(
        "--center",
        type=parse_center,
        default=None,
        help="Snapshot centre as 'lat,lng' (default: centre of the memories)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Run clustering export.

    Raises:
        SystemExit: If the input cannot be loaded.
    """
    args = build_parser().parse_args(argv)
    cfg = load_config(args.config)
    zoom = args.zoom if args.zoom is not None else cfg["map"]["default_zoom"]
    rule = args.rule or cfg["clustering"].get("representative_rule", "last")

    os.makedirs(args.out, exist_ok=True)

    print(f"[INFO] Loading memories from {args.input}...")
    try:
        points = load_points(args.input, skip_invalid=not args.strict)
    except (OSError, ValueError) as e:
        print(f"[ERROR] Failed to load memories: {e}")
        sys.exit(1)
    print(f"[INFO] Loaded {len(points)} memories")

    try:
        clusterer = clusterer_from_config(cfg)
    except ValueError as e:
        print(f"[ERROR] Invalid clustering config: {e}")
        sys.exit(1)

    clusterer.fit(points, zoom)
    clusters = clusterer.clusters()
    info = clusterer.info()
    params = clusterer.parameters_
    print(f"[INFO] zoom={zoom} radius={params.radius} min_points={params.min_points}")
    if clusterer.used_fallback and points:
        print("[INFO] Grid fallback used for this zoom level")
    multi = sum(1 for c in clusters if c.count > 1)
    print(f"[INFO] {len(clusters)} markers ({multi} grouped) from {len(points)} memories")

    json_path = os.path.join(args.out, "clusters.json")
    clusters_to_json(clusters, json_path, info=info, rule=rule)
    print(f"  Saved: {json_path}")

    geojson_path = os.path.join(args.out, "clusters.geojson")
    gdf = clusters_to_gdf(clusters, info=info, rule=rule)
    gdf["member_ids"] = gdf["member_ids"].apply(json.dumps)
    with open(geojson_path, "w", encoding="utf-8") as f:
        f.write(gdf.to_json())
    print(f"  Saved: {geojson_path}")

    if not args.render:
        return

    if not points:
        print("[WARN] No memories to render; skipping snapshot.")
        return

    if args.center is not None:
        projector = WebMercatorProjector(
            args.center[0], args.center[1], zoom, args.width, args.height, cfg["map"]["tile_size"]
        )
    else:
        view = fit_view(points, args.width, args.height, tile_size=cfg["map"]["tile_size"])
        projector = view.with_view(zoom=zoom)

    style = MarkerStyle.from_config(cfg)
    canvas = MatplotlibMapCanvas(args.width, args.height)
    try:
        canvas.plot_points([xy for xy in (projector.project(p.lat, p.lng) for p in points) if xy is not None])
        renderer = OverlayRenderer(canvas.ax, MatplotlibOverlay, style=style, rule=rule)
        anchors = renderer.render(clusters, projector)
        png_path = os.path.join(args.out, "markers.png")
        canvas.save(png_path)
        print(f"[INFO] Drew {len(anchors)} markers")
        print(f"  Saved: {png_path}")
    finally:
        canvas.close()

    surface = RecordingSurface()
    OverlayRenderer(surface, RecordingOverlay, style=style, rule=rule).render(clusters, projector)
    layout_path = os.path.join(args.out, "overlays.json")
    with open(layout_path, "w", encoding="utf-8") as f:
        json.dump(surface.snapshot(), f, indent=2)
    print(f"  Saved: {layout_path}")


if __name__ == "__main__":
    main()
