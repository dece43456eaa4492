#!/usr/bin/env python3
"""
run_describe.py – SIFT Point Descriptor Driver

Loads configuration from configs/default.yaml (or a user-specified file),
computes a SIFT descriptor for every keypoint of every scene defined in the
config, and prints a per-scene summary.

Each scene names an ``.npz`` archive with precomputed ``deriv_x`` /
``deriv_y`` arrays and a CSV of ``x, y, sigma, orientation`` keypoints.

Usage
-----
    python run_describe.py
    python run_describe.py --config configs/default.yaml
    python run_describe.py --scenes boat graffiti
    python run_describe.py --verbose
"""

import argparse
import logging
import os
import sys
import time

import numpy as np

# Ensure the project root is on the Python path when invoked directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from pointsift.descriptors.errors import InvalidArgument, InvalidConfiguration
from pointsift.descriptors.sift import DescribePointSift, describe_keypoints
from pointsift.utils.array_io import load_image_gradient, load_keypoints
from pointsift.utils.config import load_config


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────

def banner(text: str) -> None:
    width = 60
    print("\n" + "─" * width)
    print(f"  {text}")
    print("─" * width)


# ──────────────────────────────────────────────────────────────────────────────
# Per-scene description
# ──────────────────────────────────────────────────────────────────────────────

def run_scene(scene_cfg: dict, describer: DescribePointSift) -> dict:
    """Describe every keypoint of a single scene and return summary metrics."""
    name = scene_cfg["name"]
    banner(f"Scene: {name}")

    gradient = load_image_gradient(scene_cfg["gradient"])
    keypoints = load_keypoints(scene_cfg["keypoints"])
    h, w = gradient.shape
    print(f"  Loaded gradient  {w}×{h}  /  {keypoints.shape[0]} keypoints")

    descriptors = describe_keypoints(describer, gradient, keypoints)
    norms = np.sqrt(np.sum(descriptors ** 2, axis=1))
    empty = int(np.sum(norms == 0))
    print(f"    {descriptors.shape[0]} descriptors  "
          f"({descriptors.shape[1]}-dim), {empty} outside the image")

    return {
        "scene": name,
        "keypoints": keypoints.shape[0],
        "dim": descriptors.shape[1],
        "empty": empty,
        "mean_norm": float(np.mean(norms)) if norms.size else None,
        "max_element": float(np.max(descriptors)) if descriptors.size else None,
    }


# ──────────────────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Compute SIFT descriptors from precomputed image gradients"
    )
    p.add_argument(
        "--config", default="configs/default.yaml",
        help="Path to YAML configuration file (default: configs/default.yaml)",
    )
    p.add_argument(
        "--scenes", nargs="*", default=None,
        help="Subset of scene names to process (default: all scenes in config)",
    )
    p.add_argument(
        "--verbose", action="store_true",
        help="Enable debug logging",
    )
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    # Load configuration
    if not os.path.exists(args.config):
        print(f"[ERROR] Config file not found: {args.config}")
        sys.exit(1)
    try:
        cfg = load_config(args.config)
        describer = DescribePointSift.from_config(cfg)
    except InvalidConfiguration as e:
        print(f"[ERROR] Invalid configuration: {e}")
        sys.exit(1)

    scenes = cfg["scenes"]

    # Optionally restrict to a subset of scenes
    if args.scenes:
        scenes = [s for s in scenes if s["name"] in args.scenes]
        if not scenes:
            print(f"[ERROR] No matching scenes found for: {args.scenes}")
            sys.exit(1)

    # Validate that input files exist
    for sc in scenes:
        for key in ("gradient", "keypoints"):
            if not os.path.exists(sc[key]):
                print(f"[ERROR] File not found: {sc[key]}")
                sys.exit(1)

    banner("SIFT Point Descriptor")
    print(f"  Config  : {args.config}")
    print(f"  Scenes  : {[s['name'] for s in scenes]}")
    print(f"  Grid    : {describer.width_grid}×{describer.width_grid} of "
          f"{describer.width_subregion}×{describer.width_subregion} samples, "
          f"{describer.num_histogram_bins} bins "
          f"({describer.descriptor_length}-dim)")

    t0 = time.time()
    all_metrics = []

    for sc in scenes:
        try:
            metrics = run_scene(sc, describer)
        except InvalidArgument as e:
            print(f"[ERROR] Scene {sc['name']}: {e}")
            sys.exit(1)
        all_metrics.append(metrics)

    # ── Summary table ──────────────────────────────────────────────────────
    banner("Results Summary")
    header = f"{'Scene':<12} {'Keypoints':>10} {'Dim':>6} {'Empty':>7} {'Norm':>7} {'Max':>7}"
    print(header)
    print("─" * len(header))
    for m in all_metrics:
        norm = f"{m['mean_norm']:.3f}" if m["mean_norm"] is not None else "–"
        mx = f"{m['max_element']:.3f}" if m["max_element"] is not None else "–"
        print(f"{m['scene']:<12} {m['keypoints']:>10} {m['dim']:>6} "
              f"{m['empty']:>7} {norm:>7} {mx:>7}")

    elapsed = time.time() - t0
    print(f"\nDescription complete in {elapsed:.1f}s")


if __name__ == "__main__":
    main()
