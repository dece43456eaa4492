"""
Trilinear accumulation of gradient samples into the descriptor histogram.

The descriptor is a 3-D histogram over (grid row, grid column, orientation
bin) stored flat as ``(row * width_grid + col) * num_bins + bin``.  Hard
binning would make the descriptor jump whenever a sample crosses a cell or
bin boundary, so each sample is spread over its neighbouring cells with
tent weights ``max(0, 1 - |distance|)`` along each of the three axes.
"""

import math

import numpy as np

from pointsift.utils.angles import TWO_PI, angle_dist


def _grid_neighbours(coord: float, width_grid: int):
    """(index, tent weight) pairs for the grid cells a coordinate touches."""
    base = int(math.floor(coord))
    for i in (base, base + 1):
        if i < 0 or i >= width_grid:
            continue
        w = 1.0 - abs(coord - i)
        if w > 0:
            yield i, w


def _bin_neighbours(angle: float, num_bins: int):
    """(bin, tent weight) pairs for the orientation bins an angle touches."""
    bin_width = TWO_PI / num_bins
    k0 = int(math.floor(angle / bin_width)) % num_bins
    k1 = (k0 + 1) % num_bins
    for k in ((k0,) if k1 == k0 else (k0, k1)):
        w = 1.0 - angle_dist(angle, k * bin_width) / bin_width
        if w > 0:
            yield k, w


def trilinear_interpolation(descriptor: np.ndarray, weight: float,
                            sub_x: float, sub_y: float, angle: float,
                            width_grid: int, num_bins: int) -> None:
    """Add one weighted sample to the descriptor histogram in place.

    At most 2 x 2 x 2 cells receive a contribution.  Cells whose tent
    weight along any axis is <= 0 are skipped entirely.

    Parameters
    ----------
    descriptor : np.ndarray
        Flat histogram of length ``width_grid**2 * num_bins``.
    weight : float
        Gaussian weight times gradient magnitude of the sample.
    sub_x, sub_y : float
        Sample position in sub-region units.
    angle : float
        Gradient orientation in [0, 2*pi), relative to the keypoint.
    width_grid : int
        Number of sub-regions per grid side.
    num_bins : int
        Number of orientation bins.
    """
    bins = list(_bin_neighbours(angle, num_bins))
    if not bins:
        return

    for i, weight_row in _grid_neighbours(sub_y, width_grid):
        for j, weight_col in _grid_neighbours(sub_x, width_grid):
            base = (i * width_grid + j) * num_bins
            spatial = weight * weight_row * weight_col
            for k, weight_bin in bins:
                descriptor[base + k] += spatial * weight_bin
