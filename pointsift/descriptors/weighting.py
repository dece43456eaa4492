"""
Gaussian weighting window for the descriptor sample lattice.

Samples far from the keypoint centre are less reliable under small
localisation errors, so every gradient sample is scaled by a 2-D isotropic
Gaussian evaluated at its lattice position.  The table is normalised so its
peak equals 1 rather than so it sums to 1.
"""

import numpy as np

from pointsift.descriptors.errors import InvalidConfiguration


def gaussian_weight_kernel(sigma: float, radius: int,
                           odd: bool = False) -> np.ndarray:
    """Build a square Gaussian weighting table with unit peak.

    With ``odd=False`` the table has an even side of ``2 * radius`` and the
    sample offsets fall on half-integers (``i - radius + 0.5``), so no cell
    sits on the centre.  With ``odd=True`` the side is ``2 * radius + 1`` and
    the centre cell has offset zero.

    Parameters
    ----------
    sigma : float
        Standard deviation of the Gaussian, in samples.  Must be > 0.
    radius : int
        Half-width of the table.  Must be >= 0 (and >= 1 for even tables).
    odd : bool
        Whether the table has a centre cell.

    Returns
    -------
    np.ndarray
        float64 array of shape (W, W) with values in (0, 1].
    """
    if sigma <= 0:
        raise InvalidConfiguration(f"sigma must be positive, got {sigma}")
    if radius < 0 or (radius == 0 and not odd):
        raise InvalidConfiguration(
            f"radius {radius} gives an empty {'odd' if odd else 'even'} kernel")

    width = 2 * radius + (1 if odd else 0)
    offsets = np.arange(width, dtype=np.float64) - (width - 1) / 2.0

    xx, yy = np.meshgrid(offsets, offsets)
    kernel = np.exp(-(xx ** 2 + yy ** 2) / (2.0 * sigma ** 2))
    return kernel / np.max(np.abs(kernel))
