"""
Array loading helpers for the descriptor driver.

Derivative images are read from ``.npz`` archives holding ``deriv_x`` and
``deriv_y``; keypoints from CSV files with columns
``x, y, sigma, orientation``.
"""

import numpy as np

from pointsift.descriptors.errors import InvalidArgument
from pointsift.sampling.gradient import ImageGradient


def load_image_gradient(path: str) -> ImageGradient:
    """Load an x/y derivative pair saved with ``np.savez``.

    Parameters
    ----------
    path : str
        Path to an ``.npz`` archive with arrays ``deriv_x`` and ``deriv_y``.

    Returns
    -------
    ImageGradient
        The pair, with shapes checked for equality.
    """
    with np.load(path) as archive:
        missing = [k for k in ("deriv_x", "deriv_y") if k not in archive]
        if missing:
            raise InvalidArgument(
                f"{path}: missing arrays {', '.join(missing)}")
        deriv_x = archive["deriv_x"]
        deriv_y = archive["deriv_y"]
    return ImageGradient(deriv_x, deriv_y)


def load_keypoints(path: str) -> np.ndarray:
    """Load keypoints as an N x 4 float64 array.

    Lines starting with ``#`` are ignored, so a header comment is allowed.

    Parameters
    ----------
    path : str
        Comma separated file, one keypoint per line.

    Returns
    -------
    np.ndarray
        N x 4 array of (x, y, sigma, orientation).
    """
    kps = np.loadtxt(path, delimiter=",", comments="#", ndmin=2)
    if kps.size == 0:
        return np.empty((0, 4))
    if kps.shape[1] != 4:
        raise InvalidArgument(
            f"{path}: expected 4 columns (x, y, sigma, orientation), "
            f"got {kps.shape[1]}")
    return kps
