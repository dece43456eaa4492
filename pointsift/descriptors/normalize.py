"""
Lighting normalisation of raw SIFT histograms.

A uniform change in contrast scales every gradient magnitude by the same
factor, which unit-length normalisation removes.  Non-linear lighting
effects tend to produce a few very large magnitudes; clipping elements to a
threshold and normalising again reduces their influence (Lowe 2004, 6.1).
"""

import numpy as np


def normalize_l2(descriptor: np.ndarray) -> np.ndarray:
    """Scale *descriptor* in place to unit Euclidean length.

    An all-zero vector is left unchanged instead of producing NaN.

    Returns
    -------
    np.ndarray
        The same array, for chaining.
    """
    norm = np.sqrt(np.sum(descriptor ** 2))
    if norm > 0:
        descriptor /= norm
    return descriptor


def massage_descriptor(descriptor: np.ndarray,
                       max_element_value: float) -> np.ndarray:
    """Normalise, clip each element to *max_element_value*, normalise again.

    Parameters
    ----------
    descriptor : np.ndarray
        Raw 1-D histogram, modified in place.
    max_element_value : float
        Upper bound applied between the two normalisations.

    Returns
    -------
    np.ndarray
        The same array, for chaining.
    """
    normalize_l2(descriptor)
    np.minimum(descriptor, max_element_value, out=descriptor)
    normalize_l2(descriptor)
    return descriptor
