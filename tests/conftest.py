import os
import sys

import numpy as np
import pytest
from scipy import ndimage

# Ensure the project root is importable when running pytest from a checkout.
_TEST_DIR = os.path.dirname(__file__)
_PKG_ROOT = os.path.abspath(os.path.join(_TEST_DIR, ".."))
if _PKG_ROOT not in sys.path:
    sys.path.insert(0, _PKG_ROOT)

from pointsift.descriptors.sift import DescribePointSift
from pointsift.sampling.gradient import ImageGradient


def sobel_gradient(image: np.ndarray) -> ImageGradient:
    """x/y Sobel derivatives of *image* wrapped as an ImageGradient."""
    image = image.astype(np.float64)
    return ImageGradient(ndimage.sobel(image, axis=1),
                         ndimage.sobel(image, axis=0))


@pytest.fixture
def describer() -> DescribePointSift:
    """4x4 grid of 4x4 samples, 8 bins, one pixel per sample at sigma=1."""
    return DescribePointSift(width_subregion=4, width_grid=4,
                             num_histogram_bins=8, sigma_to_pixels=1.0,
                             weighting_sigma_fraction=0.5,
                             max_descriptor_element_value=0.2)


@pytest.fixture
def step_edge_gradient() -> ImageGradient:
    """64x64 image, dark on the left, bright from column 32 on."""
    image = np.zeros((64, 64))
    image[:, 32:] = 1.0
    return sobel_gradient(image)


@pytest.fixture
def textured_gradient() -> ImageGradient:
    """Smoothed random texture, so every orientation gets some energy."""
    rng = np.random.default_rng(1234)
    image = ndimage.gaussian_filter(rng.random((80, 80)), 1.5)
    return sobel_gradient(image)
