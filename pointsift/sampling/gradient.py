"""
Rotated, scaled gradient sampling around a keypoint.

The descriptor window is a square lattice of ``width_grid * width_subregion``
samples per side.  The lattice is scaled by the keypoint's sigma, rotated by
its orientation, and centred on it; each lattice point is snapped to the
nearest image pixel where the spatial derivatives are read.  Gradients are
re-expressed relative to the keypoint orientation so the resulting histogram
is rotation invariant.

Pixel access is nearest-neighbour, as in VLFeat and Lowe's description of
the descriptor.
"""

import math
from typing import Iterator, NamedTuple

import numpy as np

from pointsift.descriptors.errors import InvalidArgument
from pointsift.utils.angles import domain_2pi


class GradientSample(NamedTuple):
    """One weighted gradient sample in sub-region coordinates."""
    sub_x: float
    sub_y: float
    angle: float
    weight: float


class DerivativeImage:
    """Read-only point access to a single derivative image.

    The array is indexed ``[row, col]``; this class takes ``(x, y)`` with
    ``x`` the column and ``y`` the row.
    """

    def __init__(self, data: np.ndarray):
        data = np.asarray(data)
        if data.ndim != 2:
            raise InvalidArgument(
                f"derivative image must be 2-D, got shape {data.shape}")
        self.data = data
        self.height, self.width = data.shape

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def sample(self, x: int, y: int) -> float:
        return float(self.data[y, x])


class ImageGradient:
    """Pair of x/y derivative images of identical shape.

    Neither array is copied; the caller keeps ownership and must not modify
    them while descriptors are being computed.

    Parameters
    ----------
    deriv_x, deriv_y : np.ndarray
        H x W derivative of the image along columns (x) and rows (y).
    """

    def __init__(self, deriv_x: np.ndarray, deriv_y: np.ndarray):
        self.deriv_x = DerivativeImage(deriv_x)
        self.deriv_y = DerivativeImage(deriv_y)
        if self.deriv_x.data.shape != self.deriv_y.data.shape:
            raise InvalidArgument(
                f"derivative shapes differ: {self.deriv_x.data.shape} "
                f"vs {self.deriv_y.data.shape}")

    @property
    def shape(self):
        return self.deriv_x.data.shape

    def in_bounds(self, x: int, y: int) -> bool:
        return self.deriv_x.in_bounds(x, y)


def sample_radius(sample_width: int) -> float:
    """Centre offset that makes the lattice symmetric about zero.

    An even width of 16 gives 7.5 (offsets -7.5 .. 7.5), an odd width of 15
    gives 7.0 (offsets -7 .. 7).
    """
    return sample_width // 2 - (1 - sample_width % 2) / 2.0


def round_pixel(value: float) -> int:
    """Round half up, identically for negative and positive coordinates."""
    return int(math.floor(value + 0.5))


def sample_gradients(gradient: ImageGradient, c_x: float, c_y: float,
                     sigma: float, orientation: float,
                     width_subregion: int, width_grid: int,
                     sigma_to_pixels: float,
                     weights: np.ndarray) -> Iterator[GradientSample]:
    """Yield weighted gradient samples over the rotated descriptor lattice.

    Parameters
    ----------
    gradient : ImageGradient
        Spatial derivatives at the keypoint's scale.
    c_x, c_y : float
        Keypoint centre in pixels (x = column, y = row).
    sigma : float
        Keypoint scale.
    orientation : float
        Keypoint orientation in radians, any real value.
    width_subregion : int
        Samples per sub-region side.
    width_grid : int
        Sub-regions per grid side.
    sigma_to_pixels : float
        Conversion from sigma to pixel spacing between samples.
    weights : np.ndarray
        Gaussian weighting table of shape (sample_width, sample_width).

    Yields
    ------
    GradientSample
        One entry per lattice point that lands inside the image, in
        row-major lattice order.
    """
    orientation = domain_2pi(orientation)
    c = math.cos(orientation)
    s = math.sin(orientation)

    sample_width = width_grid * width_subregion
    radius = sample_radius(sample_width)
    sample_to_pixels = sigma * sigma_to_pixels

    deriv_x = gradient.deriv_x
    deriv_y = gradient.deriv_y

    for sample_y in range(sample_width):
        sub_y = sample_y / width_subregion
        y = sample_to_pixels * (sample_y - radius)

        for sample_x in range(sample_width):
            sub_x = sample_x / width_subregion
            x = sample_to_pixels * (sample_x - radius)

            pixel_x = round_pixel(x * c - y * s + c_x)
            pixel_y = round_pixel(x * s + y * c + c_y)

            if not gradient.in_bounds(pixel_x, pixel_y):
                continue

            dx = deriv_x.sample(pixel_x, pixel_y)
            dy = deriv_y.sample(pixel_x, pixel_y)

            # gradient direction relative to the keypoint frame
            adj_dx = c * dx + s * dy
            adj_dy = -s * dx + c * dy
            angle = domain_2pi(math.atan2(adj_dy, adj_dx))

            magnitude = math.sqrt(dx * dx + dy * dy)
            weight = float(weights[sample_y, sample_x]) * magnitude

            yield GradientSample(sub_x, sub_y, angle, weight)
