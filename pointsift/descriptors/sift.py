"""
SIFT descriptor computed at a single keypoint.

The descriptor is computed inside a square grid that is scaled by the
keypoint's sigma and rotated by its orientation.  Each grid cell is a square
sub-region of samples; a 4x4 grid of 4x4 sub-regions samples a 16x16 area.
Every sub-region accumulates an orientation histogram of the image's spatial
derivatives, so a 4x4 grid with 8 bins gives the classic 128 element vector.

Each sample contributes to the histogram with a weight made of its gradient
magnitude, a Gaussian centred on the keypoint, and trilinear interpolation
over (grid row, grid column, orientation bin).  The raw histogram is then
normalised, clipped and normalised again for lighting invariance.

Lowe, D. "Distinctive image features from scale-invariant keypoints".
International Journal of Computer Vision, 60, 2 (2004), pp. 91-110.
"""

import logging
import math
import numbers
from typing import NamedTuple, Optional

import numpy as np

from pointsift.descriptors.errors import InvalidArgument, InvalidConfiguration
from pointsift.descriptors.histogram import trilinear_interpolation
from pointsift.descriptors.normalize import massage_descriptor
from pointsift.descriptors.weighting import gaussian_weight_kernel
from pointsift.sampling.gradient import ImageGradient, sample_gradients

logger = logging.getLogger(__name__)


class Keypoint(NamedTuple):
    """Location, scale and orientation (radians) of a point to describe."""
    x: float
    y: float
    sigma: float
    orientation: float


def _check_positive_int(name, value):
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidConfiguration(f"{name} must be positive, got {value}")
    return int(value)


def _check_positive_float(name, value):
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidConfiguration(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidConfiguration(f"{name} must be positive, got {value}")
    return float(value)


class DescribePointSift:
    """Computes SIFT descriptors from precomputed image derivatives.

    Parameters
    ----------
    width_subregion : int
        Width of a sub-region, in samples.  Try 4.
    width_grid : int
        Width of the outer grid, in sub-regions.  Try 4.
    num_histogram_bins : int
        Number of orientation bins per sub-region.  Try 8.
    sigma_to_pixels : float
        Conversion from keypoint sigma to sample spacing in pixels.  Scales
        the descriptor region.
    weighting_sigma_fraction : float
        Sigma of the Gaussian weighting is this fraction of the sample window
        width.  Try 0.5.
    max_descriptor_element_value : float
        Clip threshold applied between the two normalisations.  Try 0.2.

    Raises
    ------
    InvalidConfiguration
        If any parameter is not positive or an integer parameter is not an
        integer.
    """

    def __init__(self, width_subregion: int = 4, width_grid: int = 4,
                 num_histogram_bins: int = 8, sigma_to_pixels: float = 1.5,
                 weighting_sigma_fraction: float = 0.5,
                 max_descriptor_element_value: float = 0.2):
        self._width_subregion = _check_positive_int(
            "width_subregion", width_subregion)
        self._width_grid = _check_positive_int("width_grid", width_grid)
        self._num_histogram_bins = _check_positive_int(
            "num_histogram_bins", num_histogram_bins)
        self._sigma_to_pixels = _check_positive_float(
            "sigma_to_pixels", sigma_to_pixels)
        self._weighting_sigma_fraction = _check_positive_float(
            "weighting_sigma_fraction", weighting_sigma_fraction)
        self._max_descriptor_element_value = _check_positive_float(
            "max_descriptor_element_value", max_descriptor_element_value)

        # number of samples wide the descriptor window is
        sample_width = self._width_subregion * self._width_grid
        weight_sigma = sample_width * self._weighting_sigma_fraction
        weights = gaussian_weight_kernel(weight_sigma, sample_width // 2,
                                         odd=sample_width % 2 == 1)
        weights.flags.writeable = False
        self._gaussian_weight = weights

        self._gradient = None

        logger.debug(
            "SIFT descriptor: %dx%d grid of %dx%d samples, %d bins, "
            "sigma_to_pixels=%.3f, weight sigma=%.3f, clip=%.3f",
            self._width_grid, self._width_grid,
            self._width_subregion, self._width_subregion,
            self._num_histogram_bins, self._sigma_to_pixels, weight_sigma,
            self._max_descriptor_element_value)

    @classmethod
    def from_config(cls, cfg: dict) -> "DescribePointSift":
        """Build a describer from the ``descriptor`` section of a config."""
        return cls(**cfg["descriptor"])

    # ------------------------------------------------------------------
    # Configuration (read-only)
    # ------------------------------------------------------------------

    @property
    def width_subregion(self) -> int:
        return self._width_subregion

    @property
    def width_grid(self) -> int:
        return self._width_grid

    @property
    def num_histogram_bins(self) -> int:
        return self._num_histogram_bins

    @property
    def sigma_to_pixels(self) -> float:
        return self._sigma_to_pixels

    @property
    def weighting_sigma_fraction(self) -> float:
        return self._weighting_sigma_fraction

    @property
    def max_descriptor_element_value(self) -> float:
        return self._max_descriptor_element_value

    @property
    def gaussian_weight(self) -> np.ndarray:
        """Read-only Gaussian weighting table over the sample lattice."""
        return self._gaussian_weight

    @property
    def descriptor_length(self) -> int:
        return self._width_grid * self._width_grid * self._num_histogram_bins

    @property
    def canonical_radius(self) -> int:
        """Radius of the descriptor in pixels at sigma * sigma_to_pixels = 1."""
        return self._width_grid * self._width_subregion // 2

    def get_descriptor_length(self) -> int:
        return self.descriptor_length

    def get_canonical_radius(self) -> int:
        return self.canonical_radius

    def create_descriptor(self) -> np.ndarray:
        """Allocate a zeroed buffer suitable for :meth:`process`."""
        return np.zeros(self.descriptor_length, dtype=np.float64)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def set_image_gradient(self, deriv_x: np.ndarray,
                           deriv_y: np.ndarray) -> None:
        """Bind default derivative images for later :meth:`process` calls.

        The arrays are not copied.  They should be computed from the image at
        the keypoints' scale and must stay unchanged until rebound.
        """
        self._gradient = ImageGradient(deriv_x, deriv_y)

    def process(self, c_x: float, c_y: float, sigma: float,
                orientation: float, descriptor: np.ndarray,
                gradient: Optional[ImageGradient] = None) -> np.ndarray:
        """Compute the descriptor of one keypoint into *descriptor*.

        Parameters
        ----------
        c_x, c_y : float
            Keypoint centre (x = column, y = row).
        sigma : float
            Scale-space sigma of the keypoint.  Must be > 0.
        orientation : float
            Orientation of the keypoint in radians.
        descriptor : np.ndarray
            Output buffer of length :attr:`descriptor_length`, overwritten.
        gradient : ImageGradient, optional
            Derivatives to sample.  Defaults to the pair bound with
            :meth:`set_image_gradient`.

        Returns
        -------
        np.ndarray
            *descriptor*, for chaining.

        Raises
        ------
        InvalidArgument
            If the buffer has the wrong length or type, the keypoint is not
            finite or has a non-positive sigma, or no gradient is available.
            Nothing is written in that case.
        """
        self._check_descriptor(descriptor)
        for name, value in (("c_x", c_x), ("c_y", c_y),
                            ("orientation", orientation)):
            if not math.isfinite(value):
                raise InvalidArgument(f"{name} must be finite, got {value}")
        if not math.isfinite(sigma) or sigma <= 0:
            raise InvalidArgument(f"sigma must be positive, got {sigma}")

        if gradient is None:
            gradient = self._gradient
        if gradient is None:
            raise InvalidArgument(
                "no image gradient: pass one or call set_image_gradient()")

        descriptor.fill(0)

        for sample in sample_gradients(
                gradient, c_x, c_y, sigma, orientation,
                self._width_subregion, self._width_grid,
                self._sigma_to_pixels, self._gaussian_weight):
            trilinear_interpolation(descriptor, sample.weight,
                                    sample.sub_x, sample.sub_y, sample.angle,
                                    self._width_grid,
                                    self._num_histogram_bins)

        return massage_descriptor(descriptor,
                                  self._max_descriptor_element_value)

    def _check_descriptor(self, descriptor) -> None:
        if not isinstance(descriptor, np.ndarray):
            raise InvalidArgument(
                f"descriptor must be a numpy array, got {type(descriptor)}")
        if descriptor.ndim != 1 or descriptor.shape[0] != self.descriptor_length:
            raise InvalidArgument(
                f"descriptor must have shape ({self.descriptor_length},), "
                f"got {descriptor.shape}")
        if not np.issubdtype(descriptor.dtype, np.floating):
            raise InvalidArgument(
                f"descriptor must be floating point, got {descriptor.dtype}")
        if not descriptor.flags.writeable:
            raise InvalidArgument("descriptor buffer is read-only")


def describe_keypoints(describer: DescribePointSift, gradient: ImageGradient,
                       keypoints) -> np.ndarray:
    """Compute descriptors for a batch of keypoints.

    Parameters
    ----------
    describer : DescribePointSift
        Configured describer.
    gradient : ImageGradient
        Derivative pair shared by all keypoints.
    keypoints : sequence of Keypoint or np.ndarray
        N keypoints, or an N x 4 array of (x, y, sigma, orientation).

    Returns
    -------
    np.ndarray
        N x D float64 matrix, one descriptor per row, in input order.
        Keypoints whose window falls entirely outside the image give an
        all-zero row.
    """
    kps = np.asarray(keypoints, dtype=np.float64)
    if kps.size == 0:
        kps = kps.reshape(0, 4)
    if kps.ndim != 2 or kps.shape[1] != 4:
        raise InvalidArgument(
            f"keypoints must be N x 4 (x, y, sigma, orientation), "
            f"got shape {kps.shape}")

    descriptors = np.zeros((kps.shape[0], describer.descriptor_length))
    for i, (x, y, sigma, orientation) in enumerate(kps):
        describer.process(float(x), float(y), float(sigma),
                          float(orientation), descriptors[i],
                          gradient=gradient)

    logger.debug("Described %d keypoints (%d-dim)",
                 descriptors.shape[0], descriptors.shape[1])
    return descriptors
