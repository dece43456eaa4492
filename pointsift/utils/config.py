"""
YAML configuration for the descriptor driver.

A configuration file has an optional ``descriptor`` section whose keys are
the :class:`~pointsift.descriptors.sift.DescribePointSift` parameters, and an
optional ``scenes`` list naming the derivative archives and keypoint files
to describe.
"""

import copy
import logging

import yaml

from pointsift.descriptors.errors import InvalidConfiguration

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTOR_CONFIG = {
    "width_subregion": 4,
    "width_grid": 4,
    "num_histogram_bins": 8,
    "sigma_to_pixels": 1.5,
    "weighting_sigma_fraction": 0.5,
    "max_descriptor_element_value": 0.2,
}

SCENE_KEYS = ("name", "gradient", "keypoints")


def load_config(path: str) -> dict:
    """Read a YAML config and fill in descriptor defaults.

    Parameters
    ----------
    path : str
        Path to the YAML file.

    Returns
    -------
    dict
        ``{"descriptor": {...}, "scenes": [...]}`` plus any other top-level
        keys found in the file.

    Raises
    ------
    InvalidConfiguration
        If the document is not a mapping, names unknown descriptor
        parameters, or has malformed scene entries.
    """
    with open(path, "r") as fh:
        raw = yaml.safe_load(fh)
    return parse_config(raw if raw is not None else {})


def parse_config(raw) -> dict:
    """Validate an already-loaded config mapping (see :func:`load_config`)."""
    if not isinstance(raw, dict):
        raise InvalidConfiguration(
            f"config must be a mapping, got {type(raw).__name__}")

    cfg = copy.deepcopy(raw)

    section = cfg.get("descriptor") or {}
    if not isinstance(section, dict):
        raise InvalidConfiguration("'descriptor' section must be a mapping")
    unknown = sorted(set(section) - set(DEFAULT_DESCRIPTOR_CONFIG))
    if unknown:
        raise InvalidConfiguration(
            f"unknown descriptor parameters: {', '.join(unknown)}")
    descriptor = dict(DEFAULT_DESCRIPTOR_CONFIG)
    descriptor.update(section)
    cfg["descriptor"] = descriptor

    scenes = cfg.get("scenes") or []
    if not isinstance(scenes, list):
        raise InvalidConfiguration("'scenes' must be a list")
    for sc in scenes:
        if not isinstance(sc, dict) or any(k not in sc for k in SCENE_KEYS):
            raise InvalidConfiguration(
                f"scene entries need keys {SCENE_KEYS}, got {sc!r}")
    cfg["scenes"] = scenes

    logger.debug("Descriptor config: %s", descriptor)
    return cfg
