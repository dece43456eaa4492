"""
Exceptions raised by the descriptor core.
"""


class InvalidConfiguration(ValueError):
    """A descriptor was configured with parameters it cannot work with.

    Raised once, at construction time.  The instance is unusable and must be
    rebuilt with corrected parameters.
    """


class InvalidArgument(ValueError):
    """A per-call argument (output buffer, keypoint, gradient) is unusable."""
