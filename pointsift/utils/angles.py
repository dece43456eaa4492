"""
Angle helpers shared by the gradient sampler and the orientation histogram.

Angles are expressed in radians.  Orientation bins live on the circle
[0, 2*pi), so distances between angles must wrap around.
"""

import math

TWO_PI = 2.0 * math.pi


def domain_2pi(angle: float) -> float:
    """Map an arbitrary angle into the half-open interval [0, 2*pi)."""
    angle = math.fmod(angle, TWO_PI)
    if angle < 0:
        angle += TWO_PI
    # -tiny + 2*pi rounds up to exactly 2*pi
    if angle >= TWO_PI:
        angle = 0.0
    return angle


def angle_dist(a: float, b: float) -> float:
    """Smallest distance between two angles in [0, 2*pi).

    Parameters
    ----------
    a, b : float
        Angles in radians, both already inside [0, 2*pi).

    Returns
    -------
    float
        Circular distance in [0, pi].
    """
    d = abs(a - b)
    if d > math.pi:
        d = TWO_PI - d
    return d
