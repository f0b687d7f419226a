"""
Variance-weighted transform fusion.

"Variance" here is a scalar confidence proxy: lower is more trusted, and 0
marks a pinned estimate that dominates any partner completely.

Only the plain harmonic-mean variance rule is used. There is no overlap-aware
form that inflates the fused variance by the disagreement between the means.
"""

from __future__ import annotations

from fiducial_slam import constants
from fiducial_slam.common.geometry import Transform, slerp


def blend(t1: Transform, var1: float, t2: Transform, var2: float) -> Transform:
    """
    Blend two transform estimates using their variances as weights.

    Translation is the inverse-variance weighted mean; rotation is slerped
    from t1 towards t2 by var1 / (var1 + var2). A zero-variance side is
    returned unchanged.
    """
    if var1 == 0.0:
        return t1
    if var2 == 0.0:
        return t2

    total = var1 + var2
    translation = (var1 * t2.translation + var2 * t1.translation) / total
    rotation = slerp(t1.rotation, t2.rotation, var1 / total)
    return Transform(rotation, translation)


def fuse_variance(var1: float, var2: float) -> float:
    """
    Variance after combining two estimates (harmonic mean, floored).

    Commutative, never larger than either input, never below VARIANCE_FLOOR.
    """
    if var1 <= 0.0 or var2 <= 0.0:
        return constants.VARIANCE_FLOOR
    return max(1.0 / (1.0 / var1 + 1.0 / var2), constants.VARIANCE_FLOOR)
