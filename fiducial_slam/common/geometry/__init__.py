"""
Geometry package for fiducial SLAM.

Rigid transforms on top of scipy.spatial.transform.

Usage:
    from fiducial_slam.common.geometry import Transform, slerp
"""

from __future__ import annotations

from fiducial_slam.common.geometry.transform import Transform, slerp

__all__ = [
    "Transform",
    "slerp",
]
