"""
Common package for fiducial SLAM.

Shared geometry, parameter models and diagnostics used by both the mapping
core and the ROS 2 nodes.
"""

from fiducial_slam.common.frame_report import FrameReport
from fiducial_slam.common.param_models import SlamParams

__all__ = [
    "FrameReport",
    "SlamParams",
]
