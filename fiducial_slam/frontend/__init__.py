"""
Frontend package for fiducial SLAM.

Converts detector output into mapping observations.
"""

from fiducial_slam.frontend.fiducial_io import observations_from_msg, stamp_to_sec

__all__ = [
    "observations_from_msg",
    "stamp_to_sec",
]
