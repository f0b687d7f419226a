"""
Mapping core for fiducial SLAM.

Pure Python (numpy/scipy) landmark map: observations, variance-weighted
fusion, the landmark entity, the map aggregate and its persistence codec.
No ROS imports; the ROS 2 node lives in fiducial_slam.backend.
"""

from fiducial_slam.mapping.fiducial_map import (
    AutoInitState,
    FiducialMap,
    InitPhase,
    find_closest_observation,
)
from fiducial_slam.mapping.fusion import blend, fuse_variance
from fiducial_slam.mapping.landmark import Landmark
from fiducial_slam.mapping.map_io import load_landmarks, read_landmarks, save_landmarks
from fiducial_slam.mapping.observation import Observation
from fiducial_slam.mapping.publisher import MapPublisher, NullMapPublisher

__all__ = [
    "AutoInitState",
    "FiducialMap",
    "InitPhase",
    "find_closest_observation",
    "blend",
    "fuse_variance",
    "Landmark",
    "load_landmarks",
    "read_landmarks",
    "save_landmarks",
    "Observation",
    "MapPublisher",
    "NullMapPublisher",
]
