"""
Publish boundary between the mapping core and its presentation layer.

FiducialMap hands every frame's results to a MapPublisher. The core decides
*when* something is published (including per-landmark refresh rate limiting);
the publisher owns *how* it is presented.
"""

from __future__ import annotations

from typing import Mapping, Protocol, TYPE_CHECKING

import numpy as np

from fiducial_slam.common.frame_report import FrameReport
from fiducial_slam.common.geometry import Transform

if TYPE_CHECKING:
    from fiducial_slam.mapping.landmark import Landmark


class MapPublisher(Protocol):
    """Receiver of map snapshots, landmark refreshes and observer poses."""

    def publish_map(self, landmarks: Mapping[int, "Landmark"]) -> None:
        ...

    def publish_landmark(self, landmark: "Landmark", landmarks: Mapping[int, "Landmark"]) -> None:
        ...

    def publish_ray(self, start: np.ndarray, end: np.ndarray) -> None:
        ...

    def publish_pose(self, pose: Transform, variance: float, stamp: float) -> None:
        ...

    def publish_report(self, report: FrameReport) -> None:
        ...


class NullMapPublisher:
    """Publisher that discards everything (offline mapping, replay)."""

    def publish_map(self, landmarks):
        pass

    def publish_landmark(self, landmark, landmarks):
        pass

    def publish_ray(self, start, end):
        pass

    def publish_pose(self, pose, variance, stamp):
        pass

    def publish_report(self, report):
        pass
