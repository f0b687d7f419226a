"""
Per-frame fiducial observations.

An Observation is one detection of one fiducial in one frame: the rigid
transform between the fiducial and the camera, in both directions, and the
detector's two error scalars.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from fiducial_slam import constants
from fiducial_slam.common.geometry import Transform

# ArUco reports y forward / x right; the map frame is x forward / y left.
_T_DETECTOR_MAP = Transform.from_axis_angle((0.0, 0.0, 1.0), constants.DETECTOR_AXIS_CORRECTION_YAW)


@dataclass(frozen=True, eq=False)
class Observation:
    """
    One fiducial detection.

    Attributes:
        fid: Fiducial (landmark) id
        T_fid_cam: Pose of the camera in the fiducial frame
        T_cam_fid: Pose of the fiducial in the camera frame (inverse of T_fid_cam)
        image_error: Reprojection error in image space
        object_error: Error in object space, used as the measurement variance
    """
    fid: int
    T_fid_cam: Transform
    T_cam_fid: Transform
    image_error: float
    object_error: float

    @classmethod
    def from_detection(
        cls,
        fid: int,
        quat: Sequence[float],
        tvec: Sequence[float],
        image_error: float,
        object_error: float,
    ) -> "Observation":
        """
        Build an observation from a raw detector pose.

        Args:
            fid: Fiducial id
            quat: Detector rotation as quaternion (x, y, z, w)
            tvec: Detector translation
            image_error: Image-space error (>= 0)
            object_error: Object-space error (>= 0)
        """
        T_fid_cam = Transform.from_quat(quat, tvec) * _T_DETECTOR_MAP
        return cls(
            fid=int(fid),
            T_fid_cam=T_fid_cam,
            T_cam_fid=T_fid_cam.inverse(),
            image_error=float(image_error),
            object_error=float(object_error),
        )

    def camera_distance_squared(self) -> float:
        """Squared camera-to-fiducial distance."""
        return self.T_cam_fid.distance_squared()
