"""
Detector message conversion.

Turns a fiducial_msgs/FiducialTransformArray into Observations. Works on any
object with the same attribute layout, so it does not import ROS packages.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, List

from fiducial_slam.mapping.observation import Observation

if TYPE_CHECKING:
    from fiducial_msgs.msg import FiducialTransform, FiducialTransformArray


def stamp_to_sec(stamp) -> float:
    """builtin_interfaces/Time to float seconds."""
    return float(stamp.sec) + float(stamp.nanosec) * 1e-9


def observation_from_fiducial_transform(ft: "FiducialTransform") -> Observation:
    t = ft.transform.translation
    q = ft.transform.rotation
    return Observation.from_detection(
        fid=ft.fiducial_id,
        quat=(q.x, q.y, q.z, q.w),
        tvec=(t.x, t.y, t.z),
        image_error=ft.image_error,
        object_error=ft.object_error,
    )


def _is_valid(ft: "FiducialTransform") -> bool:
    t = ft.transform.translation
    q = ft.transform.rotation
    values = (t.x, t.y, t.z, q.x, q.y, q.z, q.w, ft.image_error, ft.object_error)
    if not all(math.isfinite(v) for v in values):
        return False
    if ft.image_error < 0.0 or ft.object_error < 0.0:
        return False
    return (q.x * q.x + q.y * q.y + q.z * q.z + q.w * q.w) > 1e-12


def observations_from_msg(msg: "FiducialTransformArray", logger=None) -> List[Observation]:
    """
    Convert every usable detection in the message.

    Detections with non-finite values, negative errors or a zero quaternion
    are dropped (with a warning if a logger is given).
    """
    observations: List[Observation] = []
    for ft in msg.transforms:
        if not _is_valid(ft):
            if logger is not None:
                logger.warning(f"Dropping invalid detection of fiducial {ft.fiducial_id}")
            continue
        observations.append(observation_from_fiducial_transform(ft))
    return observations
