"""
Pydantic parameter models.

The single source of truth for parameter names, types, defaults and
validation; the node declares its ROS parameters from these fields.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fiducial_slam import constants


class SlamParams(BaseModel):
    """Fiducial SLAM node parameters."""

    model_config = ConfigDict(extra="forbid")

    # Storage
    map_file: str = constants.DEFAULT_MAP_FILE
    initial_map_file: str = ""

    # Frames and topics
    map_frame: str = "map"
    pose_frame: str = "base_link"
    fiducial_transforms_topic: str = "/fiducial_transforms"

    # Mapping
    auto_init_frames: int = Field(default=constants.AUTO_INIT_FRAMES_DEFAULT, ge=1)

    # Visualization
    marker_refresh_period_sec: float = Field(default=constants.MARKER_REFRESH_PERIOD_DEFAULT, gt=0.0)
    marker_size: float = Field(default=constants.MARKER_SIZE_DEFAULT, gt=0.0)
    publish_tf: bool = True
    publish_rays: bool = False

    # Output
    trajectory_export_path: str = ""
    status_check_period_sec: float = Field(default=constants.STATUS_CHECK_PERIOD_DEFAULT, gt=0.0)

    @field_validator("map_file", "initial_map_file", "trajectory_export_path")
    @classmethod
    def _expand_user(cls, value: str) -> str:
        return os.path.expanduser(value) if value else value

    @field_validator("map_file")
    @classmethod
    def _require_map_file(cls, value: str) -> str:
        if not value:
            raise ValueError("map_file must not be empty")
        return value
