import os
from typing import Any, Dict, List, Tuple

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from fiducial_slam.common.geometry import Transform
from fiducial_slam.mapping.observation import Observation

# =============================================================================
# Production Config Fixtures
# =============================================================================


def _load_yaml_file(path: str) -> Dict[str, Any]:
    """Load a YAML config file, handling the ros__parameters wrapper."""
    import yaml
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    for key in ("fiducial_slam", "/**"):
        if key in data and "ros__parameters" in data.get(key, {}):
            return data[key]["ros__parameters"]
    return data


@pytest.fixture
def prod_config_path() -> str:
    test_dir = os.path.dirname(__file__)
    pkg_root = os.path.dirname(test_dir)
    return os.path.join(pkg_root, "config", "fiducial_slam.yaml")


@pytest.fixture
def prod_config(prod_config_path) -> Dict[str, Any]:
    """Parameters from the packaged base config, as the node would receive them."""
    if not os.path.exists(prod_config_path):
        pytest.skip("fiducial_slam.yaml not found")
    return _load_yaml_file(prod_config_path)


# =============================================================================
# Test Utility Fixtures
# =============================================================================


class RecordingPublisher:
    """MapPublisher that records every call."""

    def __init__(self):
        self.maps: List[Dict[int, Any]] = []
        self.landmarks: List[int] = []
        self.rays: List[Tuple[np.ndarray, np.ndarray]] = []
        self.poses: List[Tuple[Transform, float, float]] = []
        self.reports = []

    def publish_map(self, landmarks):
        self.maps.append(dict(landmarks))

    def publish_landmark(self, landmark, landmarks):
        self.landmarks.append(landmark.fid)

    def publish_ray(self, start, end):
        self.rays.append((np.array(start), np.array(end)))

    def publish_pose(self, pose, variance, stamp):
        self.poses.append((pose, variance, stamp))

    def publish_report(self, report):
        report.validate()
        self.reports.append(report)


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, dt: float) -> None:
        self.now += dt


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_observation(
    fid: int,
    T_fid_cam: Transform,
    object_error: float = 0.01,
    image_error: float = 0.5,
) -> Observation:
    """Observation with a given camera pose in the fiducial frame."""
    return Observation(
        fid=fid,
        T_fid_cam=T_fid_cam,
        T_cam_fid=T_fid_cam.inverse(),
        image_error=image_error,
        object_error=object_error,
    )


def observe_from(
    T_map_cam: Transform,
    landmark_poses: Dict[int, Transform],
    object_error: float = 0.01,
) -> List[Observation]:
    """Noise-free observations of each landmark from a camera at T_map_cam."""
    return [
        make_observation(fid, T_map_fid.inverse() * T_map_cam, object_error)
        for fid, T_map_fid in landmark_poses.items()
    ]


@pytest.fixture
def random_transform():
    """Factory for reproducible random transforms."""
    rng = np.random.default_rng(42)

    def _make(scale: float = 1.0) -> Transform:
        rot = Rotation.from_rotvec(rng.normal(size=3) * 0.5)
        return Transform(rot, rng.normal(size=3) * scale)

    return _make
