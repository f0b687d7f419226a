"""
Configuration tests: packaged YAML, pydantic validation and ROS parameter
bridging.
"""

import os
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from fiducial_slam import constants
from fiducial_slam.common.param_models import SlamParams
from fiducial_slam.config import (
    declare_slam_params,
    get_default_config_path,
    load_slam_config,
    merge_configs,
    validate_slam_params,
)


class _FakeLogger:
    def __init__(self):
        self.errors = []

    def error(self, msg):
        self.errors.append(msg)


class _FakeNode:
    """Just enough of rclpy.node.Node for parameter declaration."""

    def __init__(self, overrides=None):
        self.params = {}
        self.overrides = dict(overrides or {})
        self.logger = _FakeLogger()

    def has_parameter(self, name):
        return name in self.params

    def declare_parameter(self, name, value):
        self.params[name] = self.overrides.get(name, value)

    def get_parameter(self, name):
        return SimpleNamespace(value=self.params[name])

    def get_logger(self):
        return self.logger


def test_prod_config_matches_model(prod_config):
    assert set(prod_config) == set(SlamParams.model_fields)
    params = SlamParams(**prod_config)
    assert params.auto_init_frames == constants.AUTO_INIT_FRAMES_DEFAULT
    assert params.map_file == os.path.expanduser(constants.DEFAULT_MAP_FILE)


def test_default_config_path_is_packaged(prod_config_path):
    assert os.path.samefile(get_default_config_path(), prod_config_path)


def test_load_slam_config_with_overrides(prod_config_path):
    params = load_slam_config(prod_config_path, overrides={"auto_init_frames": 3, "publish_rays": True})
    assert params.auto_init_frames == 3
    assert params.publish_rays is True
    assert params.map_frame == "map"


def test_preset_overrides_base(tmp_path, prod_config_path):
    preset = tmp_path / "preset.yaml"
    preset.write_text(
        "/**:\n"
        "  ros__parameters:\n"
        "    map_file: /tmp/other_map.txt\n"
        "    marker_refresh_period_sec: 0.25\n"
    )
    params = load_slam_config(prod_config_path, preset_path=preset)
    assert params.map_file == "/tmp/other_map.txt"
    assert params.marker_refresh_period_sec == 0.25
    assert params.marker_size == constants.MARKER_SIZE_DEFAULT


def test_missing_config_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_slam_config(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    "overrides",
    [
        {"auto_init_frames": 0},
        {"marker_refresh_period_sec": 0.0},
        {"marker_size": -1.0},
        {"map_file": ""},
        {"unknown_param": 1},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValidationError):
        load_slam_config(overrides=overrides)


def test_paths_expand_home():
    params = SlamParams(map_file="~/maps/a.txt", trajectory_export_path="~/traj.tum")
    assert not params.map_file.startswith("~")
    assert params.map_file.endswith(os.path.join("maps", "a.txt"))
    assert not params.trajectory_export_path.startswith("~")
    assert params.initial_map_file == ""


def test_merge_configs_is_deep():
    merged = merge_configs({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}}, {})
    assert merged == {"a": {"x": 1, "y": 3}}


def test_declare_and_validate_node_params():
    node = _FakeNode(overrides={"auto_init_frames": 5})
    declare_slam_params(node)
    assert set(node.params) == set(SlamParams.model_fields)
    params = validate_slam_params(node)
    assert params.auto_init_frames == 5


def test_validate_node_params_logs_and_raises():
    node = _FakeNode(overrides={"marker_size": 0.0})
    declare_slam_params(node)
    with pytest.raises(ValidationError):
        validate_slam_params(node)
    assert node.logger.errors
