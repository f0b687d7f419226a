import json

import pytest

from fiducial_slam.common.frame_report import FrameReport


def test_default_report_is_valid():
    report = FrameReport(frame=1, stamp=0.5, phase="no_anchor")
    report.validate()
    assert report.saved is None
    assert report.created == []


def test_to_json_round_trips_fields():
    report = FrameReport(
        frame=4,
        stamp=12.5,
        phase="anchored",
        n_observations=2,
        n_landmarks=3,
        created=[9],
        fused=[9, 2],
        pose_estimated=True,
        pose_variance=0.02,
        saved=True,
    )
    report.validate()
    data = json.loads(report.to_json())
    assert data["created"] == [9]
    assert data["fused"] == [9, 2]
    assert data["pose_variance"] == 0.02
    assert data["saved"] is True
    assert set(data) == set(report.to_dict())


@pytest.mark.parametrize(
    "kwargs",
    [
        {"n_observations": -1},
        {"pose_estimated": True},
        {"pose_variance": 0.1},
        {"created": [3]},
    ],
)
def test_inconsistent_report_rejected(kwargs):
    report = FrameReport(frame=1, stamp=0.0, phase="anchored", **kwargs)
    with pytest.raises(ValueError):
        report.validate()


def test_failed_save_is_a_valid_outcome():
    report = FrameReport(frame=1, stamp=0.0, phase="anchored", created=[3], saved=False)
    report.validate()
