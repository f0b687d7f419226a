"""
Tests for the landmark entity.
"""

import math

import numpy as np
import pytest

from fiducial_slam.common.geometry import Transform
from fiducial_slam.mapping.landmark import Landmark


def test_update_blends_and_counts():
    t1 = Transform.from_rpy((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    t2 = Transform.from_rpy((0.0, 0.0, math.pi / 2), (1.0, 1.0, 0.0))
    lm = Landmark(1, t1, 0.5)
    assert lm.update(t2, 0.5)
    assert np.allclose(lm.pose.translation, [0.5, 0.5, 0.0])
    assert lm.pose.rpy()[2] == pytest.approx(math.pi / 4)
    assert lm.variance == pytest.approx(0.25)
    assert lm.num_obs == 1


def test_anchor_is_never_mutated(random_transform):
    pose = random_transform()
    lm = Landmark(1, pose, 0.0)
    assert lm.is_anchor
    assert not lm.update(random_transform(), 0.1)
    assert lm.pose is pose
    assert lm.variance == 0.0
    assert lm.num_obs == 0


def test_pin():
    lm = Landmark(2, Transform.identity(), 0.3)
    assert not lm.is_anchor
    lm.pin()
    assert lm.is_anchor


def test_negative_variance_rejected():
    with pytest.raises(ValueError):
        Landmark(1, Transform.identity(), -0.1)


def test_links_are_deduplicated_and_skip_self():
    lm = Landmark(1, Transform.identity(), 0.3)
    lm.link(2)
    lm.link(2)
    lm.link(1)
    lm.link(5)
    assert lm.links == {2, 5}


def test_refresh_due():
    lm = Landmark(1, Transform.identity(), 0.3)
    assert lm.refresh_due(now=100.0, period=1.0)
    lm.last_published = 100.0
    assert not lm.refresh_due(now=100.5, period=1.0)
    assert not lm.refresh_due(now=101.0, period=1.0)
    assert lm.refresh_due(now=101.2, period=1.0)
