"""
Tests for variance-weighted transform fusion.
"""

import math

import numpy as np
import pytest

from fiducial_slam import constants
from fiducial_slam.common.geometry import Transform
from fiducial_slam.mapping.fusion import blend, fuse_variance

VARIANCES = [1e-7, 1e-4, 0.01, 0.5, 1.0, 37.0]


class TestFuseVariance:

    @pytest.mark.parametrize("a", VARIANCES)
    @pytest.mark.parametrize("b", VARIANCES)
    def test_commutative_bounded_floored(self, a, b):
        v = fuse_variance(a, b)
        assert v == fuse_variance(b, a)
        assert v >= constants.VARIANCE_FLOOR
        assert v <= max(min(a, b), constants.VARIANCE_FLOOR)

    def test_harmonic_mean(self):
        assert fuse_variance(0.5, 0.5) == pytest.approx(0.25)
        assert fuse_variance(1.0, 3.0) == pytest.approx(0.75)

    def test_floor(self):
        assert fuse_variance(1e-9, 1e-9) == constants.VARIANCE_FLOOR

    def test_zero_operand_returns_floor(self):
        assert fuse_variance(0.0, 0.3) == constants.VARIANCE_FLOOR
        assert fuse_variance(0.3, 0.0) == constants.VARIANCE_FLOOR


class TestBlend:

    def test_identical_inputs(self, random_transform):
        T = random_transform()
        assert blend(T, 0.3, T, 0.3).almost_equal(T)

    def test_zero_variance_partner_dominates(self, random_transform):
        t1 = random_transform()
        t2 = random_transform()
        assert blend(t1, 0.7, t2, 0.0) is t2
        assert blend(t1, 0.0, t2, 0.7) is t1

    def test_equal_variance_is_midpoint(self):
        t1 = Transform.from_rpy((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
        t2 = Transform.from_rpy((0.0, 0.0, math.pi / 2), (2.0, 4.0, -2.0))
        out = blend(t1, 0.2, t2, 0.2)
        assert np.allclose(out.translation, [1.0, 2.0, -1.0])
        assert out.rpy()[2] == pytest.approx(math.pi / 4)

    def test_weights_favor_lower_variance(self):
        t1 = Transform.from_rpy((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
        t2 = Transform.from_rpy((0.0, 0.0, 1.0), (1.01, 0.0, 0.0))
        out = blend(t1, 0.01, t2, 1.0)
        # (v1 * t2 + v2 * t1) / (v1 + v2)
        assert np.allclose(out.translation, [0.01, 0.0, 0.0])
        assert out.rpy()[2] == pytest.approx(0.01 / 1.01)

    def test_result_rotation_is_unit(self, random_transform):
        out = blend(random_transform(), 0.1, random_transform(), 0.4)
        assert np.linalg.norm(out.rotation.as_quat()) == pytest.approx(1.0)
