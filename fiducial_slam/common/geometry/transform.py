"""
Rigid transform value type.

A Transform is a rotation (scipy.spatial.transform.Rotation) plus a
translation in R^3. Composition follows the tf2 convention:

    (A * B).apply(p) == A.apply(B.apply(p))

Orientation can be exchanged as a ROS quaternion (x, y, z, w) or as
fixed-axis roll/pitch/yaw in radians (R = Rz(yaw) Ry(pitch) Rx(roll)).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np
from scipy.spatial.transform import Rotation, Slerp

# Fixed-axis x-y-z euler, matching tf2 Matrix3x3::getRPY/setRPY
_RPY_SEQUENCE = "xyz"


@dataclass(frozen=True, eq=False)
class Transform:
    """Immutable rigid transform (rotation, translation)."""

    rotation: Rotation
    translation: np.ndarray

    def __post_init__(self):
        t = np.asarray(self.translation, dtype=float).reshape(-1)
        if t.shape != (3,):
            raise ValueError(f"Expected 3D translation, got shape {t.shape}")
        object.__setattr__(self, "translation", t)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def identity(cls) -> "Transform":
        return cls(Rotation.identity(), np.zeros(3, dtype=float))

    @classmethod
    def from_quat(cls, quat: Sequence[float], translation: Sequence[float]) -> "Transform":
        """Create from a ROS quaternion (x, y, z, w); the quaternion is normalized."""
        return cls(Rotation.from_quat(np.asarray(quat, dtype=float)), translation)

    @classmethod
    def from_rpy(cls, rpy: Sequence[float], translation: Sequence[float]) -> "Transform":
        """Create from roll, pitch, yaw in radians."""
        return cls(Rotation.from_euler(_RPY_SEQUENCE, np.asarray(rpy, dtype=float)), translation)

    @classmethod
    def from_axis_angle(cls, axis: Sequence[float], angle: float) -> "Transform":
        """Pure rotation about a (not necessarily unit) axis."""
        axis = np.asarray(axis, dtype=float)
        axis = axis / np.linalg.norm(axis)
        return cls(Rotation.from_rotvec(axis * angle), np.zeros(3, dtype=float))

    # -------------------------------------------------------------------------
    # Group operations
    # -------------------------------------------------------------------------

    def __mul__(self, other: "Transform") -> "Transform":
        if not isinstance(other, Transform):
            return NotImplemented
        return Transform(
            self.rotation * other.rotation,
            self.rotation.apply(other.translation) + self.translation,
        )

    def inverse(self) -> "Transform":
        r_inv = self.rotation.inv()
        return Transform(r_inv, -r_inv.apply(self.translation))

    def apply(self, p: np.ndarray) -> np.ndarray:
        """Transform point(s), shape (3,) or (N, 3)."""
        return self.rotation.apply(np.asarray(p, dtype=float)) + self.translation

    # -------------------------------------------------------------------------
    # Conversions
    # -------------------------------------------------------------------------

    def quat(self) -> Tuple[float, float, float, float]:
        """Rotation as ROS quaternion (x, y, z, w)."""
        x, y, z, w = self.rotation.as_quat()
        return float(x), float(y), float(z), float(w)

    def rpy(self) -> Tuple[float, float, float]:
        """Rotation as roll, pitch, yaw in radians."""
        roll, pitch, yaw = self.rotation.as_euler(_RPY_SEQUENCE)
        return float(roll), float(pitch), float(yaw)

    def distance_squared(self) -> float:
        """Squared length of the translation."""
        return float(self.translation @ self.translation)

    def almost_equal(self, other: "Transform", atol: float = 1e-9) -> bool:
        """Translation within atol and rotation angle between the two within atol."""
        if not np.allclose(self.translation, other.translation, atol=atol):
            return False
        angle = (self.rotation.inv() * other.rotation).magnitude()
        return bool(angle <= atol)

    def __repr__(self) -> str:
        t = self.translation
        r, p, y = self.rpy()
        return (
            f"Transform(t=[{t[0]:.4f}, {t[1]:.4f}, {t[2]:.4f}], "
            f"rpy=[{r:.4f}, {p:.4f}, {y:.4f}])"
        )


def slerp(r1: Rotation, r2: Rotation, fraction: float) -> Rotation:
    """
    Spherical interpolation from r1 (fraction 0) to r2 (fraction 1).

    Takes the shortest arc; the result is a unit rotation.
    """
    key_rots = Rotation.concatenate([r1, r2])
    interp = Slerp([0.0, 1.0], key_rots)
    return interp([float(fraction)])[0]
