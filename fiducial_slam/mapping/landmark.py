"""
Landmark (fiducial) entity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Set

from fiducial_slam import constants
from fiducial_slam.common.geometry import Transform
from fiducial_slam.mapping.fusion import blend, fuse_variance


@dataclass(eq=False)
class Landmark:
    """
    A fiducial in the map.

    Attributes:
        fid: Fiducial id
        pose: Pose of the fiducial in the map frame
        variance: Confidence proxy; 0 marks the pinned anchor
        num_obs: Number of fused observations
        last_published: Wall-clock time of the last visual refresh (0 = never)
        links: Ids of fiducials observed together with this one
    """
    fid: int
    pose: Transform
    variance: float
    num_obs: int = 0
    last_published: float = 0.0
    links: Set[int] = field(default_factory=set)

    def __post_init__(self):
        if self.variance < 0.0:
            raise ValueError(f"Landmark {self.fid} variance must be >= 0, got {self.variance}")

    @property
    def is_anchor(self) -> bool:
        return self.variance == constants.ANCHOR_VARIANCE

    def update(self, new_pose: Transform, new_variance: float) -> bool:
        """
        Fuse a new pose estimate into this landmark.

        Returns False (and changes nothing) if the landmark is pinned.
        """
        if self.is_anchor:
            return False
        self.pose = blend(self.pose, self.variance, new_pose, new_variance)
        self.variance = fuse_variance(self.variance, new_variance)
        self.num_obs += 1
        return True

    def pin(self) -> None:
        """Make this landmark the immutable anchor."""
        self.variance = constants.ANCHOR_VARIANCE

    def link(self, other_fid: int) -> None:
        if other_fid != self.fid:
            self.links.add(int(other_fid))

    def refresh_due(self, now: float, period: float) -> bool:
        """True if the last visual refresh is older than period seconds."""
        return (now - self.last_published) > period
