"""
Per-frame diagnostic report.

Every call to FiducialMap.update produces one FrameReport describing what the
frame did to the map: which landmarks were created or fused, which sources
were unknown, whether an observer pose came out of it, and whether the map
was saved. Reports are published as JSON for offline audit.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class FrameReport:
    """
    Audit record for one processed frame.

    Attributes:
        frame: Frame counter after the update
        stamp: Detection timestamp (seconds) supplied with the batch
        phase: Auto-init phase name after the update
        n_observations: Observations in the batch
        n_landmarks: Landmarks in the map after the update
        created: Landmark ids created this frame
        fused: Landmark ids that received a fused estimate this frame
        skipped_unknown: Source landmark ids that were not in the map
        pose_estimated: True if an observer pose was emitted
        pose_variance: Variance of the emitted observer pose
        saved: None if no save was triggered, else the save outcome
        notes: Human-readable explanation
        timestamp: Wall-clock time the report was generated
    """
    frame: int
    stamp: float
    phase: str
    n_observations: int = 0
    n_landmarks: int = 0
    created: list[int] = field(default_factory=list)
    fused: list[int] = field(default_factory=list)
    skipped_unknown: list[int] = field(default_factory=list)
    pose_estimated: bool = False
    pose_variance: Optional[float] = None
    saved: Optional[bool] = None
    notes: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def validate(self) -> None:
        """
        Validate internal consistency.

        Raises ValueError if validation fails.
        """
        if self.frame < 0 or self.n_observations < 0 or self.n_landmarks < 0:
            raise ValueError("Frame report counts must be non-negative.")

        if self.pose_estimated and self.pose_variance is None:
            raise ValueError("Estimated pose must carry a variance.")
        if not self.pose_estimated and self.pose_variance is not None:
            raise ValueError("Pose variance given without an estimated pose.")

        if self.created and self.saved is None:
            raise ValueError("Created landmarks must trigger a save.")

    def to_dict(self) -> dict:
        return {
            "frame": self.frame,
            "stamp": self.stamp,
            "phase": self.phase,
            "n_observations": self.n_observations,
            "n_landmarks": self.n_landmarks,
            "created": list(self.created),
            "fused": list(self.fused),
            "skipped_unknown": list(self.skipped_unknown),
            "pose_estimated": self.pose_estimated,
            "pose_variance": self.pose_variance,
            "saved": self.saved,
            "notes": self.notes,
            "timestamp": self.timestamp,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)
