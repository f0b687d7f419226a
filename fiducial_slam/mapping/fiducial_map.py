"""
Fiducial landmark map.

Per frame, FiducialMap.update either bootstraps the map origin
(auto-initialization) or, once a map exists:

1. Mutual fusion: every ordered pair of co-observed fiducials (o1, o2) with
   o1 in the map yields an estimate of o2's pose; o2 is created or fused.
2. Pose estimation: every observed fiducial in the map yields an estimate of
   the observer pose; the estimates are folded into one.

Auto-initialization phases:

    NO_ANCHOR --first non-empty frame--> PROVISIONAL(origin)
    PROVISIONAL(origin) --auto_init_frames elapsed--> ANCHORED(origin)

While PROVISIONAL the origin landmark is refined from its own re-observations;
on ANCHORED its variance is pinned to 0 and it never changes again.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence, Set, Tuple

from fiducial_slam import constants
from fiducial_slam.common.frame_report import FrameReport
from fiducial_slam.common.geometry import Transform
from fiducial_slam.mapping import map_io
from fiducial_slam.mapping.fusion import blend, fuse_variance
from fiducial_slam.mapping.landmark import Landmark
from fiducial_slam.mapping.observation import Observation
from fiducial_slam.mapping.publisher import MapPublisher, NullMapPublisher

_LOGGER = logging.getLogger(__name__)


class InitPhase(Enum):
    NO_ANCHOR = "no_anchor"
    PROVISIONAL = "provisional"
    ANCHORED = "anchored"


@dataclass(frozen=True)
class AutoInitState:
    """Auto-initialization phase plus the origin it refers to."""
    phase: InitPhase = InitPhase.NO_ANCHOR
    origin_fid: Optional[int] = None
    start_frame: int = 0

    @classmethod
    def provisional(cls, origin_fid: int, start_frame: int) -> "AutoInitState":
        return cls(InitPhase.PROVISIONAL, origin_fid, start_frame)

    @classmethod
    def anchored(cls, origin_fid: int) -> "AutoInitState":
        return cls(InitPhase.ANCHORED, origin_fid)


def find_closest_observation(observations: Sequence[Observation]) -> Optional[Observation]:
    """Observation with the smallest camera-to-fiducial distance, or None."""
    if not observations:
        return None
    return min(observations, key=lambda o: o.camera_distance_squared())


class FiducialMap:
    """
    Landmark map aggregate.

    Not thread safe: update() must be called from a single thread, once per
    detection batch.
    """

    def __init__(
        self,
        map_file: str | Path,
        publisher: Optional[MapPublisher] = None,
        logger=None,
        auto_init_frames: int = constants.AUTO_INIT_FRAMES_DEFAULT,
        refresh_period: float = constants.MARKER_REFRESH_PERIOD_DEFAULT,
        publish_rays: bool = False,
        clock: Callable[[], float] = time.time,
    ):
        self.map_file = Path(map_file)
        self.publisher = publisher if publisher is not None else NullMapPublisher()
        self.logger = logger or _LOGGER
        self.auto_init_frames = int(auto_init_frames)
        self.refresh_period = float(refresh_period)
        self.publish_rays = bool(publish_rays)
        self.clock = clock

        self.landmarks: Dict[int, Landmark] = {}
        self.frame_num = 0
        self.init_state = AutoInitState()

        # Last emitted observer pose (not persisted)
        self.pose: Optional[Transform] = None
        self.pose_variance: Optional[float] = None

    # =========================================================================
    # State
    # =========================================================================

    @property
    def initializing(self) -> bool:
        return self.init_state.phase is InitPhase.PROVISIONAL

    @property
    def anchor_fid(self) -> Optional[int]:
        if self.init_state.phase is InitPhase.ANCHORED:
            return self.init_state.origin_fid
        return None

    def _state_from_landmarks(self) -> AutoInitState:
        anchors = sorted(fid for fid, lm in self.landmarks.items() if lm.is_anchor)
        if not anchors:
            return AutoInitState()
        if len(anchors) > 1:
            self.logger.warning(f"Map has {len(anchors)} pinned fiducials {anchors}; using {anchors[0]} as anchor")
        return AutoInitState.anchored(anchors[0])

    # =========================================================================
    # Persistence
    # =========================================================================

    def load(self, path: Optional[str | Path] = None) -> bool:
        """
        Replace the landmark set with the contents of a map file.

        Returns False if the file could not be read (the map is then empty).
        """
        path = Path(path) if path is not None else self.map_file
        self.landmarks, readable = map_io.read_landmarks(path, logger=self.logger)
        self.init_state = self._state_from_landmarks()
        return readable

    def save(self, path: Optional[str | Path] = None) -> bool:
        """
        Rewrite the map file from the current landmarks.

        Returns False on I/O failure; in-memory state is never affected.
        """
        path = Path(path) if path is not None else self.map_file
        try:
            map_io.save_landmarks(path, self.landmarks)
        except OSError as exc:
            self.logger.error(f"Could not save map to {path}: {exc}")
            return False
        self.logger.info(f"Saved map with {len(self.landmarks)} fiducials to {path}")
        return True

    # =========================================================================
    # Per-frame update
    # =========================================================================

    def update(self, observations: Sequence[Observation], stamp: float) -> FrameReport:
        """
        Process one detection batch.

        Args:
            observations: Detections from one camera frame
            stamp: Detection timestamp (seconds)

        Returns:
            FrameReport describing what changed
        """
        self.frame_num += 1
        self.logger.debug(
            f"Updating map with {len(observations)} observations. "
            f"Map has {len(self.landmarks)} fiducials"
        )

        report = FrameReport(
            frame=self.frame_num,
            stamp=float(stamp),
            phase=self.init_state.phase.value,
            n_observations=len(observations),
        )

        if self.initializing or not self.landmarks:
            self._auto_init(observations, report)
        else:
            self._update_map(observations, report)
            self._update_pose(observations, stamp, report)

        report.phase = self.init_state.phase.value
        report.n_landmarks = len(self.landmarks)
        self.publisher.publish_map(self.landmarks)
        self.publisher.publish_report(report)
        return report

    def _auto_init(self, observations: Sequence[Observation], report: FrameReport) -> None:
        """Bootstrap the map origin from the closest fiducial."""
        state = self.init_state

        if state.phase is InitPhase.NO_ANCHOR:
            closest = find_closest_observation(observations)
            if closest is None:
                self.logger.warning("Could not find a fiducial to initialize map from")
                report.notes = "no anchor candidate"
                return
            self.logger.info(f"Initializing map from fiducial {closest.fid} (frame {self.frame_num})")
            origin = Landmark(closest.fid, closest.T_fid_cam, closest.object_error)
            self.landmarks[closest.fid] = origin
            self.init_state = AutoInitState.provisional(closest.fid, self.frame_num)
            report.created.append(closest.fid)
            report.saved = self.save()
            self._refresh(origin, force=True)
        else:
            origin = self.landmarks[state.origin_fid]
            for o in observations:
                if o.fid == state.origin_fid:
                    origin.update(o.T_fid_cam, o.object_error)
                    report.fused.append(o.fid)
                    self._refresh(origin)
                    break

        state = self.init_state
        frames_elapsed = self.frame_num - state.start_frame + 1
        if frames_elapsed > self.auto_init_frames:
            origin = self.landmarks[state.origin_fid]
            origin.pin()
            self.init_state = AutoInitState.anchored(state.origin_fid)
            self.logger.info(f"Map initialized: fiducial {state.origin_fid} is the anchor")
            saved = self.save()
            report.saved = saved if report.saved is None else (report.saved and saved)
            self._refresh(origin, force=True)

    def _update_map(self, observations: Sequence[Observation], report: FrameReport) -> None:
        """Place and refine fiducials from pairs observed in the same frame."""
        touched: Set[int] = set()
        forced: Set[int] = set()
        unknown: Set[int] = set()

        for o1 in observations:
            for o2 in observations:
                if o1.fid == o2.fid:
                    continue

                source = self.landmarks.get(o1.fid)
                if source is None:
                    if o1.fid not in unknown:
                        unknown.add(o1.fid)
                        self.logger.debug(f"No map entry for fiducial {o1.fid}")
                    continue

                target = self.landmarks.get(o2.fid)
                if target is not None and target.is_anchor:
                    continue

                T_fid1_fid2 = o1.T_fid_cam * o2.T_cam_fid
                T_map_fid2 = source.pose * T_fid1_fid2
                variance = (
                    o1.object_error
                    + o2.object_error
                    + max(source.variance, constants.SOURCE_VARIANCE_FLOOR)
                )

                if target is None:
                    self.logger.info(f"New fiducial {o2.fid} from {o1.fid}")
                    target = Landmark(o2.fid, T_map_fid2, variance)
                    self.landmarks[o2.fid] = target
                    report.created.append(o2.fid)
                    forced.update((o1.fid, o2.fid))
                    saved = self.save()
                    report.saved = saved if report.saved is None else (report.saved and saved)
                else:
                    self.logger.debug(
                        f"Estimate of {o2.fid} from {o1.fid}: {T_map_fid2.translation}"
                    )
                    target.update(T_map_fid2, variance)
                    if o2.fid not in report.fused:
                        report.fused.append(o2.fid)

                source.link(o2.fid)
                target.link(o1.fid)
                touched.update((o1.fid, o2.fid))

        report.skipped_unknown = sorted(unknown)
        for fid in sorted(touched):
            self._refresh(self.landmarks[fid], force=fid in forced)

    def _update_pose(
        self, observations: Sequence[Observation], stamp: float, report: FrameReport
    ) -> Optional[Tuple[Transform, float]]:
        """Fuse per-fiducial observer pose estimates into one."""
        pose: Optional[Transform] = None
        variance = 0.0

        for o in observations:
            landmark = self.landmarks.get(o.fid)
            if landmark is None:
                continue

            p = landmark.pose * o.T_fid_cam
            v = landmark.variance + o.object_error
            self.logger.debug(f"Pose from {o.fid}: {p.translation} var {v:.6f}")
            if self.publish_rays:
                self.publisher.publish_ray(landmark.pose.translation, p.translation)

            if pose is None:
                pose, variance = p, v
            else:
                pose = blend(pose, variance, p, v)
                variance = fuse_variance(variance, v)

        if pose is None:
            return None

        self.pose = pose
        self.pose_variance = variance
        report.pose_estimated = True
        report.pose_variance = variance
        self.publisher.publish_pose(pose, variance, stamp)
        return pose, variance

    # =========================================================================
    # Visual refresh
    # =========================================================================

    def _refresh(self, landmark: Landmark, force: bool = False) -> bool:
        """Request a visual refresh, at most once per refresh_period unless forced."""
        now = self.clock()
        if not force and not landmark.refresh_due(now, self.refresh_period):
            return False
        landmark.last_published = now
        self.publisher.publish_landmark(landmark, self.landmarks)
        return True

    def publish_markers(self) -> int:
        """Refresh every landmark not refreshed recently; returns the count."""
        return sum(self._refresh(lm) for _, lm in sorted(self.landmarks.items()))
