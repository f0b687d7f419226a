"""
Landmark map persistence.

One record per line, whitespace separated:

    id x y z roll_deg pitch_deg yaw_deg variance num_obs [link_id ...]

Orientation is stored in degrees. Trailing tokens are ids of linked
landmarks. Lines that do not parse are skipped; a missing file loads as an
empty map. A save always rewrites the whole file.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from fiducial_slam import constants
from fiducial_slam.common.geometry import Transform
from fiducial_slam.mapping.landmark import Landmark

_LOGGER = logging.getLogger(__name__)


def format_record(landmark: Landmark) -> str:
    """Serialize one landmark to a map file line (without newline)."""
    decimals = constants.MAP_FLOAT_DECIMALS
    x, y, z = landmark.pose.translation
    roll, pitch, yaw = landmark.pose.rpy()
    floats = (x, y, z, math.degrees(roll), math.degrees(pitch), math.degrees(yaw), landmark.variance)
    fields = [str(landmark.fid)]
    fields.extend(f"{float(v):.{decimals}f}" for v in floats)
    fields.append(str(landmark.num_obs))
    fields.extend(str(fid) for fid in sorted(landmark.links))
    return " ".join(fields)


def parse_record(line: str) -> Optional[Landmark]:
    """
    Parse one map file line.

    Returns None if the line does not have the expected shape.
    """
    tokens = line.split()
    if len(tokens) < constants.MAP_RECORD_FIELDS:
        return None
    try:
        fid = int(tokens[0])
        x, y, z, roll, pitch, yaw, variance = (float(tok) for tok in tokens[1:8])
        num_obs = int(tokens[8])
        links = {int(tok) for tok in tokens[constants.MAP_RECORD_FIELDS:]}
    except ValueError:
        return None
    if variance < 0.0 or num_obs < 0:
        return None
    if not all(math.isfinite(v) for v in (x, y, z, roll, pitch, yaw, variance)):
        return None

    pose = Transform.from_rpy(
        (math.radians(roll), math.radians(pitch), math.radians(yaw)),
        (x, y, z),
    )
    landmark = Landmark(fid=fid, pose=pose, variance=variance, num_obs=num_obs)
    for link in links:
        landmark.link(link)
    return landmark


def read_landmarks(path: str | Path, logger=None) -> Tuple[Dict[int, Landmark], bool]:
    """
    Load landmarks from a map file.

    Returns the landmarks and whether the file could be read. A missing or
    unreadable file yields an empty mapping. Malformed lines, including lines
    that are not valid UTF-8, are skipped with a warning.
    """
    logger = logger or _LOGGER
    path = Path(path)
    landmarks: Dict[int, Landmark] = {}

    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            lines = f.readlines()
    except OSError as exc:
        logger.warning(f"Could not open {path} for read ({exc}); starting with an empty map")
        return landmarks, False

    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        landmark = parse_record(line)
        if landmark is None:
            logger.warning(f"Skipping malformed map record {path}:{lineno}: {line.strip()!r}")
            continue
        landmarks[landmark.fid] = landmark

    logger.info(f"Loaded {len(landmarks)} fiducials from {path}")
    return landmarks, True


def load_landmarks(path: str | Path, logger=None) -> Dict[int, Landmark]:
    """Landmarks from a map file; empty if the file cannot be read."""
    landmarks, _ = read_landmarks(path, logger=logger)
    return landmarks


def save_landmarks(path: str | Path, landmarks: Mapping[int, Landmark]) -> None:
    """
    Rewrite the map file from the given landmarks, sorted by id.

    Raises:
        OSError: If the file (or its directory) cannot be written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    lines: List[str] = [format_record(landmarks[fid]) for fid in sorted(landmarks)]
    with open(path, "w") as f:
        for line in lines:
            f.write(line + "\n")
