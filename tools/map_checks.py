#!/usr/bin/env python3
"""
Sanity checks for a persisted fiducial map (anchor, link symmetry, connectivity).
"""
from __future__ import annotations

import argparse
import json
from collections import deque
from pathlib import Path
from typing import Dict, Set, Tuple

from fiducial_slam.mapping.landmark import Landmark
from fiducial_slam.mapping.map_io import parse_record


def _load_records(path: Path) -> Tuple[Dict[int, Landmark], int]:
    landmarks: Dict[int, Landmark] = {}
    malformed = 0
    with path.open("r", encoding="utf-8", errors="replace") as f:
        for line in f:
            if not line.strip():
                continue
            landmark = parse_record(line)
            if landmark is None:
                malformed += 1
                continue
            landmarks[landmark.fid] = landmark
    return landmarks, malformed


def _reachable(landmarks: Dict[int, Landmark], start: int) -> Set[int]:
    seen = {start}
    queue = deque([start])
    while queue:
        fid = queue.popleft()
        for other in landmarks[fid].links:
            if other in landmarks and other not in seen:
                seen.add(other)
                queue.append(other)
    return seen


def check_map(map_file: Path, require_connected: bool = True) -> Tuple[bool, dict]:
    result = {"map_file": str(map_file)}

    if not map_file.is_file():
        result["status"] = "fail"
        result["reason"] = "missing_file"
        return False, result

    landmarks, malformed = _load_records(map_file)
    anchors = sorted(fid for fid, lm in landmarks.items() if lm.is_anchor)
    asymmetric = sorted(
        [fid, other]
        for fid, lm in landmarks.items()
        for other in lm.links
        if other in landmarks and fid not in landmarks[other].links
    )
    dangling = sorted(
        [fid, other]
        for fid, lm in landmarks.items()
        for other in lm.links
        if other not in landmarks
    )

    result.update({
        "fiducials": len(landmarks),
        "malformed_records": malformed,
        "anchors": anchors,
        "asymmetric_links": asymmetric,
        "dangling_links": dangling,
        "max_variance": max((lm.variance for lm in landmarks.values()), default=None),
    })

    if len(anchors) != 1:
        result["status"] = "fail"
        result["reason"] = "no_anchor" if not anchors else "multiple_anchors"
        return False, result

    unreachable = sorted(set(landmarks) - _reachable(landmarks, anchors[0]))
    result["unreachable"] = unreachable

    if asymmetric:
        result["status"] = "fail"
        result["reason"] = "asymmetric_links"
        return False, result

    if require_connected and unreachable:
        result["status"] = "fail"
        result["reason"] = "disconnected"
        return False, result

    result["status"] = "pass"
    return True, result


def main() -> int:
    ap = argparse.ArgumentParser(description="Check a persisted fiducial map for consistency")
    ap.add_argument("map_file", help="Map file (id x y z roll pitch yaw variance num_obs [links])")
    ap.add_argument("--allow-disconnected", action="store_true",
                    help="Do not fail on fiducials unreachable from the anchor")
    ap.add_argument("--out", required=False, help="Output JSON report path")
    args = ap.parse_args()

    ok, report = check_map(Path(args.map_file), require_connected=not args.allow_disconnected)

    if args.out:
        out_path = Path(args.out)
        out_path.write_text(json.dumps(report, indent=2, sort_keys=True), encoding="utf-8")

    print(json.dumps(report, indent=2, sort_keys=True))
    return 0 if ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
