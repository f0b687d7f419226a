from pathlib import Path

from tools.map_checks import check_map


def _write_map(path: Path, lines):
    with path.open("w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")


def test_map_check_pass(tmp_path: Path):
    path = tmp_path / "map.txt"
    _write_map(path, [
        "1 0 0 0 0 0 0 0 5 2",
        "2 1 0 0 0 0 90 0.01 7 1 3",
        "3 2 0 0 0 0 90 0.02 3 2",
    ])
    ok, report = check_map(path)
    assert ok
    assert report["status"] == "pass"
    assert report["anchors"] == [1]
    assert report["unreachable"] == []


def test_map_check_missing_anchor(tmp_path: Path):
    path = tmp_path / "map.txt"
    _write_map(path, ["1 0 0 0 0 0 0 0.5 5"])
    ok, report = check_map(path)
    assert not ok
    assert report["reason"] == "no_anchor"


def test_map_check_disconnected(tmp_path: Path):
    path = tmp_path / "map.txt"
    _write_map(path, [
        "1 0 0 0 0 0 0 0 5",
        "2 1 0 0 0 0 0 0.01 7",
        "garbage line",
    ])
    ok, report = check_map(path)
    assert not ok
    assert report["reason"] == "disconnected"
    assert report["unreachable"] == [2]
    assert report["malformed_records"] == 1

    ok, _ = check_map(path, require_connected=False)
    assert ok


def test_map_check_undecodable_line_is_malformed(tmp_path: Path):
    path = tmp_path / "map.txt"
    path.write_bytes(b"1 0 0 0 0 0 0 0 0 2\n\xff\xfe garbage\n2 1 0 0 0 0 0 0.1 0 1\n")
    ok, report = check_map(path)
    assert ok
    assert report["fiducials"] == 2
    assert report["malformed_records"] == 1


def test_map_check_asymmetric_links(tmp_path: Path):
    path = tmp_path / "map.txt"
    _write_map(path, [
        "1 0 0 0 0 0 0 0 5 2",
        "2 1 0 0 0 0 0 0.01 7",
    ])
    ok, report = check_map(path)
    assert not ok
    assert report["reason"] == "asymmetric_links"
    assert report["asymmetric_links"] == [[1, 2]]


def test_map_check_missing_file(tmp_path: Path):
    ok, report = check_map(tmp_path / "nope.txt")
    assert not ok
    assert report["reason"] == "missing_file"
