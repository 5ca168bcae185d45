"""Integration tests for the run_cluster_map command line entry point."""

import json

import pytest

import run_cluster_map


@pytest.fixture
def memories_file(tmp_path):
    path = tmp_path / "memories.jsonl"
    rows = [
        {"id": "p1", "lat": 40.0000, "lng": -74.0000, "imageUrl": "a.jpg"},
        {"id": "p2", "lat": 40.0001, "lng": -74.0001},
        {"id": "p3", "lat": 40.5000, "lng": -74.2000},
        {"id": "bad", "lat": "nan", "lng": 0.0},
    ]
    path.write_text("\n".join(json.dumps(r) for r in rows) + "\n", encoding="utf-8")
    return path


def test_exports_clusters(tmp_path, memories_file, capsys):
    out = tmp_path / "out"
    run_cluster_map.main(["--input", str(memories_file), "--out", str(out), "--zoom", "12"])

    clusters = json.loads((out / "clusters.json").read_text(encoding="utf-8"))
    assert [c["count"] for c in clusters] == [2, 1]
    assert clusters[0]["representative"]["id"] == "p2"

    geojson = json.loads((out / "clusters.geojson").read_text(encoding="utf-8"))
    assert geojson["type"] == "FeatureCollection"
    assert len(geojson["features"]) == 2

    printed = capsys.readouterr().out
    assert "[INFO] Loaded 3 memories" in printed
    assert "2 markers (1 grouped)" in printed


def test_render_snapshot(tmp_path, memories_file):
    out = tmp_path / "out"
    run_cluster_map.main([
        "--input", str(memories_file), "--out", str(out),
        "--zoom", "12", "--render", "--width", "400", "--height", "300",
        "--center", "40.0,-74.0",
    ])
    assert (out / "markers.png").stat().st_size > 0
    layout = json.loads((out / "overlays.json").read_text(encoding="utf-8"))
    assert [row["kind"] for row in layout] == ["pin", "pin", "badge"]
    assert layout[-1]["text"] == "+1"


def test_strict_mode_fails_on_bad_row(tmp_path, memories_file, capsys):
    with pytest.raises(SystemExit) as exc:
        run_cluster_map.main(["--input", str(memories_file), "--out", str(tmp_path / "o"), "--strict"])
    assert exc.value.code == 1
    assert "[ERROR] Failed to load memories" in capsys.readouterr().out


def test_missing_input(tmp_path):
    with pytest.raises(SystemExit) as exc:
        run_cluster_map.main(["--input", str(tmp_path / "none.jsonl"), "--out", str(tmp_path / "o")])
    assert exc.value.code == 1
