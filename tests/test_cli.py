from __future__ import annotations

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for p in (ROOT / "src", ROOT / "scripts"):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

import pytest

import run
import run_hillclimber
from run_hillclimber import RANGE_MSG, USAGE_MSG, main


@pytest.fixture
def no_config(tmp_path: Path) -> list[str]:
    return ["--config", str(tmp_path / "missing.yaml")]


def test_missing_k_prints_usage(capsys, no_config):
    assert main(no_config) == 0
    assert capsys.readouterr().out.strip() == USAGE_MSG


@pytest.mark.parametrize("raw", ["four", "2.5", ""])
def test_non_integer_k_is_an_error(capsys, no_config, raw):
    with pytest.raises(SystemExit) as exc:
        main([raw, *no_config])
    assert exc.value.code != 0
    assert "invalid number" in capsys.readouterr().err


@pytest.mark.parametrize("k", ["0", "5", "-3"])
def test_out_of_range_k(capsys, no_config, k, monkeypatch):
    def boom(*a, **kw):
        raise AssertionError("search must not run")

    monkeypatch.setattr(run_hillclimber, "solve", boom)
    assert main([k, *no_config]) == 0
    assert capsys.readouterr().out.strip() == RANGE_MSG


def test_k4_report(capsys, no_config):
    assert main(["4", *no_config]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "Final Results of the Map with Costs"
    assert len(lines) == 15
    assert [l.split(":")[0] for l in lines[1:14]] == [
        "BC", "AB", "SK", "MB", "ON", "QC", "NB", "NS", "PEI", "NL", "NU", "NT", "YT",
    ]
    assert lines[-1] == "Total conflicts: 0"


def test_k1_report(capsys, no_config):
    assert main(["1", *no_config]) == 0
    out = capsys.readouterr().out
    assert "BC: b (Cost: 1)" in out
    assert out.strip().endswith("Total conflicts: 13")


def test_config_map_file(tmp_path: Path, capsys):
    map_file = tmp_path / "pair.yaml"
    map_file.write_text("regions: [A, B]\nadjacency: {A: [B], B: [A]}\n")
    cfg = tmp_path / "config.yaml"
    cfg.write_text(f"data:\n  map_file: {map_file}\n")
    assert main(["2", "--config", str(cfg)]) == 0
    out = capsys.readouterr().out.strip().splitlines()
    assert out == [
        "Final Results of the Map with Costs",
        "A: b (Cost: 0)",
        "B: r (Cost: 0)",
        "Total conflicts: 0",
    ]


def test_export_and_flipbook(tmp_path: Path, capsys, no_config):
    out_dir = tmp_path / "outputs"
    assert main(["3", *no_config, "--out_dir", str(out_dir), "--frame_every", "1"]) == 0
    (run_dir,) = list(out_dir.iterdir())

    summary = json.loads((run_dir / "summary.json").read_text())
    assert summary["k"] == 3
    assert summary["cost_trace"][-1] == summary["total_conflicts"]
    assert sum(c["regions"] for c in summary["colors"]) == 13

    rows = (run_dir / "region_colors.csv").read_text().strip().splitlines()
    assert rows[0] == "region,color,cost,degree,conflicting_neighbors"
    assert len(rows) == 14
    assert (run_dir / "map.png").exists()

    manifest = json.loads((run_dir / "flipbook" / "manifest.json").read_text())
    assert len(manifest["frames"]) == len(summary["cost_trace"])
    assert [f["conflicts"] for f in manifest["frames"]] == summary["cost_trace"]
    for f in manifest["frames"]:
        assert (run_dir / "flipbook" / "frames" / f["frame"]).exists()


def test_run_dispatches_hillclimb(tmp_path: Path, capsys):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("run:\n  algo: hillclimb\n  k: 4\n")
    assert run.main(["--config", str(cfg)]) == 0
    assert "Total conflicts: 0" in capsys.readouterr().out


def test_run_rejects_unknown_algo(tmp_path: Path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("run:\n  algo: annealing\n")
    with pytest.raises(ValueError, match="Unknown algo"):
        run.main(["--config", str(cfg)])


@pytest.mark.parametrize("k", [0, 5])
def test_run_dispatch_out_of_range_k(tmp_path: Path, capsys, monkeypatch, k):
    def boom(*a, **kw):
        raise AssertionError("search must not run")

    monkeypatch.setattr(run_hillclimber, "solve", boom)
    cfg = tmp_path / "config.yaml"
    cfg.write_text(f"run:\n  algo: hillclimb\n  k: {k}\n")
    assert run.main(["--config", str(cfg)]) == 0
    assert capsys.readouterr().out.strip() == RANGE_MSG


def test_run_dispatch_non_integer_k(tmp_path: Path, capsys):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("run:\n  algo: hillclimb\n  k: four\n")
    with pytest.raises(SystemExit) as exc:
        run.main(["--config", str(cfg)])
    assert exc.value.code != 0
    assert "invalid number: 'four'" in capsys.readouterr().err


def test_k_above_map_palette_size(tmp_path: Path, capsys):
    map_file = tmp_path / "two_colors.yaml"
    map_file.write_text("regions: [A, B]\nadjacency: {A: [B], B: [A]}\npalette: [x, y]\n")
    cfg = tmp_path / "config.yaml"
    cfg.write_text(f"data:\n  map_file: {map_file}\n")
    assert main(["3", "--config", str(cfg)]) == 0
    assert capsys.readouterr().out.strip() == "k should be between 1 and 2."


@pytest.mark.parametrize("raw, expected", [("3", 3), (" 2 ", 2), (4, 4)])
def test_parse_k_accepts_integers(raw, expected):
    assert run_hillclimber.parse_k(raw) == expected


@pytest.mark.parametrize("raw", ["x", "1.5", 2.5, True, None])
def test_parse_k_rejects_non_integers(raw):
    with pytest.raises(ValueError, match="invalid number"):
        run_hillclimber.parse_k(raw)
