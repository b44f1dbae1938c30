from __future__ import annotations

import argparse
import sys
import yaml
from pathlib import Path
from datetime import datetime

from mapcolor.data.canada_map import CENTROIDS, build_map_model, load_map_model
from mapcolor.algos.hillclimber import HillclimbConfig, format_report, solve
from mapcolor.viz.frame_recorder import FrameRecorder, FrameMeta
from export_run import export_run

"""
Steepest-ascent hill-climbing coloring of the Canadian map with k colors.
Starts from the cyclic seed (region i gets color i mod k).

example usage from repo root:
python3 scripts/run_hillclimber.py 4
python3 scripts/run_hillclimber.py 3 --out_dir outputs --frame_every 1
"""

USAGE_MSG = "Provide the number (1 to 4) of colors (k) as a command-line argument."
K_MIN, K_MAX = 1, 4


def range_msg(k_max: int) -> str:
    return f"k should be between {K_MIN} and {k_max}."


RANGE_MSG = range_msg(K_MAX)


def parse_k(raw) -> int:
    """Integer k from CLI or config text; ValueError names the bad value."""
    if isinstance(raw, bool):
        raise ValueError(f"invalid number: {raw!r}")
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ValueError(f"invalid number: {raw!r}") from None


def _load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    with path.open("r") as f:
        return yaml.safe_load(f) or {}


def _resolve_model(cfg: dict):
    data = cfg.get("data", {}) or {}
    map_file = data.get("map_file")
    if map_file:
        return load_map_model(Path(map_file).expanduser())
    return build_map_model()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Hill-climbing k-coloring of the map of Canada.")
    ap.add_argument("k", nargs="?", default=None, help="Number of colors (1 to 4).")
    ap.add_argument("--config", default="config.yaml")
    ap.add_argument("--out_dir", default=None, help="Export the run (tables, map.png) under this folder.")
    ap.add_argument("--frame_every", type=int, default=0, help="Record a flipbook frame every N steps (needs --out_dir).")
    ap.add_argument("--fps", type=int, default=2, help="FPS metadata for flipbook playback.")
    return ap


def run_hillclimb(cfg: dict, k: int, out_dir: str | None = None, frame_every: int = 0, fps: int = 2) -> int:
    model = _resolve_model(cfg)

    k_max = min(K_MAX, len(model.palette))
    if k < K_MIN or k > k_max:
        print(range_msg(k_max))
        return 0

    hc = ((cfg.get("algos", {}) or {}).get("hillclimb", {}) or {})
    max_steps = hc.get("max_steps")
    hc_cfg = HillclimbConfig(
        k=k,
        max_steps=int(max_steps) if max_steps is not None else None,
        verbose=bool(hc.get("verbose", False)),
    )

    run_dir = None
    on_frame = None
    rec = None
    if out_dir:
        run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        run_dir = Path(out_dir).expanduser().resolve() / f"hillclimb_k{k}_{run_id}"
        run_dir.mkdir(parents=True, exist_ok=True)

        if frame_every > 0:
            rec = FrameRecorder(model=model, run_dir=run_dir, title=f"Hill-climb (k={k})", coords=CENTROIDS)

            def on_frame(step, labels, stats):
                rec.record(
                    frame_no=len(rec.frames),
                    labels=labels,
                    meta=FrameMeta(step=int(step), conflicts=int(stats["conflicts"])),
                    costs=stats.get("costs"),
                )

    result = solve(model, hc_cfg, on_frame=on_frame, frame_every=max(frame_every, 1))

    print(format_report(model, result.labels, result.costs))

    if run_dir is not None:
        if rec is not None:
            rec.write_manifest(fps=fps, frame_every=frame_every)
        export_run(model=model, result=result, run_dir=run_dir, title=f"Hill-climb k={k}", k=k)

    return 0


def main(argv=None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.k is None:
        print(USAGE_MSG)
        return 0

    try:
        k = parse_k(args.k)
    except ValueError as e:
        ap.error(str(e))

    cfg = _load_config(Path(args.config))
    return run_hillclimb(cfg, k, out_dir=args.out_dir, frame_every=args.frame_every, fps=args.fps)


if __name__ == "__main__":
    sys.exit(main())
