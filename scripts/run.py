from __future__ import annotations
import argparse
from pathlib import Path
import yaml

def load_config(path: Path) -> dict:
    with path.open("r") as f:
        return yaml.safe_load(f) or {}

def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", type=str, default="config.yaml")
    args = ap.parse_args(argv)

    cfg = load_config(Path(args.config))

    run = cfg.get("run", {}) or {}
    algo = run.get("algo")
    if algo == "hillclimb":
        from run_hillclimber import parse_k, run_hillclimb
        try:
            k = parse_k(run.get("k", 4))
        except ValueError as e:
            ap.error(f"run.k: {e}")
        return run_hillclimb(
            cfg,
            k=k,
            out_dir=run.get("out_dir"),
            frame_every=int(run.get("frame_every", 0)),
        )
    raise ValueError(f"Unknown algo: {algo}")

if __name__ == "__main__":
    main()
