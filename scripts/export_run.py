from pathlib import Path
import json
import pandas as pd
import matplotlib.pyplot as plt

from mapcolor.data.canada_map import CENTROIDS
from mapcolor.viz.frame_recorder import draw_coloring, layout_positions


def export_run(
    model,
    result,
    run_dir: Path,
    title: str,
    k: int,
):
    run_dir.mkdir(parents=True, exist_ok=True)

    labels_list = result.labels.tolist() if hasattr(result.labels, "tolist") else list(result.labels)
    if len(labels_list) != model.num_regions:
        raise ValueError(f"labels length ({len(labels_list)}) != regions ({model.num_regions})")

    # ---- Per-region table ----
    df = pd.DataFrame(
        {
            "region": [model.idx_to_region[i] for i in range(model.num_regions)],
            "color": [model.palette[int(c)] for c in labels_list],
            "cost": [int(c) for c in result.costs],
            "degree": [len(nbrs) for nbrs in model.adj_idx],
        }
    )
    df["conflicting_neighbors"] = [
        ",".join(model.idx_to_region[j] for j in model.adj_idx[i] if labels_list[j] == labels_list[i])
        for i in range(model.num_regions)
    ]
    df.to_csv(run_dir / "region_colors.csv", index=False)

    # ---- Color usage (sidebar) ----
    color_stats = (
        df.groupby("color")
        .agg(regions=("cost", "size"), conflicts=("cost", "sum"))
        .reset_index()
    )
    color_stats.to_csv(run_dir / "color_stats.csv", index=False)

    summary = {
        "title": title,
        "k": int(k),
        "total_conflicts": int(result.total),
        "steps": int(result.steps),
        "cost_trace": [int(c) for c in result.cost_trace],
        "colors": color_stats.to_dict(orient="records"),
    }
    (run_dir / "summary.json").write_text(json.dumps(summary, indent=2))

    # ---- PNG preview ----
    fig, ax = plt.subplots(figsize=(8, 6))
    pos = layout_positions(model, CENTROIDS)
    draw_coloring(ax, model, result.labels, pos, result.costs)
    ax.set_title(title)
    ax.axis("off")
    plt.tight_layout()
    fig.savefig(run_dir / "map.png", dpi=150)
    plt.close(fig)

    print(f"Exported run to: {run_dir}")
    print("   - region_colors.csv")
    print("   - color_stats.csv")
    print("   - summary.json")
