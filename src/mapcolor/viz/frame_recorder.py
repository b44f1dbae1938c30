from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt

from mapcolor.data.canada_map import MapModel


DRAW_COLORS = {"b": "tab:blue", "r": "tab:red", "o": "tab:orange", "j": "gold"}


@dataclass
class FrameMeta:
    step: int
    conflicts: int
    note: str = ""


def layout_positions(model: MapModel, coords: Optional[Mapping[str, tuple[float, float]]] = None) -> np.ndarray:
    """(N, 2) node positions; regions without coords are placed on a circle."""
    N = model.num_regions
    pos = np.zeros((N, 2), dtype=float)
    for i, r in enumerate(model.regions):
        if coords is not None and r in coords:
            pos[i] = coords[r]
        else:
            angle = 2.0 * math.pi * i / max(N, 1)
            pos[i] = (math.cos(angle), math.sin(angle))
    return pos


def draw_coloring(
    ax,
    model: MapModel,
    labels: np.ndarray,
    pos: np.ndarray,
    costs: Optional[Sequence[int]] = None,
) -> None:
    for i, nbrs in enumerate(model.adj_idx):
        for j in nbrs:
            if j <= i and i in model.adj_idx[j]:
                continue  # draw each mutual edge once
            clash = labels[i] == labels[j]
            ax.plot(
                [pos[i, 0], pos[j, 0]],
                [pos[i, 1], pos[j, 1]],
                color="black" if clash else "0.6",
                linewidth=2.4 if clash else 0.9,
                zorder=1,
            )

    face = [DRAW_COLORS.get(model.palette[int(c)], "0.8") for c in labels]
    edge = ["black" if costs is not None and costs[i] else "white" for i in range(model.num_regions)]
    ax.scatter(pos[:, 0], pos[:, 1], s=520, c=face, edgecolors=edge, linewidths=2.0, zorder=2)
    for i, r in enumerate(model.regions):
        ax.annotate(r, pos[i], ha="center", va="center", fontsize=8, zorder=3)


class FrameRecorder:
    """
    Writes a "flipbook" folder:
      <run_dir>/flipbook/
        frames/
          frame_000000.png
          ...
        manifest.json

    Regions in conflict get a black ring; monochrome edges are drawn bold.
    """

    def __init__(
        self,
        *,
        model: MapModel,
        run_dir: Path,
        title: str = "",
        coords: Optional[Mapping[str, tuple[float, float]]] = None,
        dpi: int = 120,
        figsize: tuple[float, float] = (8.0, 6.0),
        facecolor: str = "white",
        bounds_pad_frac: float = 0.08,
    ):
        self.model = model
        self.run_dir = Path(run_dir)
        self.title = title or "Map coloring (hill-climb)"
        self.dpi = dpi
        self.figsize = figsize
        self.facecolor = facecolor

        self.flipbook_dir = self.run_dir / "flipbook"
        self.frames_dir = self.flipbook_dir / "frames"
        self.frames_dir.mkdir(parents=True, exist_ok=True)

        self.pos = layout_positions(model, coords)

        # Fixed camera so frames line up
        minx, miny = self.pos.min(axis=0)
        maxx, maxy = self.pos.max(axis=0)
        dx = max(maxx - minx, 1e-6) * bounds_pad_frac
        dy = max(maxy - miny, 1e-6) * bounds_pad_frac
        self._bounds = (minx - dx, miny - dy, maxx + dx, maxy + dy)

        self.frames: list[Dict[str, Any]] = []

    def _frame_path(self, frame_no: int) -> Path:
        return self.frames_dir / f"frame_{frame_no:06d}.png"

    def record(
        self,
        *,
        frame_no: int,
        labels: np.ndarray,
        meta: FrameMeta,
        costs: Optional[Sequence[int]] = None,
    ) -> Path:
        fig, ax = plt.subplots(figsize=self.figsize)
        fig.patch.set_facecolor(self.facecolor)

        draw_coloring(ax, self.model, labels, self.pos, costs)

        minx, miny, maxx, maxy = self._bounds
        ax.set_xlim(minx, maxx)
        ax.set_ylim(miny, maxy)
        ax.set_axis_off()

        overlay = f"{self.title}\nstep={meta.step} | conflicts={meta.conflicts}"
        if meta.note:
            overlay += f"\n{meta.note}"
        ax.text(
            0.01,
            0.01,
            overlay,
            transform=ax.transAxes,
            fontsize=9,
            va="bottom",
            ha="left",
            bbox=dict(boxstyle="round,pad=0.3", facecolor="white", alpha=0.80),
        )

        out_path = self._frame_path(frame_no)
        fig.savefig(out_path, dpi=self.dpi)
        plt.close(fig)

        self.frames.append(
            {
                "frame": out_path.name,
                "step": int(meta.step),
                "conflicts": int(meta.conflicts),
                "colors": [self.model.palette[int(c)] for c in labels],
                "note": meta.note,
            }
        )
        return out_path

    def write_manifest(self, *, fps: int = 2, frame_every: int = 1) -> Path:
        manifest = {
            "title": self.title,
            "regions": list(self.model.regions),
            "fps": int(fps),
            "frame_every": int(frame_every),
            "frames_dir": "frames",
            "frames": self.frames,
        }
        out_path = self.flipbook_dir / "manifest.json"
        out_path.write_text(json.dumps(manifest, indent=2))
        return out_path
