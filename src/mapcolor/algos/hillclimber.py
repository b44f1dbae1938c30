from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

import numpy as np

from mapcolor.data.canada_map import MapModel


# ----------------------------
# Config
# ----------------------------
@dataclass
class HillclimbConfig:
    k: int = 4
    max_steps: Optional[int] = None  # None = run to the local minimum
    verbose: bool = True


@dataclass
class HillclimbResult:
    labels: np.ndarray
    costs: np.ndarray
    total: int
    steps: int
    cost_trace: list[int] = field(default_factory=list)


# ----------------------------
# Cost model
# ----------------------------
def region_costs(labels: np.ndarray, adj_idx: Sequence[Sequence[int]]) -> np.ndarray:
    """1 for every region that shares its color with at least one neighbor, else 0."""
    N = labels.shape[0]
    out = np.zeros(N, dtype=int)
    for i in range(N):
        li = labels[i]
        for j in adj_idx[i]:
            if labels[j] == li:
                out[i] = 1
                break
    return out


def total_cost(costs: np.ndarray) -> int:
    return int(np.sum(costs))


def labels_cost(labels: np.ndarray, adj_idx: Sequence[Sequence[int]]) -> int:
    return total_cost(region_costs(labels, adj_idx))


# ----------------------------
# Search
# ----------------------------
def initial_state(k: int, num_regions: int, palette_size: int = 4) -> np.ndarray:
    """Cycle through the first k colors in region order."""
    if k < 1 or k > palette_size:
        raise ValueError(f"k must be between 1 and {palette_size}, got {k}")
    return np.arange(num_regions, dtype=int) % k


def best_successor(
    labels: np.ndarray,
    k: int,
    adj_idx: Sequence[Sequence[int]],
    current_cost: int,
) -> tuple[Optional[np.ndarray], int]:
    """
    Steepest single-region recolor.

    Scans regions ascending, then colors ascending. A candidate only replaces
    the running best when strictly cheaper, so ties keep the first one found.
    Returns (None, current_cost) when no move beats current_cost.
    """
    best: Optional[np.ndarray] = None
    best_cost = current_cost

    for i in range(labels.shape[0]):
        for c in range(k):
            if labels[i] == c:
                continue
            cand = labels.copy()
            cand[i] = c
            cost = labels_cost(cand, adj_idx)
            if cost < best_cost:
                best = cand
                best_cost = cost

    return best, best_cost


def hillclimb_min_conflicts(
    labels_init: np.ndarray,
    adj_idx: Sequence[Sequence[int]],
    k: int,
    cfg: HillclimbConfig,
    on_frame: Optional[Callable[[int, np.ndarray, dict], Any]] = None,
    frame_every: int = 1,
    cost_trace: Optional[list[int]] = None,
) -> np.ndarray:
    labels = np.asarray(labels_init, dtype=int).copy()
    cur_cost = labels_cost(labels, adj_idx)
    if cost_trace is not None:
        cost_trace.append(cur_cost)

    def _emit_frame(step: int) -> None:
        if on_frame is None:
            return
        costs = region_costs(labels, adj_idx)
        on_frame(step, labels, {"conflicts": total_cost(costs), "costs": costs.tolist()})

    if cfg.verbose:
        print(f"[hillclimb] k={k} regions={labels.shape[0]}")
        print(f"[hillclimb] Initial conflicts: {cur_cost}")
        print("------------------------------------------------------")

    _emit_frame(0)

    step = 0
    while cfg.max_steps is None or step < cfg.max_steps:
        nxt, nxt_cost = best_successor(labels, k, adj_idx, cur_cost)
        if nxt is None:
            if cfg.verbose:
                print(f"[hillclimb] stopping: local minimum after {step} steps", flush=True)
            break

        changed = int(np.flatnonzero(nxt != labels)[0])
        labels = nxt
        cur_cost = nxt_cost
        step += 1
        if cost_trace is not None:
            cost_trace.append(cur_cost)

        if cfg.verbose:
            print(
                f"[hillclimb] step={step} region={changed} color={int(labels[changed])} conflicts={cur_cost}",
                flush=True,
            )

        if step % frame_every == 0:
            _emit_frame(step)
    else:
        if cfg.verbose:
            print(f"[hillclimb] stopping: reached max_steps={cfg.max_steps}", flush=True)

    if cfg.verbose:
        print("------------------------------------------------------")
        print(f"[hillclimb] Final conflicts: {cur_cost}")

    return labels


# ----------------------------
# Glue
# ----------------------------
def solve(
    model: MapModel,
    cfg: HillclimbConfig,
    on_frame: Optional[Callable[[int, np.ndarray, dict], Any]] = None,
    frame_every: int = 1,
) -> HillclimbResult:
    labels_init = initial_state(cfg.k, model.num_regions, palette_size=len(model.palette))
    trace: list[int] = []
    labels = hillclimb_min_conflicts(
        labels_init=labels_init,
        adj_idx=model.adj_idx,
        k=cfg.k,
        cfg=cfg,
        on_frame=on_frame,
        frame_every=frame_every,
        cost_trace=trace,
    )
    costs = region_costs(labels, model.adj_idx)
    return HillclimbResult(
        labels=labels,
        costs=costs,
        total=total_cost(costs),
        steps=len(trace) - 1,
        cost_trace=trace,
    )


def color_names(model: MapModel, labels: np.ndarray) -> list[str]:
    return [model.palette[int(c)] for c in labels]


def format_report(model: MapModel, labels: np.ndarray, costs: np.ndarray) -> str:
    lines = ["Final Results of the Map with Costs"]
    for i, (color, cost) in enumerate(zip(color_names(model, labels), costs)):
        lines.append(f"{model.idx_to_region[i]}: {color} (Cost: {int(cost)})")
    lines.append(f"Total conflicts: {total_cost(costs)}")
    return "\n".join(lines)
