from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Sequence

import yaml


REGIONS: tuple[str, ...] = (
    "BC", "AB", "SK", "MB", "ON", "QC", "NB", "NS", "PEI", "NL", "NU", "NT", "YT",
)

PALETTE: tuple[str, ...] = ("b", "r", "o", "j")

ADJACENCY: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "BC": ("AB", "YT", "NT"),
    "AB": ("BC", "SK", "NT"),
    "SK": ("AB", "MB", "NT"),
    "MB": ("SK", "ON", "NU"),
    "ON": ("MB", "QC"),
    "QC": ("ON", "NB", "NL"),
    "NB": ("QC", "NS", "PEI"),
    "NS": ("NB", "PEI"),
    "PEI": ("NB", "NS"),
    "NL": ("QC",),
    "NU": ("MB", "NT"),
    "NT": ("BC", "AB", "SK", "NU", "YT"),
    "YT": ("NT", "BC"),
})


@dataclass(frozen=True)
class MapModel:
    regions: tuple[str, ...]
    palette: tuple[str, ...]
    adjacency: Mapping[str, tuple[str, ...]]
    region_to_idx: Mapping[str, int]
    idx_to_region: Mapping[int, str]
    adj_idx: tuple[tuple[int, ...], ...]  # neighbors as indices

    @property
    def num_regions(self) -> int:
        return len(self.regions)


# ----------------------------
# Adjacency utilities
# ----------------------------

def build_adj_idx(regions: Sequence[str], adjacency: Mapping[str, Sequence[str]]) -> list[list[int]]:
    """Resolve neighbor names to region indices; names outside ``regions`` are dropped."""
    region_to_idx = {r: i for i, r in enumerate(regions)}
    adj_idx: list[list[int]] = [[] for _ in regions]
    for r, nbrs in adjacency.items():
        i = region_to_idx.get(r)
        if i is None:
            continue
        for n in nbrs:
            j = region_to_idx.get(n)
            if j is not None:
                adj_idx[i].append(j)
    return adj_idx


def asymmetric_edges(adjacency: Mapping[str, Sequence[str]]) -> list[tuple[str, str]]:
    """Edges (a, b) where a lists b but b does not list a."""
    out: list[tuple[str, str]] = []
    for a, nbrs in adjacency.items():
        for b in nbrs:
            if a not in adjacency.get(b, ()):
                out.append((a, b))
    return out


def neighbors(model: MapModel, region: str) -> tuple[str, ...]:
    """Authored neighbor names of ``region``, in order; empty for unknown regions."""
    return model.adjacency.get(region, ())


def build_map_model(
    regions: Sequence[str] = REGIONS,
    adjacency: Mapping[str, Sequence[str]] = ADJACENCY,
    palette: Sequence[str] = PALETTE,
) -> MapModel:
    regions = tuple(str(r) for r in regions)
    frozen_adj = MappingProxyType({str(r): tuple(str(n) for n in nbrs) for r, nbrs in adjacency.items()})
    region_to_idx = {r: i for i, r in enumerate(regions)}
    idx_to_region = {i: r for r, i in region_to_idx.items()}

    return MapModel(
        regions=regions,
        palette=tuple(str(c) for c in palette),
        adjacency=frozen_adj,
        region_to_idx=MappingProxyType(region_to_idx),
        idx_to_region=MappingProxyType(idx_to_region),
        adj_idx=tuple(tuple(nbrs) for nbrs in build_adj_idx(regions, frozen_adj)),
    )


def load_map_model(path: str | Path) -> MapModel:
    """
    Load a map from YAML:

        regions: [A, B, C]
        adjacency: {A: [B], B: [A, C], C: [B]}
        palette: [b, r, o, j]   # optional

    Asymmetric adjacency is kept as authored.
    """
    path = Path(path)
    with path.open("r") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"{path} must hold a mapping, got {type(raw).__name__}")

    for key in ("regions", "adjacency"):
        if key not in raw:
            raise KeyError(f"{path} missing '{key}'.")

    if not isinstance(raw["regions"], list):
        raise ValueError(f"'regions' must be a list, got {type(raw['regions']).__name__}")
    if not isinstance(raw["adjacency"] or {}, dict):
        raise ValueError(f"'adjacency' must be a mapping, got {type(raw['adjacency']).__name__}")

    regions = [str(r) for r in raw["regions"]]
    dupes = sorted({r for r in regions if regions.count(r) > 1})
    if dupes:
        raise ValueError(f"duplicate regions: {dupes}")

    adjacency = {str(r): [str(n) for n in (nbrs or [])] for r, nbrs in (raw["adjacency"] or {}).items()}

    unknown = sorted(set(adjacency) - set(regions))
    if unknown:
        raise ValueError(f"adjacency lists regions not in 'regions': {unknown}")

    palette = raw.get("palette") or PALETTE
    if not isinstance(palette, (list, tuple)):
        raise ValueError(f"'palette' must be a list, got {type(palette).__name__}")
    return build_map_model(regions=regions, adjacency=adjacency, palette=palette)


# Rough (lon, lat) of each region's population centre; only used for drawing.
CENTROIDS: Mapping[str, tuple[float, float]] = MappingProxyType({
    "BC": (-124.0, 54.0),
    "AB": (-114.5, 55.0),
    "SK": (-106.0, 54.5),
    "MB": (-97.5, 55.0),
    "ON": (-85.0, 50.0),
    "QC": (-72.0, 52.0),
    "NB": (-66.0, 46.5),
    "NS": (-63.0, 45.0),
    "PEI": (-63.2, 46.4),
    "NL": (-60.0, 53.5),
    "NU": (-95.0, 66.0),
    "NT": (-118.0, 64.0),
    "YT": (-135.5, 63.5),
})
