"""
Engine configuration - resource limits and named presets.

The three historical solver variants survive as presets of one engine:

    hybrid    default; caps sized for a Python interpreter
    advanced  staged solver limits of the original large-board solver
    legacy    whole-board hybrid worker for every size, original caps

``load_config()`` merges a JSON file over a preset.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from backend.engine.gamesolver.algorithms import CANONICAL_ORDER

logger = logging.getLogger(__name__)

DEFAULT_PRESET = "hybrid"


@dataclass(frozen=True)
class Limits:
    """Node-expansion cap and wall-clock timeout (``None`` = unbounded)."""
    max_nodes: int | None
    timeout_sec: float | None

    def to_options(self) -> dict[str, Any]:
        return {"max_nodes": self.max_nodes, "timeout_sec": self.timeout_sec}


@dataclass(frozen=True)
class BoardProfile:
    """
    Stage controller tuning for one board size.

    Attributes:
        placement: Limits for each tile-placement stage
        finish: Limits for the final IDA* stage
        fallback: Limits for the final BFS fallback
        race_threads: IDA* instances racing on the final stage
        pdb_max_depth: Depth bound of the pattern database search
    """
    placement: Limits
    finish: Limits
    fallback: Limits
    race_threads: int = 1
    pdb_max_depth: int | None = None


@dataclass
class EngineConfig:
    """
    Everything the solver engine can be tuned with.

    Attributes:
        name: Preset this configuration started from
        heuristic: Heuristic name for whole-board searches
        stage_heuristic: "pdb" or a heuristic name, for placement stages
        algorithms: Dispatcher order
        algorithm_options: Constructor options per algorithm name
        large_board_factor: Multiplier applied to caps on 5x5 boards
        profiles: Stage controller tuning by board size
        staged: Use the stage controller for boards larger than 3x3
        fallback_to_hybrid: Run the dispatcher if the staged solve fails
        parallel_workers: Thread pool size for hybrid-all (None = one per algorithm)
    """
    name: str = DEFAULT_PRESET
    heuristic: str = "manhattan"
    stage_heuristic: str = "pdb"
    algorithms: tuple[str, ...] = CANONICAL_ORDER
    algorithm_options: dict[str, dict[str, Any]] = field(default_factory=dict)
    large_board_factor: float = 2.0
    profiles: dict[int, BoardProfile] = field(default_factory=dict)
    staged: bool = True
    fallback_to_hybrid: bool = True
    parallel_workers: int | None = None

    def options_for(self, algorithm: str, size: int) -> dict[str, Any]:
        """Constructor options for *algorithm* on a board of side *size*."""
        options = dict(self.algorithm_options.get(algorithm, {}))
        if size >= 5 and self.large_board_factor != 1:
            if options.get("max_nodes") is not None:
                options["max_nodes"] = int(options["max_nodes"] * self.large_board_factor)
            if options.get("timeout_sec") is not None:
                options["timeout_sec"] = options["timeout_sec"] * self.large_board_factor
        return options

    def profile(self, size: int) -> BoardProfile:
        if size in self.profiles:
            return self.profiles[size]
        return self.profiles[max(self.profiles)]


# -- presets ------------------------------------------------------------------

_HYBRID_OPTIONS: dict[str, dict[str, Any]] = {
    "ida_star": {"max_nodes": 500_000, "timeout_sec": 10.0},
    "a_star": {"max_nodes": 200_000, "timeout_sec": 10.0},
    "bfs": {"max_nodes": 200_000, "timeout_sec": 5.0},
    "dfs_limited": {"max_nodes": 200_000, "timeout_sec": 5.0, "depth_limit": 40},
    "iddfs": {"max_nodes": 200_000, "timeout_sec": 5.0, "max_depth": 32},
    "bibfs": {"max_nodes": 100_000, "timeout_sec": 5.0},
    "dijkstra": {"max_nodes": 200_000, "timeout_sec": 5.0},
    "greedy_best_first": {"max_nodes": 100_000, "timeout_sec": 5.0},
    "rbfs": {"max_nodes": 100_000, "timeout_sec": 5.0},
    "sma_star": {"max_nodes": 200_000, "timeout_sec": 5.0, "memory_limit": 20_000},
    "dfbnb": {"max_nodes": 200_000, "timeout_sec": 5.0},
    "bfbnb": {"max_nodes": 200_000, "timeout_sec": 5.0},
    "hill_climbing": {"timeout_sec": 5.0, "max_steps": 2000},
    "simulated_annealing": {"timeout_sec": 5.0, "max_steps": 3000},
    "beam_search": {"timeout_sec": 5.0, "beam_width": 10, "max_rounds": 3000},
    "genetic": {"timeout_sec": 5.0, "population_size": 30, "generations": 40},
    "tabu_search": {"timeout_sec": 5.0, "tabu_size": 50, "max_steps": 3000},
}

_LEGACY_OPTIONS: dict[str, dict[str, Any]] = {
    "ida_star": {"max_nodes": 1_000_000, "timeout_sec": 10.0},
    "a_star": {"max_nodes": 1_000_000, "timeout_sec": None},
    "bfs": {"max_nodes": 200_000, "timeout_sec": None},
    "dfs_limited": {"max_nodes": 1_000_000, "timeout_sec": None, "depth_limit": 50},
    "iddfs": {"max_nodes": None, "timeout_sec": None, "max_depth": 45},
    "bibfs": {"max_nodes": 100_000, "timeout_sec": None},
    "dijkstra": {"max_nodes": 100_000, "timeout_sec": None},
    "greedy_best_first": {"max_nodes": 100_000, "timeout_sec": None},
    "rbfs": {"max_nodes": 100_000, "timeout_sec": None, "f_limit": 1000},
    "sma_star": {"max_nodes": None, "timeout_sec": None, "memory_limit": 10_000},
    "dfbnb": {"max_nodes": 100_000, "timeout_sec": None},
    "bfbnb": {"max_nodes": 100_000, "timeout_sec": None},
    "hill_climbing": {"timeout_sec": None, "max_steps": 2000},
    "simulated_annealing": {"timeout_sec": None, "max_steps": 3000},
    "beam_search": {"timeout_sec": None, "beam_width": 10, "max_rounds": 3000},
    "genetic": {"timeout_sec": None, "population_size": 30, "generations": 40},
    "tabu_search": {"timeout_sec": None, "tabu_size": 50, "max_steps": 3000},
}

_HYBRID_PROFILES: dict[int, BoardProfile] = {
    4: BoardProfile(
        placement=Limits(200_000, 5.0),
        finish=Limits(500_000, 20.0),
        fallback=Limits(200_000, 20.0),
    ),
    5: BoardProfile(
        placement=Limits(200_000, 5.0),
        finish=Limits(500_000, 20.0),
        fallback=Limits(300_000, 20.0),
        race_threads=4,
    ),
}

_ADVANCED_PROFILES: dict[int, BoardProfile] = {
    4: BoardProfile(
        placement=Limits(300_000, 4.0),
        finish=Limits(800_000, 16.0),
        fallback=Limits(200_000, None),
        pdb_max_depth=14,
    ),
    5: BoardProfile(
        placement=Limits(250_000, 3.0),
        finish=Limits(400_000, 9.0),
        fallback=Limits(400_000, None),
        race_threads=4,
        pdb_max_depth=16,
    ),
}

PRESETS: dict[str, EngineConfig] = {
    "hybrid": EngineConfig(
        name="hybrid",
        algorithm_options=_HYBRID_OPTIONS,
        profiles=_HYBRID_PROFILES,
    ),
    "advanced": EngineConfig(
        name="advanced",
        algorithm_options=_HYBRID_OPTIONS,
        profiles=_ADVANCED_PROFILES,
        fallback_to_hybrid=False,
    ),
    "legacy": EngineConfig(
        name="legacy",
        algorithm_options=_LEGACY_OPTIONS,
        profiles=_HYBRID_PROFILES,
        staged=False,
    ),
}


def get_preset(name: str) -> EngineConfig:
    """
    Get a fresh copy of a named preset.

    Raises:
        ValueError: If preset name not found
    """
    if name not in PRESETS:
        available = ", ".join(PRESETS)
        raise ValueError(f"Unknown preset: {name}. Available: {available}")
    preset = PRESETS[name]
    return replace(
        preset,
        algorithm_options={k: dict(v) for k, v in preset.algorithm_options.items()},
        profiles=dict(preset.profiles),
    )


# -- JSON overrides -----------------------------------------------------------


def _limits(data: dict[str, Any], base: Limits) -> Limits:
    return Limits(
        max_nodes=data.get("max_nodes", base.max_nodes),
        timeout_sec=data.get("timeout_sec", base.timeout_sec),
    )


def _profile(data: dict[str, Any], base: BoardProfile) -> BoardProfile:
    return BoardProfile(
        placement=_limits(data.get("placement", {}), base.placement),
        finish=_limits(data.get("finish", {}), base.finish),
        fallback=_limits(data.get("fallback", {}), base.fallback),
        race_threads=data.get("race_threads", base.race_threads),
        pdb_max_depth=data.get("pdb_max_depth", base.pdb_max_depth),
    )


def config_from_dict(data: dict[str, Any], preset: str | None = None) -> EngineConfig:
    """
    Merge a settings dictionary over a preset.

    Args:
        data: Settings; unknown keys are ignored
        preset: Base preset (defaults to ``data["preset"]`` or "hybrid")

    Returns:
        EngineConfig with the overrides applied
    """
    config = get_preset(preset or data.get("preset", DEFAULT_PRESET))
    changes: dict[str, Any] = {}

    for key in ("heuristic", "stage_heuristic", "large_board_factor",
                "staged", "fallback_to_hybrid", "parallel_workers"):
        if key in data:
            changes[key] = data[key]
    if "algorithms" in data:
        changes["algorithms"] = tuple(data["algorithms"])
    if "algorithm_options" in data:
        options = {k: dict(v) for k, v in config.algorithm_options.items()}
        for name, overrides in data["algorithm_options"].items():
            options.setdefault(name, {}).update(overrides)
        changes["algorithm_options"] = options
    if "profiles" in data:
        profiles = dict(config.profiles)
        for size_key, overrides in data["profiles"].items():
            size = int(size_key)
            base = profiles.get(size) or config.profile(size)
            profiles[size] = _profile(overrides, base)
        changes["profiles"] = profiles

    return replace(config, **changes)


def load_config(path: Path | None = None, preset: str | None = None) -> EngineConfig:
    """
    Load engine configuration from a JSON file.

    Returns:
        The merged configuration.  A missing or invalid file yields the
        preset unchanged.
    """
    if path is None:
        return get_preset(preset or DEFAULT_PRESET)
    if not path.exists():
        logger.warning(f"Config file {path} not found, using preset defaults")
        return get_preset(preset or DEFAULT_PRESET)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to load config {path}: {e}, using preset defaults")
        return get_preset(preset or DEFAULT_PRESET)

    if not isinstance(data, dict):
        logger.warning(f"Config {path} is not a JSON object, using preset defaults")
        return get_preset(preset or DEFAULT_PRESET)

    config = config_from_dict(data, preset)
    logger.debug(f"Config loaded from {path}: preset={config.name}")
    return config
