"""Engine presets and JSON configuration overrides."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from backend.engine.gamesolver.algorithms import CANONICAL_ORDER
from backend.engine.gamesolver.presets import (
    PRESETS,
    config_from_dict,
    get_preset,
    load_config,
)


def test_presets_cover_historical_variants() -> None:
    assert set(PRESETS) == {"hybrid", "advanced", "legacy"}
    assert get_preset("legacy").staged is False
    assert get_preset("advanced").profile(5).pdb_max_depth == 16
    assert get_preset("hybrid").algorithms == CANONICAL_ORDER


def test_every_preset_configures_every_algorithm() -> None:
    for config in PRESETS.values():
        assert set(config.algorithm_options) == set(CANONICAL_ORDER)


def test_unknown_preset() -> None:
    with pytest.raises(ValueError, match="Unknown preset"):
        get_preset("turbo")


def test_get_preset_returns_a_copy() -> None:
    config = get_preset("hybrid")
    config.algorithm_options["bfs"]["max_nodes"] = 1
    assert get_preset("hybrid").algorithm_options["bfs"]["max_nodes"] != 1


def test_options_scale_on_large_boards() -> None:
    config = get_preset("hybrid")
    small = config.options_for("bfs", 4)
    large = config.options_for("bfs", 5)
    assert large["max_nodes"] == int(small["max_nodes"] * config.large_board_factor)
    assert large["timeout_sec"] == small["timeout_sec"] * config.large_board_factor
    assert config.options_for("unknown", 5) == {}


def test_profile_falls_back_to_largest_size() -> None:
    config = get_preset("hybrid")
    assert config.profile(4) != config.profile(5)
    assert config.profile(6) == config.profile(5)


def test_config_from_dict_merges_over_preset() -> None:
    config = config_from_dict({
        "preset": "advanced",
        "heuristic": "linear_conflict",
        "algorithms": ["ida_star", "bfs"],
        "algorithm_options": {"bfs": {"max_nodes": 42}},
        "profiles": {"4": {"finish": {"timeout_sec": 1.5}, "race_threads": 2}},
    })
    assert config.name == "advanced"
    assert config.heuristic == "linear_conflict"
    assert config.algorithms == ("ida_star", "bfs")
    assert config.algorithm_options["bfs"]["max_nodes"] == 42
    assert config.algorithm_options["bfs"]["timeout_sec"] == 5.0
    profile = config.profile(4)
    assert profile.finish.timeout_sec == 1.5
    assert profile.finish.max_nodes == 800_000
    assert profile.race_threads == 2


def test_load_config_from_file(tmp_path: Path) -> None:
    path = tmp_path / "solver.json"
    path.write_text(json.dumps({"fallback_to_hybrid": False}), encoding="utf-8")
    config = load_config(path, "hybrid")
    assert config.fallback_to_hybrid is False
    assert config.name == "hybrid"


def test_load_config_missing_file_warns(tmp_path: Path, caplog) -> None:
    with caplog.at_level(logging.WARNING):
        config = load_config(tmp_path / "absent.json", "legacy")
    assert config.name == "legacy"
    assert "not found" in caplog.text


def test_load_config_invalid_json_warns(tmp_path: Path, caplog) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        config = load_config(path)
    assert config.name == "hybrid"
    assert "Failed to load config" in caplog.text
