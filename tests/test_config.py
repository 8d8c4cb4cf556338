"""Tests for planner configuration loading and validation."""

import json

import pytest

from bulwark.config import Config, ConfigurationError, PlannerConfig, load_config
from bulwark.board import Edge
from bulwark.pathing import WalkabilityPolicy


def test_defaults_describe_the_nine_by_nine_board():
    config = PlannerConfig().ensure_valid()

    assert (config.rows, config.cols) == (9, 9)
    assert (config.tower_size, config.wall_length) == (2, 4)
    assert (config.max_towers, config.max_walls) == (3, 3)
    assert config.spawn_edge is Edge.RIGHT and config.goal_edge is Edge.LEFT
    assert config.walkability is WalkabilityPolicy.EMPTY_ONLY
    assert config.step_limit == 6
    assert "9x9" in config.display()


@pytest.mark.parametrize(
    "overrides",
    [
        {"rows": 0},
        {"cols": -3},
        {"tower_size": 10},
        {"wall_length": 12},
        {"tower_size": 0},
        {"max_walls": -1},
        {"spawn_edge": "top", "goal_edge": "top"},
        {"spawn_edge": "right", "goal_edge": "top"},
        {"spawn_edge": "bottom", "goal_edge": "left"},
        {"weights": {"constraint_cost": 0.1}},
        {"weights": {"goal_proximity_radius": 2.5}},
        {"reference_spawn": 9},
        {"spawn_edge": "top", "goal_edge": "bottom", "cols": 4, "wall_length": 4, "reference_goal": 4},
        {"scoring_strategy": "greedy"},
        {"weights": {"wall_love": 1.0}},
        {"epsilon": 1.5},
        {"top_k": 0},
        {"jitter_range": 5, "jitter_scale": 10},
        {"max_candidates_per_step": 0},
        {"time_limit_seconds": 0},
        {"max_steps": -1},
    ],
)
def test_invalid_configs_raise_configuration_error(overrides):
    with pytest.raises(ConfigurationError):
        PlannerConfig(**overrides).ensure_valid()


def test_wall_only_needs_to_fit_one_axis():
    PlannerConfig(rows=2, cols=6, wall_length=5).ensure_valid()


def test_load_config_from_json(tmp_path):
    path = tmp_path / "planner.json"
    path.write_text(json.dumps({
        "rows": 7,
        "cols": 11,
        "walkability": "walls_block",
        "scoring_strategy": "lane_reduction",
        "weights": {"lane_reduction": 55},
        "seed": 3,
    }))

    config = load_config(path, verbose=True).ensure_valid()

    assert (config.rows, config.cols) == (7, 11)
    assert config.walkability is WalkabilityPolicy.WALLS_BLOCK
    assert config.weights == {"lane_reduction": 55.0}
    assert config.verbose is True


def test_load_config_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"rows": "many"}))
    with pytest.raises(ConfigurationError):
        load_config(bad)

    listed = tmp_path / "list.json"
    listed.write_text("[1, 2]")
    with pytest.raises(ConfigurationError):
        load_config(listed)


def test_from_env_uses_config_defaults(monkeypatch):
    monkeypatch.setattr(Config, "ROWS", 6)
    monkeypatch.setattr(Config, "STRATEGY", "lcv")
    monkeypatch.setattr(Config, "SEED", 99)

    config = PlannerConfig.from_env(cols=7)

    assert (config.rows, config.cols) == (6, 7)
    assert config.scoring_strategy == "lcv"
    assert config.seed == 99

    monkeypatch.setattr(Config, "WALKABILITY", "diagonal")
    with pytest.raises(ConfigurationError):
        PlannerConfig.from_env()


def test_config_display_lists_settings():
    text = Config.display()
    assert text.startswith("Bulwark Configuration:")
    assert "Strategy:" in text
