"""
Bulwark Configuration

Environment-driven defaults (``Config``) plus the per-session planner
configuration model (``PlannerConfig``).
"""

import json
import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .board.grid import Edge
from .pathing import WalkabilityPolicy

# Load .env file if it exists
load_dotenv()


class ConfigurationError(ValueError):
    """Raised when a planner configuration cannot describe a playable board."""


class Config:
    """Defaults loaded from environment variables."""

    # Board geometry
    ROWS: int = int(os.getenv("BULWARK_ROWS", "9"))
    COLS: int = int(os.getenv("BULWARK_COLS", "9"))

    # Budgets
    MAX_TOWERS: int = int(os.getenv("BULWARK_MAX_TOWERS", "3"))
    MAX_WALLS: int = int(os.getenv("BULWARK_MAX_WALLS", "3"))

    # Policies
    STRATEGY: str = os.getenv("BULWARK_STRATEGY", "path_overlap")
    WALKABILITY: str = os.getenv("BULWARK_WALKABILITY", WalkabilityPolicy.EMPTY_ONLY.value)

    # Reproducibility; unset means a fresh seed per session
    SEED: Optional[int] = int(os.environ["BULWARK_SEED"]) if os.getenv("BULWARK_SEED") else None

    # Logging
    VERBOSE: bool = os.getenv("BULWARK_VERBOSE", "false").lower() in ("1", "true", "yes")

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Bulwark Configuration:",
            f"  Board: {cls.ROWS}x{cls.COLS}",
            f"  Budgets: {cls.MAX_TOWERS} towers, {cls.MAX_WALLS} walls",
            f"  Strategy: {cls.STRATEGY}",
            f"  Walkability: {cls.WALKABILITY}",
            f"  Seed: {cls.SEED if cls.SEED is not None else 'random'}",
        ]
        return "\n".join(lines)


class WeightTable(BaseModel):
    """Weights applied to each scoring component.

    Every strategy ships its own defaults; a component a strategy does not
    compute simply ignores its weight. Overrides from ``PlannerConfig`` must
    be whole numbers so tie-break jitter cannot reorder distinct scores.
    """

    tower_coverage: float = 0.0
    goal_proximity: float = 0.0
    goal_proximity_radius: int = 5
    lane_reduction: float = 0.0
    path_detour: float = 0.0
    path_overlap: float = 0.0
    tower_adjacency: float = 0.0
    tower_reach_reduction: float = 0.0
    future_options: float = 0.0
    constraint_cost: float = 1.0


class PlannerConfig(BaseModel):
    """Everything a planning session needs, supplied once up front.

    Pydantic checks field types; ``ensure_valid`` checks that the values
    describe a playable board and is called before any placement attempt.
    """

    # Geometry
    rows: int = 9
    cols: int = 9
    tower_size: int = Field(2, description="Side length of the square tower footprint")
    wall_length: int = Field(4, description="Cells covered by one wall run")

    # Budgets
    max_towers: int = 3
    max_walls: int = 3

    # Lanes
    spawn_edge: Edge = Edge.RIGHT
    goal_edge: Edge = Edge.LEFT
    walkability: WalkabilityPolicy = WalkabilityPolicy.EMPTY_ONLY
    reference_spawn: Optional[int] = Field(
        None, description="Index along the spawn edge of the reference route; None draws one",
    )
    reference_goal: Optional[int] = Field(
        None, description="Index along the goal edge of the reference route; None draws one",
    )

    # Scoring
    scoring_strategy: str = "path_overlap"
    weights: Dict[str, float] = Field(
        default_factory=dict, description="Per-component overrides of the strategy weights",
    )
    tower_range: int = Field(3, description="Chebyshev range of an archer tower")

    # Selection
    epsilon: float = Field(0.25, description="Probability of exploring the top-K")
    top_k: int = 5
    jitter_range: int = Field(3, description="Max absolute tie-break jitter")
    jitter_scale: int = Field(10, description="Score multiplier applied before jitter")
    seed: Optional[int] = None

    # Caps
    max_steps: Optional[int] = Field(None, description="Defaults to max_towers + max_walls")
    max_candidates_per_step: Optional[int] = None
    time_limit_seconds: Optional[float] = None

    verbose: bool = False

    @classmethod
    def from_env(cls, **overrides) -> "PlannerConfig":
        """Build a config from ``Config`` defaults, then apply ``overrides``."""
        values = {
            "rows": Config.ROWS,
            "cols": Config.COLS,
            "max_towers": Config.MAX_TOWERS,
            "max_walls": Config.MAX_WALLS,
            "scoring_strategy": Config.STRATEGY,
            "walkability": Config.WALKABILITY,
            "seed": Config.SEED,
            "verbose": Config.VERBOSE,
        }
        values.update(overrides)
        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

    @property
    def step_limit(self) -> int:
        if self.max_steps is not None:
            return self.max_steps
        return self.max_towers + self.max_walls

    def ensure_valid(self) -> "PlannerConfig":
        """Raise ConfigurationError unless this config describes a playable board."""
        # Imported here: scoring imports this module for WeightTable.
        from .scoring import STRATEGIES

        if self.rows <= 0 or self.cols <= 0:
            raise ConfigurationError(
                f"Grid dimensions must be positive, got {self.rows}x{self.cols}"
            )
        if self.tower_size <= 0 or self.wall_length <= 0:
            raise ConfigurationError("Footprint sizes must be positive")
        if self.tower_size > min(self.rows, self.cols):
            raise ConfigurationError(
                f"Tower footprint {self.tower_size}x{self.tower_size} does not fit a "
                f"{self.rows}x{self.cols} grid"
            )
        if self.wall_length > max(self.rows, self.cols):
            raise ConfigurationError(
                f"Wall length {self.wall_length} does not fit a {self.rows}x{self.cols} grid"
            )
        if self.max_towers < 0 or self.max_walls < 0:
            raise ConfigurationError("Placement budgets cannot be negative")
        # Adjacent edges share a corner cell, which would count as a lane by itself.
        if self.goal_edge is not self.spawn_edge.opposite:
            raise ConfigurationError(
                f"Spawn and goal edges must be opposite, got "
                f"{self.spawn_edge.value} -> {self.goal_edge.value}"
            )
        for name, index, edge in (
            ("reference_spawn", self.reference_spawn, self.spawn_edge),
            ("reference_goal", self.reference_goal, self.goal_edge),
        ):
            length = self.rows if edge in (Edge.LEFT, Edge.RIGHT) else self.cols
            if index is not None and not 0 <= index < length:
                raise ConfigurationError(
                    f"{name}={index} is outside the {edge.value} edge (0..{length - 1})"
                )
        if self.scoring_strategy not in STRATEGIES:
            raise ConfigurationError(
                f"Unknown scoring strategy '{self.scoring_strategy}'. "
                f"Choose one of: {', '.join(sorted(STRATEGIES))}"
            )
        unknown = set(self.weights) - set(WeightTable.model_fields)
        if unknown:
            raise ConfigurationError(f"Unknown weight keys: {', '.join(sorted(unknown))}")
        # Whole-number weights keep distinct scores at least 1 apart, which is
        # the gap the jitter check below protects.
        fractional = sorted(key for key, value in self.weights.items() if not float(value).is_integer())
        if fractional:
            raise ConfigurationError(f"Weights must be whole numbers: {', '.join(fractional)}")
        if not 0.0 <= self.epsilon <= 1.0:
            raise ConfigurationError(f"epsilon must be within [0, 1], got {self.epsilon}")
        if self.top_k < 1:
            raise ConfigurationError("top_k must be at least 1")
        if self.tower_range < 0:
            raise ConfigurationError("tower_range cannot be negative")
        if self.jitter_scale < 1 or self.jitter_range < 0:
            raise ConfigurationError("jitter_scale must be >= 1 and jitter_range >= 0")
        # Jitter must never flip two scores that differ by a whole point.
        if 2 * self.jitter_range >= self.jitter_scale:
            raise ConfigurationError(
                f"jitter_range={self.jitter_range} is too wide for jitter_scale={self.jitter_scale}"
            )
        if self.max_steps is not None and self.max_steps < 0:
            raise ConfigurationError("max_steps cannot be negative")
        if self.max_candidates_per_step is not None and self.max_candidates_per_step < 1:
            raise ConfigurationError("max_candidates_per_step must be at least 1")
        if self.time_limit_seconds is not None and self.time_limit_seconds <= 0:
            raise ConfigurationError("time_limit_seconds must be positive")
        return self

    def display(self) -> str:
        lines = [
            "Planner Configuration:",
            f"  Board: {self.rows}x{self.cols} (tower {self.tower_size}x{self.tower_size}, wall {self.wall_length})",
            f"  Budgets: {self.max_towers} towers, {self.max_walls} walls",
            f"  Lanes: {self.spawn_edge.value} -> {self.goal_edge.value} ({self.walkability.value})",
            f"  Strategy: {self.scoring_strategy} (epsilon={self.epsilon}, top_k={self.top_k})",
            f"  Seed: {self.seed if self.seed is not None else 'random'}",
        ]
        return "\n".join(lines)


def load_config(path: Path | str, **overrides) -> PlannerConfig:
    """Load a ``PlannerConfig`` from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigurationError: If the JSON does not match the config schema
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Planner config not found at {config_path}")

    data = json.loads(config_path.read_text())
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a JSON object")
    data.update(overrides)
    try:
        return PlannerConfig(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid planner config in {config_path}:\n{exc}") from exc
