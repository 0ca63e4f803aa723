"""Model checklist adherence scoring."""

from .scorer import (
    ModelMatch,
    Observation,
    available_observations,
    compute_adherence,
    conditions_from_model,
    describe_tool,
    map_observations,
    rank_models,
    score_model,
    toggle_condition,
    zone_adherence,
)

__all__ = [
    "ModelMatch",
    "Observation",
    "available_observations",
    "compute_adherence",
    "conditions_from_model",
    "describe_tool",
    "map_observations",
    "rank_models",
    "score_model",
    "toggle_condition",
    "zone_adherence",
]
