"""Checklist adherence scoring.

Maps what was observed on a chart onto a model's full checklist and
scores the fraction that was present.  Used in two places:

* live, while logging a trade: conditions are ticked directly and
  :func:`compute_adherence` gives the trade's ``adherence_score``;
* predictively, in the setup identifier: hypothetical observations are
  mapped onto every model with :func:`map_observations` and
  :func:`rank_models` lists the models that currently qualify.

Scores are fractions in [0, 1].  An empty checklist scores 0.0.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Iterable

from tradebook.core.enums import ZONE_ORDER, Zone
from tradebook.core.models import Model, ModelCondition, ToolConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Observation:
    """A tool type seen in a given zone."""

    tool_type: str
    zone: Zone


@dataclass
class ModelMatch:
    """How well one model's checklist matches a set of observations."""

    model: Model
    conditions: list[ModelCondition]
    adherence: float
    zone_adherence: dict[Zone, float | None] = field(default_factory=dict)
    missing_tools: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "model_id": self.model.id,
            "model_name": self.model.name,
            "adherence": round(self.adherence, 4),
            "zone_adherence": {
                z.value: (round(v, 4) if v is not None else None)
                for z, v in self.zone_adherence.items()
            },
            "missing_tools": self.missing_tools,
        }


def describe_tool(tool: ToolConfig) -> str:
    """Human-readable checklist line built from a tool's properties."""
    try:
        props = json.loads(tool.properties)
    except (TypeError, ValueError):
        return f"{tool.type} condition"
    if not isinstance(props, dict):
        return f"{tool.type} condition"

    parts = [tool.type]
    if props.get("type"):
        parts.append(str(props["type"]))
    if props.get("direction"):
        parts.append(str(props["direction"]))
    timeframe = props.get("timeframe")
    if isinstance(timeframe, dict) and timeframe.get("value") is not None:
        parts.append(f"{timeframe['value']}{timeframe.get('unit', '')}")
    state = props.get("structuralState")
    if state and state != "Regular":
        parts.append(str(state))
    return " - ".join(parts)


def conditions_from_model(model: Model) -> list[ModelCondition]:
    """Unchecked checklist for a new trade, in zone then tool order."""
    return map_observations(model, ())


def map_observations(
    model: Model, observations: Iterable[Observation]
) -> list[ModelCondition]:
    """Model's full condition list with ``is_checked`` set from observations.

    A condition is checked exactly when its (tool type, zone) pair was
    observed.
    """
    observed = {(o.tool_type, o.zone) for o in observations}
    return [
        ModelCondition(
            id=tool.id,
            zone=zone,
            description=describe_tool(tool),
            is_checked=(tool.type, zone) in observed,
        )
        for zone, tool in model.all_tools()
    ]


def toggle_condition(
    conditions: list[ModelCondition], condition_id: str
) -> list[ModelCondition]:
    """Return a copy with one condition's tick flipped."""
    return [
        c.model_copy(update={"is_checked": not c.is_checked}) if c.id == condition_id else c
        for c in conditions
    ]


def compute_adherence(conditions: list[ModelCondition]) -> float:
    """Fraction of conditions checked (0.0 for an empty checklist)."""
    if not conditions:
        return 0.0
    checked = sum(1 for c in conditions if c.is_checked)
    return checked / len(conditions)


def zone_adherence(conditions: list[ModelCondition]) -> dict[Zone, float | None]:
    """Adherence restricted to each zone; None where a zone is empty."""
    result: dict[Zone, float | None] = {}
    for zone in ZONE_ORDER:
        in_zone = [c for c in conditions if c.zone == zone]
        result[zone] = compute_adherence(in_zone) if in_zone else None
    return result


def score_model(model: Model, observations: Iterable[Observation]) -> ModelMatch:
    """Map observations onto one model and score it."""
    conditions = map_observations(model, observations)
    missing = [
        f"{c.description.split(' - ')[0]} ({c.zone.value})"
        for c in conditions
        if not c.is_checked
    ]
    return ModelMatch(
        model=model,
        conditions=conditions,
        adherence=compute_adherence(conditions),
        zone_adherence=zone_adherence(conditions),
        missing_tools=missing,
    )


def rank_models(
    models: list[Model],
    observations: Iterable[Observation],
    threshold: float = 0.0,
) -> list[ModelMatch]:
    """Models whose adherence is at least ``threshold``, best first.

    Ties keep the models' original order.
    """
    observations = list(observations)
    matches = [score_model(m, observations) for m in models]
    qualifying = [m for m in matches if m.adherence >= threshold]
    logger.debug(
        "%d of %d models qualify at threshold %.2f",
        len(qualifying), len(models), threshold,
    )
    return sorted(qualifying, key=lambda m: -m.adherence)


def available_observations(models: list[Model]) -> dict[Zone, list[str]]:
    """Distinct tool types per zone across all models, sorted by name."""
    found: dict[Zone, set[str]] = {zone: set() for zone in ZONE_ORDER}
    for model in models:
        for zone in ZONE_ORDER:
            found[zone] |= model.tool_types(zone)
    return {zone: sorted(types) for zone, types in found.items()}
