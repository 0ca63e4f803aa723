"""In-memory implementations of the storage protocols.

Records are copied on the way in and out, so a caller mutating a trade
it fetched does not change what is stored until it saves again.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from tradebook.core.errors import ConfigError
from tradebook.core.models import Model, Trade


class InMemoryTradeStore:
    """Dict-backed :class:`~tradebook.core.interfaces.TradeStore`."""

    def __init__(self, trades: Iterable[Trade] = ()) -> None:
        self._trades: dict[str, Trade] = {}
        for trade in trades:
            self.save(trade)

    def list(self) -> list[Trade]:
        return [t.model_copy(deep=True) for t in self._trades.values()]

    def get(self, trade_id: str) -> Trade | None:
        trade = self._trades.get(trade_id)
        return trade.model_copy(deep=True) if trade is not None else None

    def save(self, trade: Trade) -> None:
        self._trades[trade.id] = trade.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._trades)


class InMemoryModelStore:
    """Dict-backed :class:`~tradebook.core.interfaces.ModelStore`."""

    def __init__(self, models: Iterable[Model] = ()) -> None:
        self._models: dict[str, Model] = {}
        for model in models:
            self.add(model)

    def list(self) -> list[Model]:
        return [m.model_copy(deep=True) for m in self._models.values()]

    def get(self, model_id: str) -> Model | None:
        model = self._models.get(model_id)
        return model.model_copy(deep=True) if model is not None else None

    def add(self, model: Model) -> None:
        self._models[model.id] = model.model_copy(deep=True)


def load_json_records(path: str | Path) -> list[dict]:
    """Read a JSON file holding a list of records (or ``{"items": [...]}``)."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("items", [])
    if not isinstance(data, list):
        raise ConfigError(f"{path} must contain a list of records")
    return data
