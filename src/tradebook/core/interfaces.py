"""Protocol interfaces for the storage collaborators.

Persistence lives outside the engine.  Anything that satisfies these
protocols (a database repository, an HTTP client, the in-memory stores
in :mod:`tradebook.journal.store`) can back the journal service.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import Model, Trade


@runtime_checkable
class TradeStore(Protocol):
    """Read/write access to journaled trades."""

    def list(self) -> list[Trade]: ...

    def get(self, trade_id: str) -> Trade | None: ...

    def save(self, trade: Trade) -> None: ...


@runtime_checkable
class ModelStore(Protocol):
    """Read access to trading models."""

    def list(self) -> list[Model]: ...

    def get(self, model_id: str) -> Model | None: ...
