"""Trade journal: persistence-facing orchestration.

TradeJournal         Opens trades, saves outcomes, builds summaries
InMemoryTradeStore   Dict-backed trade store
InMemoryModelStore   Dict-backed model store
"""

from .service import TradeJournal
from .store import InMemoryModelStore, InMemoryTradeStore, load_json_records

__all__ = [
    "InMemoryModelStore",
    "InMemoryTradeStore",
    "TradeJournal",
    "load_json_records",
]
