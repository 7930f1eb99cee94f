"""
GDA Settlement Module.

- SettlementEngine: auction registry, pricing and atomic purchase settlement
- atomic / UndoLog: per-step compensation across collaborators
"""

from gda.core.settlement.atomic import UndoLog, atomic
from gda.core.settlement.engine import AuctionRecord, SettlementEngine

__all__ = ["atomic", "UndoLog", "AuctionRecord", "SettlementEngine"]
