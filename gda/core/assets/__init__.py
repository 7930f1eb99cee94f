"""
GDA Assets Module.

Interfaces the settlement engine consumes, plus in-memory reference
implementations used by tests, the CLI demo and embedders:

- Clocks (manual and wall clock)
- Fungible payment ledger with allowances
- Unique asset registry with operator approvals
- Mintable fungible supply and sequential token supply
"""

from gda.core.assets.interfaces import (
    AssetSupply,
    Clock,
    FungibleLedger,
    UniqueAssetRegistry,
)

from gda.core.assets.clock import ManualClock, SystemClock
from gda.core.assets.ledger import InMemoryLedger
from gda.core.assets.registry import InMemoryUniqueAssetRegistry
from gda.core.assets.supply import FungibleMintableSupply, SequentialTokenSupply

__all__ = [
    # Interfaces
    "AssetSupply",
    "Clock",
    "FungibleLedger",
    "UniqueAssetRegistry",
    # Reference implementations
    "ManualClock",
    "SystemClock",
    "InMemoryLedger",
    "InMemoryUniqueAssetRegistry",
    "FungibleMintableSupply",
    "SequentialTokenSupply",
]
