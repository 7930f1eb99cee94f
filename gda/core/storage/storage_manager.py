from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from gda.core.auction.params import AuctionParameters, parameters_from_json, parameters_to_json
from gda.core.auction.state import AuctionState
from gda.core.storage.sqlite_adapter import SQLiteAdapter
from gda.utils.logger import get_logger

logger = get_logger("storage.manager")


@dataclass(frozen=True)
class StoredAuction:
    """An auction as read back from storage."""
    auction_id: str
    params: AuctionParameters
    seller: str
    state: AuctionState
    created_at: int


class StorageManager:
    """
    Manages persistent storage for the settlement engine.

    Converts between domain objects and the SQLite rows:
    - Parameters travel as JSON produced by the pydantic models
    - State travels as (quantity_sold, sold)
    """

    def __init__(self, data_dir: Path, db_name: str = "auctions.db"):
        self.data_dir = Path(data_dir)
        self.db_path = self.data_dir / db_name
        self.adapter = SQLiteAdapter(self.db_path)

        logger.info(f"StorageManager initialized at {self.db_path}")

    # =========================================================================
    # Writes
    # =========================================================================

    def save_auction(self, auction_id: str, params: AuctionParameters, seller: str, state: AuctionState):
        """Persist a new auction together with its initial state."""
        self.adapter.insert_auction(
            auction_id,
            params.kind,
            parameters_to_json(params),
            seller,
            state.quantity_sold,
            state.sold,
        )

    def save_state(self, auction_id: str, state: AuctionState):
        """Persist the state of an existing auction."""
        self.adapter.update_state(auction_id, state.quantity_sold, state.sold)

    # =========================================================================
    # Reads
    # =========================================================================

    def has_auction(self, auction_id: str) -> bool:
        return self.adapter.has_auction(auction_id)

    def load_auction(self, auction_id: str) -> Optional[StoredAuction]:
        row = self.adapter.get_auction(auction_id)
        return self._from_row(row) if row else None

    def list_auctions(self) -> List[StoredAuction]:
        return [self._from_row(row) for row in self.adapter.get_all_auctions()]

    def close(self):
        self.adapter.close()

    @staticmethod
    def _from_row(row) -> StoredAuction:
        return StoredAuction(
            auction_id=row["auction_id"],
            params=parameters_from_json(row["params"]),
            seller=row["seller"],
            state=AuctionState(quantity_sold=int(row["quantity_sold"]), sold=bool(row["sold"])),
            created_at=row["created_at"],
        )
