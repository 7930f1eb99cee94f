import sqlite3
import threading
import time
from pathlib import Path
from typing import List, Optional

from gda.utils.logger import get_logger

logger = get_logger("storage.sqlite")


class SQLiteAdapter:
    """
    SQLite backend for auction persistence.

    Two tables, one row per auction in each:
    1. auctions:      immutable parameters (JSON) and seller
    2. auction_state: quantity sold and the sold flag

    Amounts can exceed SQLite's 64-bit INTEGER, so quantity_sold is stored
    as decimal TEXT.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._conn_local = threading.local()

        if not db_path.parent.exists():
            db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create connection for current thread."""
        if not hasattr(self._conn_local, "conn"):
            self._conn_local.conn = sqlite3.connect(
                self.db_path,
                timeout=30.0,
                check_same_thread=False
            )
            self._conn_local.conn.row_factory = sqlite3.Row
            self._conn_local.conn.execute("PRAGMA journal_mode=WAL;")
            self._conn_local.conn.execute("PRAGMA synchronous=NORMAL;")
        return self._conn_local.conn

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_conn()
        with conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS auctions (
                    auction_id TEXT PRIMARY KEY,
                    kind TEXT NOT NULL,
                    params TEXT NOT NULL,
                    seller TEXT NOT NULL,
                    created_at INTEGER NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_auction_kind ON auctions(kind);")

            conn.execute("""
                CREATE TABLE IF NOT EXISTS auction_state (
                    auction_id TEXT PRIMARY KEY,
                    quantity_sold TEXT NOT NULL,
                    sold INTEGER NOT NULL DEFAULT 0,
                    updated_at INTEGER NOT NULL
                )
            """)

    def close(self):
        """Close this thread's connection, if any."""
        conn = getattr(self._conn_local, "conn", None)
        if conn is not None:
            conn.close()
            del self._conn_local.conn

    # =========================================================================
    # Auction Operations
    # =========================================================================

    def insert_auction(
        self,
        auction_id: str,
        kind: str,
        params_json: str,
        seller: str,
        quantity_sold: int = 0,
        sold: bool = False,
    ):
        """Insert an auction and its initial state in one transaction."""
        now = int(time.time())
        conn = self._get_conn()
        with conn:
            conn.execute(
                "INSERT INTO auctions (auction_id, kind, params, seller, created_at) VALUES (?, ?, ?, ?, ?)",
                (auction_id, kind, params_json, seller, now)
            )
            conn.execute(
                "INSERT INTO auction_state (auction_id, quantity_sold, sold, updated_at) VALUES (?, ?, ?, ?)",
                (auction_id, str(quantity_sold), int(sold), now)
            )

    def update_state(self, auction_id: str, quantity_sold: int, sold: bool):
        """Overwrite the state row of an auction."""
        conn = self._get_conn()
        with conn:
            conn.execute(
                "INSERT OR REPLACE INTO auction_state (auction_id, quantity_sold, sold, updated_at) VALUES (?, ?, ?, ?)",
                (auction_id, str(quantity_sold), int(sold), int(time.time()))
            )

    def get_auction(self, auction_id: str) -> Optional[sqlite3.Row]:
        """Get an auction joined with its state."""
        conn = self._get_conn()
        cursor = conn.execute(
            """
            SELECT a.auction_id, a.kind, a.params, a.seller, a.created_at,
                   s.quantity_sold, s.sold, s.updated_at
            FROM auctions a JOIN auction_state s ON a.auction_id = s.auction_id
            WHERE a.auction_id = ?
            """,
            (auction_id,)
        )
        return cursor.fetchone()

    def get_all_auctions(self) -> List[sqlite3.Row]:
        """Get every auction joined with its state, oldest first."""
        conn = self._get_conn()
        cursor = conn.execute(
            """
            SELECT a.auction_id, a.kind, a.params, a.seller, a.created_at,
                   s.quantity_sold, s.sold, s.updated_at
            FROM auctions a JOIN auction_state s ON a.auction_id = s.auction_id
            ORDER BY a.created_at ASC, a.auction_id ASC
            """
        )
        return list(cursor)

    def has_auction(self, auction_id: str) -> bool:
        conn = self._get_conn()
        cursor = conn.execute("SELECT 1 FROM auctions WHERE auction_id = ?", (auction_id,))
        return cursor.fetchone() is not None
