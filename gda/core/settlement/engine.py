"""
Settlement Engine - Owns the auction registry and executes purchases.

Conceptual Background:
---------------------
A purchase is priced on the state *before* the sale, checked against the
buyer's maximum payment, and then settled as one atomic exchange:

1. Pull max_payment from the buyer into engine custody (allowance-checked)
2. Pay the computed price to the seller
3. Deliver the asset to the recipient
4. Return the refund (max_payment - price) to the buyer

Only after every step succeeds (and the new state is persisted, when
storage is configured) is the in-memory state committed. Each completed
step records its reversal, and a failure reverses exactly those steps, newest
first. A rejected purchase therefore leaves its own trace in no ledger, while
unrelated activity on the same ledgers is left alone.

Concurrency:
-----------
Auctions share one payment ledger and one custody account, so the engine
serializes initialization, pricing and settlement behind a single
re-entrant lock. The reference collaborators guard their own state, so
callers outside the engine may use them concurrently.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from gda.core.assets.interfaces import AssetSupply, Clock, FungibleLedger, UniqueAssetRegistry
from gda.core.auction.orders import PurchaseRequest, SettlementResult
from gda.core.auction.params import (
    AuctionParameters,
    ContinuousGDAParams,
    LinearDutchParams,
    parse_parameters,
)
from gda.core.auction.state import AuctionState
from gda.core.config import EngineConfig
from gda.core.errors import (
    AlreadyInitialized,
    AuctionError,
    AuctionNotFound,
    DomainError,
    InsufficientPayment,
    InvalidQuantity,
    NotOwner,
    SelfPurchase,
    SupplyExceeded,
)
from gda.core.pricing import elapsed_since_start, emitted_units, evaluate
from gda.core.settlement.atomic import UndoLog, atomic
from gda.core.storage.storage_manager import StorageManager
from gda.utils.logger import get_logger
from gda.utils.validation import (
    validate_address,
    validate_amount,
    validate_auction_id,
    validate_quantity,
)

logger = get_logger("settlement")


# =============================================================================
# Auction Registry Entry
# =============================================================================


@dataclass
class AuctionRecord:
    """
    One auction known to the engine.

    Attributes:
        auction_id: Registry key
        params: Immutable parameters, start time resolved
        seller: Address receiving payments
        asset: AssetSupply (GDA) or UniqueAssetRegistry (linear Dutch)
        state: Progress, replaced only after a settled purchase
    """
    auction_id: str
    params: AuctionParameters
    seller: str
    asset: Any
    state: AuctionState = field(default_factory=AuctionState)

    @property
    def single_item(self) -> bool:
        return isinstance(self.params, LinearDutchParams)


# =============================================================================
# Settlement Engine
# =============================================================================


class SettlementEngine:
    """
    Prices and settles purchases against registered auctions.

    Example:
        >>> engine = SettlementEngine(ledger, clock)
        >>> engine.initialize("drop-1", params, seller="alice", asset=supply)
        >>> engine.purchase_tokens("drop-1", 2, recipient="bob", max_payment=bid, buyer="bob")
    """

    def __init__(
        self,
        ledger: FungibleLedger,
        clock: Clock,
        config: Optional[EngineConfig] = None,
        storage_manager: Optional[StorageManager] = None,
    ):
        """
        Initialize the engine.

        Args:
            ledger: Payment token ledger
            clock: Time source
            config: Engine configuration. None = defaults.
            storage_manager: Persistence manager. None = built from config
                when config.persist is set, else in-memory only.
        """
        self.config = config or EngineConfig()
        self.address = self.config.engine_address
        self.ledger = ledger
        self.clock = clock

        if storage_manager is None and self.config.persist:
            self.config.ensure_dirs()
            storage_manager = StorageManager(self.config.data_dir, self.config.db_name)
        self.storage_manager = storage_manager

        self._auctions: Dict[str, AuctionRecord] = {}
        self._lock = threading.RLock()

        # Counters
        self._settlements = 0
        self._rejections = 0
        self._volume = 0
        self._units_sold = 0

    # =========================================================================
    # Initialization
    # =========================================================================

    def is_initialized(self, auction_id: str) -> bool:
        """True if the id is registered in memory or in storage."""
        with self._lock:
            if auction_id in self._auctions:
                return True
            return self.storage_manager is not None and self.storage_manager.has_auction(auction_id)

    def initialize(
        self,
        auction_id: str,
        parameters: Union[AuctionParameters, dict],
        seller: str,
        asset: Any,
    ) -> AuctionParameters:
        """
        Register a new auction.

        Args:
            auction_id: Unique id
            parameters: Parameter model, or a dict with a `kind` tag
            seller: Address paid on every sale
            asset: AssetSupply for GDA kinds, UniqueAssetRegistry for linear Dutch

        Returns:
            The stored parameters, start time resolved from the clock if unset

        Raises:
            AlreadyInitialized: id already in use
            NotOwner: linear Dutch seller does not own the token
            DomainError: malformed id or seller
        """
        self._require(validate_auction_id(auction_id))
        self._require(validate_address(seller, "seller"))
        if isinstance(parameters, dict):
            parameters = parse_parameters(parameters)

        with self._lock:
            if self.is_initialized(auction_id):
                raise AlreadyInitialized(f"Auction {auction_id} already initialized")

            self._check_asset(parameters, seller, asset)

            params = parameters.with_start_time(self.clock.now())
            record = AuctionRecord(auction_id=auction_id, params=params, seller=seller, asset=asset)

            if self.storage_manager is not None:
                self.storage_manager.save_auction(auction_id, params, seller, record.state)
            self._auctions[auction_id] = record

        logger.info(
            f"Auction {auction_id} initialized: kind={params.kind} "
            f"seller={seller} start_time={params.start_time}"
        )
        return params

    def restore_auction(self, auction_id: str, asset: Any) -> AuctionRecord:
        """
        Reload a persisted auction after a restart.

        The asset collaborator is not persisted and must be supplied again.

        Raises:
            AuctionNotFound: no storage, or id not persisted
            AlreadyInitialized: id already live in this engine
        """
        with self._lock:
            if auction_id in self._auctions:
                raise AlreadyInitialized(f"Auction {auction_id} already loaded")
            stored = None
            if self.storage_manager is not None:
                stored = self.storage_manager.load_auction(auction_id)
            if stored is None:
                raise AuctionNotFound(f"Auction {auction_id} not found in storage")

            record = AuctionRecord(
                auction_id=stored.auction_id,
                params=stored.params,
                seller=stored.seller,
                asset=asset,
                state=stored.state,
            )
            self._auctions[auction_id] = record

        logger.info(f"Auction {auction_id} restored: sold={record.state.quantity_sold}")
        return record

    # =========================================================================
    # Queries
    # =========================================================================

    def purchase_price(self, auction_id: str, quantity: int) -> int:
        """Current price of `quantity` units; never mutates anything."""
        with self._lock:
            record = self._get(auction_id)
            return evaluate(record.params, record.state, quantity, self.clock.now())

    def get_state(self, auction_id: str) -> AuctionState:
        with self._lock:
            return self._get(auction_id).state

    def get_parameters(self, auction_id: str) -> AuctionParameters:
        with self._lock:
            return self._get(auction_id).params

    def auction_ids(self) -> List[str]:
        with self._lock:
            return list(self._auctions)

    # =========================================================================
    # Purchases
    # =========================================================================

    def purchase_tokens(
        self,
        auction_id: str,
        quantity: int,
        recipient: str,
        max_payment: int,
        buyer: str,
    ) -> SettlementResult:
        """Buy `quantity` units for `recipient`, paying at most `max_payment`."""
        request = PurchaseRequest(
            quantity=quantity,
            max_payment=max_payment,
            recipient=recipient,
            buyer=buyer,
        )
        return self.purchase(auction_id, request)

    def buy(self, auction_id: str, bid: int, buyer: str) -> SettlementResult:
        """Buy a single unit for the buyer itself (the single-item entry point)."""
        return self.purchase_tokens(auction_id, 1, recipient=buyer, max_payment=bid, buyer=buyer)

    def purchase(self, auction_id: str, request: PurchaseRequest) -> SettlementResult:
        """
        Price, validate and settle one purchase.

        Raises:
            AuctionNotFound: unknown auction
            InvalidQuantity / DomainError / Overflow / AlreadySold: from pricing
            SelfPurchase: seller buying from its own auction
            InsufficientPayment: price above max_payment
            SupplyExceeded: emission limit or asset source exhausted
            NotOwner: seller no longer controls the single item
            InsufficientBalance / InsufficientAllowance: buyer cannot pay
        """
        valid, err = validate_quantity(request.quantity)
        if not valid:
            raise InvalidQuantity(err)
        self._require(validate_amount(request.max_payment, "max_payment"))
        self._require(validate_address(request.recipient, "recipient"))
        self._require(validate_address(request.buyer, "buyer"))

        with self._lock:
            record = self._get(auction_id)
            now = self.clock.now()
            try:
                price = evaluate(record.params, record.state, request.quantity, now)
                self._check_purchase(record, request, price, now)

                if record.single_item:
                    new_state = record.state.record_single_sale()
                else:
                    new_state = record.state.record_sale(request.quantity)
                refund = request.max_payment - price

                with atomic() as undo:
                    self._exchange(undo, record, request, price, refund)
                    if self.storage_manager is not None:
                        self.storage_manager.save_state(auction_id, new_state)
            except AuctionError as exc:
                self._rejections += 1
                logger.warning(f"Purchase on {auction_id} by {request.buyer} rejected: {exc}")
                raise

            record.state = new_state
            self._settlements += 1
            self._volume += price
            self._units_sold += request.quantity

        logger.info(
            f"Settled {auction_id}: qty={request.quantity} price={price} "
            f"refund={refund} buyer={request.buyer} recipient={request.recipient}"
        )
        return SettlementResult(
            auction_id=auction_id,
            actual_price=price,
            refund=refund,
            quantity=request.quantity,
            quantity_sold=new_state.quantity_sold,
            buyer=request.buyer,
            recipient=request.recipient,
            timestamp=now,
        )

    def _check_purchase(self, record: AuctionRecord, request: PurchaseRequest, price: int, now: int):
        params = record.params

        if request.buyer == record.seller:
            raise SelfPurchase(f"Seller {record.seller} cannot buy from its own auction")

        if price > request.max_payment:
            raise InsufficientPayment(price, request.max_payment)

        if isinstance(params, ContinuousGDAParams) and params.limit_to_emissions:
            available = emitted_units(params, elapsed_since_start(params, now))
            wanted = record.state.quantity_sold + request.quantity
            if wanted > available:
                raise SupplyExceeded(
                    f"Only {available} units emitted so far, purchase would reach {wanted}"
                )

        if record.single_item:
            owner = record.asset.owner_of(params.token_id)
            if owner != record.seller:
                raise NotOwner(f"Seller {record.seller} no longer owns token {params.token_id}")

    def _exchange(
        self,
        undo: UndoLog,
        record: AuctionRecord,
        request: PurchaseRequest,
        price: int,
        refund: int,
    ):
        buyer, seller, engine = request.buyer, record.seller, self.address

        self.ledger.transfer(buyer, engine, request.max_payment, operator=engine)
        undo.record("payment pull", self.ledger.revert_transfer, buyer, engine, request.max_payment, engine)

        self.ledger.transfer(engine, seller, price)
        undo.record("seller payout", self.ledger.revert_transfer, engine, seller, price, None)

        if record.single_item:
            token_id = record.params.token_id
            previous_owner = record.asset.deliver(request.recipient, token_id, engine)
            undo.record(
                "token delivery",
                record.asset.revert_delivery,
                request.recipient,
                token_id,
                previous_owner,
            )
        else:
            receipt = record.asset.deliver(request.recipient, request.quantity)
            undo.record("asset delivery", record.asset.revert_delivery, request.recipient, receipt)

        if refund > 0:
            self.ledger.transfer(engine, buyer, refund)
            undo.record("refund", self.ledger.revert_transfer, engine, buyer, refund, None)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get(self, auction_id: str) -> AuctionRecord:
        record = self._auctions.get(auction_id)
        if record is None:
            raise AuctionNotFound(f"Auction {auction_id} not found")
        return record

    def _check_asset(self, params: AuctionParameters, seller: str, asset: Any):
        if isinstance(params, LinearDutchParams):
            if not isinstance(asset, UniqueAssetRegistry):
                raise TypeError("Linear Dutch auctions need a unique asset registry")
            owner = asset.owner_of(params.token_id)
            if owner != seller:
                raise NotOwner(f"Token {params.token_id} is owned by {owner}, not {seller}")
        elif not isinstance(asset, AssetSupply):
            raise TypeError(f"{params.kind} auctions need an asset supply")

    @staticmethod
    def _require(check):
        valid, err = check
        if not valid:
            raise DomainError(err)

    # =========================================================================
    # Stats
    # =========================================================================

    def stats(self) -> dict:
        """Get engine statistics."""
        with self._lock:
            by_kind: Dict[str, int] = {}
            for record in self._auctions.values():
                by_kind[record.params.kind] = by_kind.get(record.params.kind, 0) + 1
            return {
                "auctions": len(self._auctions),
                "auctions_by_kind": by_kind,
                "sold_out": sum(1 for r in self._auctions.values() if r.state.sold),
                "settlements": self._settlements,
                "rejections": self._rejections,
                "units_sold": self._units_sold,
                "volume": self._volume,
            }
