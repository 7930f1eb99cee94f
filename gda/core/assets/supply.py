"""
Asset Supplies - Sources of newly issued units for GDA auctions.

- FungibleMintableSupply: mints fungible units on demand (continuous GDA)
- SequentialTokenSupply:  mints unique token ids 0, 1, 2, ... into a
  registry (discrete GDA)

Both accept an optional cap; asking for more than remains raises
SupplyExceeded and changes nothing. deliver() returns a receipt that
revert_delivery() accepts to take exactly that delivery back.
"""

import threading
from typing import Dict, List, Optional

from gda.core.assets.registry import InMemoryUniqueAssetRegistry
from gda.core.errors import InvalidQuantity, NotOwner, SupplyExceeded
from gda.utils.logger import get_logger

logger = get_logger("assets.supply")


class FungibleMintableSupply:
    """
    Mintable fungible asset, counted in whole units.

    Attributes:
        max_supply: Cap on total units issued, None for unbounded
        issued: Units issued so far
        holdings: address -> units held
    """

    def __init__(self, max_supply: Optional[int] = None):
        self.max_supply = max_supply
        self.issued = 0
        self.holdings: Dict[str, int] = {}
        self._lock = threading.Lock()

    def balance_of(self, account: str) -> int:
        return self.holdings.get(account, 0)

    @property
    def remaining(self) -> Optional[int]:
        if self.max_supply is None:
            return None
        return self.max_supply - self.issued

    def deliver(self, recipient: str, quantity: int) -> int:
        """Issue `quantity` units to `recipient`; the receipt is the quantity."""
        if quantity <= 0:
            raise InvalidQuantity(f"Quantity must be positive, got {quantity}")
        with self._lock:
            if self.max_supply is not None and self.issued + quantity > self.max_supply:
                raise SupplyExceeded(
                    f"Cannot issue {quantity} units: {self.remaining} of {self.max_supply} remain"
                )
            self.issued += quantity
            self.holdings[recipient] = self.balance_of(recipient) + quantity
        logger.debug(f"issued {quantity} units to {recipient}")
        return quantity

    def revert_delivery(self, recipient: str, quantity: int) -> None:
        """Take back `quantity` units issued to `recipient`."""
        with self._lock:
            held = self.balance_of(recipient)
            if held < quantity:
                raise InvalidQuantity(f"{recipient} holds {held} units, cannot return {quantity}")
            self.holdings[recipient] = held - quantity
            self.issued -= quantity
        logger.debug(f"took back {quantity} units from {recipient}")


class SequentialTokenSupply:
    """
    Mints consecutive token ids into a unique asset registry.

    Attributes:
        registry: Registry receiving the minted tokens
        next_token_id: Id the next delivered token will get
        max_supply: Cap on live tokens minted, None for unbounded
    """

    def __init__(
        self,
        registry: Optional[InMemoryUniqueAssetRegistry] = None,
        max_supply: Optional[int] = None,
        first_token_id: int = 0,
    ):
        self.registry = registry if registry is not None else InMemoryUniqueAssetRegistry()
        self.max_supply = max_supply
        self.first_token_id = first_token_id
        self.next_token_id = first_token_id
        self.burned = 0
        self._lock = threading.Lock()

    @property
    def minted(self) -> int:
        return self.next_token_id - self.first_token_id - self.burned

    def deliver(self, recipient: str, quantity: int) -> List[int]:
        """Mint `quantity` new tokens to `recipient`; the receipt is their ids."""
        if quantity <= 0:
            raise InvalidQuantity(f"Quantity must be positive, got {quantity}")
        with self._lock:
            if self.max_supply is not None and self.minted + quantity > self.max_supply:
                raise SupplyExceeded(
                    f"Cannot mint {quantity} tokens: {self.max_supply - self.minted} remain"
                )
            token_ids = list(range(self.next_token_id, self.next_token_id + quantity))
            for token_id in token_ids:
                self.registry.mint(recipient, token_id)
            self.next_token_id += quantity
        logger.debug(f"minted {quantity} tokens to {recipient}, next id {self.next_token_id}")
        return token_ids

    def revert_delivery(self, recipient: str, token_ids: List[int]) -> None:
        """
        Burn tokens minted by one delivery.

        The ids are reused when no later delivery happened in between;
        otherwise they stay retired.
        """
        with self._lock:
            for token_id in token_ids:
                if self.registry.owner_of(token_id) != recipient:
                    raise NotOwner(f"Token {token_id} is no longer held by {recipient}")
            for token_id in token_ids:
                self.registry.burn(recipient, token_id)
            if token_ids and self.next_token_id == token_ids[-1] + 1:
                self.next_token_id = token_ids[0]
            else:
                self.burned += len(token_ids)
        logger.debug(f"burned tokens {token_ids} of {recipient}")
