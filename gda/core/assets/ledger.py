"""
In-Memory Ledger - Reference payment token ledger.

Balances and allowances live in plain dicts keyed by address. The shape
follows an ERC-20 style token: an owner approves an operator for an
amount, and operator-initiated transfers consume that allowance. Every
mutation runs under an internal lock, so the ledger can be shared between
threads.
"""

import threading
from typing import Dict, Optional

from gda.core.errors import DomainError, InsufficientAllowance, InsufficientBalance
from gda.utils.logger import get_logger
from gda.utils.validation import validate_address, validate_amount

logger = get_logger("assets.ledger")


class InMemoryLedger:
    """
    Fungible payment ledger held in memory.

    Attributes:
        balances: address -> balance (WAD)
        allowances: owner -> operator -> approved amount (WAD)
    """

    def __init__(self):
        self.balances: Dict[str, int] = {}
        self.allowances: Dict[str, Dict[str, int]] = {}
        self._lock = threading.Lock()

    # =========================================================================
    # Queries
    # =========================================================================

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def allowance(self, owner: str, operator: str) -> int:
        return self.allowances.get(owner, {}).get(operator, 0)

    def total_supply(self) -> int:
        return sum(self.balances.values())

    # =========================================================================
    # Mutations
    # =========================================================================

    def mint(self, account: str, amount: int) -> None:
        """Credit new tokens to `account`."""
        self._check(account, amount)
        with self._lock:
            self.balances[account] = self.balance_of(account) + amount

    def approve(self, owner: str, operator: str, amount: int) -> None:
        """Let `operator` move up to `amount` of `owner`'s tokens."""
        self._check(owner, amount)
        with self._lock:
            self.allowances.setdefault(owner, {})[operator] = amount

    def transfer(
        self,
        source: str,
        destination: str,
        amount: int,
        operator: Optional[str] = None,
    ) -> None:
        """
        Move `amount` from `source` to `destination`.

        Args:
            source: Paying account
            destination: Receiving account
            amount: Amount in WAD
            operator: Account initiating the move; None means `source` itself

        Raises:
            InsufficientAllowance: operator not approved for `amount`
            InsufficientBalance: `source` balance below `amount`
        """
        self._check(source, amount)
        self._check(destination, amount)

        with self._lock:
            if operator is not None and operator != source:
                approved = self.allowance(source, operator)
                if approved < amount:
                    raise InsufficientAllowance(
                        f"{operator} may move {approved} of {source}'s tokens, needs {amount}"
                    )
            else:
                approved = None

            balance = self.balance_of(source)
            if balance < amount:
                raise InsufficientBalance(f"{source} holds {balance}, needs {amount}")

            if approved is not None:
                self.allowances[source][operator] = approved - amount
            self.balances[source] = balance - amount
            self.balances[destination] = self.balance_of(destination) + amount

        logger.debug(f"transfer {amount}: {source} -> {destination}")

    def revert_transfer(
        self,
        source: str,
        destination: str,
        amount: int,
        operator: Optional[str] = None,
    ) -> None:
        """
        Undo one completed transfer with the same arguments.

        Moves `amount` from `destination` back to `source` and gives back the
        allowance the transfer consumed. Balances of other accounts, and any
        later approvals, are left as they are.

        Raises:
            InsufficientBalance: `destination` no longer holds `amount`
        """
        self._check(source, amount)
        self._check(destination, amount)

        with self._lock:
            balance = self.balance_of(destination)
            if balance < amount:
                raise InsufficientBalance(
                    f"{destination} holds {balance}, cannot return {amount} to {source}"
                )
            self.balances[destination] = balance - amount
            self.balances[source] = self.balance_of(source) + amount

            if operator is not None and operator != source:
                approved = self.allowances.setdefault(source, {})
                approved[operator] = approved.get(operator, 0) + amount

        logger.debug(f"reverted transfer {amount}: {destination} -> {source}")

    @staticmethod
    def _check(account: str, amount: int) -> None:
        valid, err = validate_address(account)
        if not valid:
            raise DomainError(err)
        valid, err = validate_amount(amount)
        if not valid:
            raise DomainError(err)
