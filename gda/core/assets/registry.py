"""
In-Memory Unique Asset Registry - Reference registry of unique tokens.

Ownership follows an ERC-721 style model: each token id has one owner, and
an owner can approve an operator for all of its tokens. Transfers succeed
only for the owner or an approved operator.
"""

import threading
from typing import Dict, Optional, Set

from gda.core.errors import NotOwner
from gda.utils.logger import get_logger

logger = get_logger("assets.registry")


class InMemoryUniqueAssetRegistry:
    """
    Unique token registry held in memory.

    Attributes:
        owners: token_id -> owner address
        operators: owner -> operators approved for all of its tokens
    """

    def __init__(self):
        self.owners: Dict[int, str] = {}
        self.operators: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def owner_of(self, token_id: int) -> Optional[str]:
        return self.owners.get(token_id)

    def balance_of(self, owner: str) -> int:
        return sum(1 for holder in self.owners.values() if holder == owner)

    def tokens_of(self, owner: str) -> list:
        return sorted(tid for tid, holder in self.owners.items() if holder == owner)

    def is_approved(self, owner: str, operator: str) -> bool:
        return operator == owner or operator in self.operators.get(owner, set())

    def mint(self, owner: str, token_id: int) -> None:
        """Create `token_id` owned by `owner`."""
        if token_id < 0:
            raise ValueError(f"Token id must be non-negative, got {token_id}")
        with self._lock:
            if token_id in self.owners:
                raise ValueError(f"Token {token_id} already exists")
            self.owners[token_id] = owner

    def burn(self, owner: str, token_id: int) -> None:
        """Destroy `token_id`, which must still belong to `owner`."""
        with self._lock:
            if self.owners.get(token_id) != owner:
                raise NotOwner(f"Token {token_id} is not owned by {owner}")
            del self.owners[token_id]

    def set_approval_for_all(self, owner: str, operator: str, approved: bool = True) -> None:
        """Grant or revoke `operator`'s right to move all of `owner`'s tokens."""
        with self._lock:
            if approved:
                self.operators.setdefault(owner, set()).add(operator)
            else:
                self.operators.get(owner, set()).discard(operator)

    def deliver(self, recipient: str, token_id: int, operator: str) -> str:
        """
        Move `token_id` from its owner to `recipient`.

        Returns:
            The previous owner

        Raises:
            NotOwner: token missing, or operator neither owner nor approved
        """
        with self._lock:
            owner = self.owner_of(token_id)
            if owner is None:
                raise NotOwner(f"Token {token_id} does not exist")
            if not self.is_approved(owner, operator):
                raise NotOwner(f"{operator} is not approved to move token {token_id} of {owner}")
            self.owners[token_id] = recipient

        logger.debug(f"token {token_id}: {owner} -> {recipient}")
        return owner

    def revert_delivery(self, recipient: str, token_id: int, previous_owner: str) -> None:
        """
        Hand `token_id` back from `recipient` to `previous_owner`.

        Raises:
            NotOwner: `recipient` no longer holds the token
        """
        with self._lock:
            if self.owners.get(token_id) != recipient:
                raise NotOwner(f"Token {token_id} is no longer held by {recipient}")
            self.owners[token_id] = previous_owner

        logger.debug(f"token {token_id} returned: {recipient} -> {previous_owner}")
