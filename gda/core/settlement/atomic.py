"""
Atomic Exchange - All-or-nothing settlement across several collaborators.

Usage:
    with atomic() as undo:
        ledger.transfer(buyer, engine, amount, operator=engine)
        undo.record("payment", ledger.revert_transfer, buyer, engine, amount, engine)
        receipt = supply.deliver(recipient, quantity)
        undo.record("delivery", supply.revert_delivery, recipient, receipt)

Each completed step registers its compensating action. If the block raises,
the recorded actions run newest first and the exception propagates
unchanged. Only the steps of this exchange are reversed; anything else that
touched the collaborators in the meantime stays in place.
"""

from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Tuple

from gda.utils.logger import get_logger

logger = get_logger("settlement.atomic")


class UndoLog:
    """Compensating actions for the completed steps of one exchange."""

    def __init__(self):
        self._steps: List[Tuple[str, Callable[..., Any], tuple]] = []

    def __len__(self) -> int:
        return len(self._steps)

    def record(self, step: str, undo: Callable[..., Any], *args: Any) -> None:
        """Register `undo(*args)` as the reversal of `step`."""
        self._steps.append((step, undo, args))

    def rollback(self) -> List[Tuple[str, Exception]]:
        """
        Run every recorded action, newest first.

        A failing action does not stop the others.

        Returns:
            (step, exception) for each action that failed
        """
        failures = []
        while self._steps:
            step, undo, args = self._steps.pop()
            try:
                undo(*args)
            except Exception as exc:
                logger.error(f"Could not undo {step}: {exc}")
                failures.append((step, exc))
        return failures


@contextmanager
def atomic() -> Iterator[UndoLog]:
    undo = UndoLog()
    try:
        yield undo
    except Exception as exc:
        steps = len(undo)
        failures = undo.rollback()
        for step, failure in failures:
            exc.add_note(f"rollback of {step} failed: {failure}")
        logger.debug(f"Rolled back {steps - len(failures)} of {steps} steps")
        raise
