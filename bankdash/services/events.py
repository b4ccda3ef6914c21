"""
Owner-scoped change notification.

After a mutation commits, the service publishes a ``LedgerChange`` for the
affected owner so independent views can refresh. This is a local pub/sub,
not a network protocol.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from bankdash.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LedgerChange:
    """What changed in an owner's ledger."""
    owner_id: str
    action: str
    account_ids: Tuple[str, ...] = ()
    transaction_ids: Tuple[str, ...] = ()
    card_ids: Tuple[str, ...] = ()


Subscriber = Callable[[LedgerChange], None]


class ChangeNotifier:
    """Registry of change subscribers keyed by owner id."""

    def __init__(self):
        self._subscribers: Dict[str, List[Subscriber]] = defaultdict(list)

    def subscribe(self, owner_id: str, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for an owner. Returns a function that unsubscribes it."""
        self._subscribers[owner_id].append(callback)

        def unsubscribe():
            callbacks = self._subscribers.get(owner_id, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._subscribers.pop(owner_id, None)

        return unsubscribe

    def publish(self, change: LedgerChange) -> None:
        """
        Deliver a change to the owner's subscribers.

        The mutation has already committed, so a failing subscriber is
        logged and the remaining subscribers still run.
        """
        for callback in list(self._subscribers.get(change.owner_id, [])):
            try:
                callback(change)
            except Exception:
                logger.exception("change_subscriber_failed", owner_id=change.owner_id, action=change.action)
