"""In-process publish/subscribe channel for storage change messages.

Several local stores (one per open session of the same user) share a channel.
A store publishes the serialized snapshot of a collection after each write and
the other stores replace their in-memory copy with it. Delivery is synchronous,
at most once per subscriber, and in publish order for each key.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Optional

from promoterflow.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


@dataclass(frozen=True)
class ChangeMessage:
    key: str
    value: Optional[str]
    origin: str


ChangeHandler = Callable[[ChangeMessage], None]


class ChangeChannel:
    """Storage-changed signal keyed by storage key."""

    def __init__(self):
        self._handlers: dict[str, list[ChangeHandler]] = defaultdict(list)

    def subscribe(self, key: str, handler: ChangeHandler) -> Callable[[], None]:
        """Register ``handler`` for ``key``; returns an unsubscribe callable."""
        self._handlers[key].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers.get(key, []):
                self._handlers[key].remove(handler)

        return unsubscribe

    def publish(self, key: str, value: Optional[str], origin: str) -> None:
        message = ChangeMessage(key=key, value=value, origin=origin)
        for handler in list(self._handlers.get(key, [])):
            try:
                handler(message)
            except Exception as e:
                logger.error(
                    "Change handler failed",
                    key=key,
                    origin=origin,
                    error=str(e),
                    exc_info=True
                )
