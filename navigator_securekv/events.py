"""Change notification for store mutations."""
import logging
from typing import Callable
from dataclasses import dataclass

from .conf import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

SET = "set"
REMOVE = "remove"
EXPIRE = "expire"


@dataclass(frozen=True)
class StoreEvent:
    action: str
    key: str


Listener = Callable[[StoreEvent], None]


class ChangeNotifier:
    """Publish/subscribe channel, notified synchronously after a mutation.

    ``subscribe()`` returns an unsubscribe callable that removes exactly
    the registration it was returned for, even when the same callback
    was registered more than once.
    """

    def __init__(self) -> None:
        self._listeners: list[tuple[object, Listener]] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        token = object()
        self._listeners.append((token, listener))

        def unsubscribe() -> None:
            self._listeners = [
                (t, fn) for t, fn in self._listeners if t is not token
            ]

        return unsubscribe

    def __len__(self) -> int:
        return len(self._listeners)

    def notify(self, action: str, key: str) -> None:
        event = StoreEvent(action=action, key=key)
        # snapshot: listeners may unsubscribe while being notified
        for _, listener in list(self._listeners):
            try:
                listener(event)
            except Exception as err:  # pylint: disable=W0718
                logger.error(
                    "Store listener failed on %s of key=%s: %s",
                    action, key, err,
                )
