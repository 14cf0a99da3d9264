"""In-process publish/subscribe for style updates.

Resolvers own one bus each and publish (owner key, resolved value) after a
successful mutation. Subscribers hold the unsubscribe handle returned by
subscribe() and release it when they go away.
"""

import inspect
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from stylecast.observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class StyleUpdateBus(Generic[T]):
    """Observer registry delivering (owner_key, value) to listeners.

    Listeners may be plain or async callables. A failing listener is logged
    and does not prevent delivery to the others.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Callable[[str, T], Awaitable[None] | None]] = []

    def subscribe(self, listener: Callable[[str, T], Awaitable[None] | None]) -> Callable[[], None]:
        """Register listener and return a callable that removes it."""
        if listener not in self._listeners:
            self._listeners.append(listener)
            logger.debug(
                "style_listener_registered",
                bus=self.name,
                total_listeners=len(self._listeners),
            )

        def _unsubscribe() -> None:
            self.unsubscribe(listener)

        return _unsubscribe

    def unsubscribe(self, listener: Callable[[str, T], Awaitable[None] | None]) -> bool:
        """Remove listener. Returns False if it was not registered."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        logger.debug(
            "style_listener_unregistered",
            bus=self.name,
            remaining_listeners=len(self._listeners),
        )
        return True

    def __len__(self) -> int:
        return len(self._listeners)

    async def publish(self, owner_key: str, value: T) -> None:
        """Deliver an update to every listener registered at call time."""
        for listener in list(self._listeners):
            try:
                result = listener(owner_key, value)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    "style_listener_failed",
                    bus=self.name,
                    owner_key=owner_key,
                    error=str(e),
                    error_type=type(e).__name__,
                )
