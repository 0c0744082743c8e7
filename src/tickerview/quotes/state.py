"""Observable holder for the current FetchState."""

from __future__ import annotations

import logging
from collections.abc import Callable

from tickerview.core.models import FetchState, Idle

logger = logging.getLogger(__name__)

StateListener = Callable[[FetchState], None]


class StateCell:
    """Single owned cell for the externally visible fetch state.

    ``publish`` replaces the value wholesale and then notifies every
    subscriber with the new value, in subscription order. Subscribers run
    synchronously on the publishing coroutine; a listener that raises is
    logged and does not stop the others.
    """

    def __init__(self, initial: FetchState | None = None) -> None:
        self._value: FetchState = initial if initial is not None else Idle()
        self._listeners: list[StateListener] = []

    @property
    def value(self) -> FetchState:
        return self._value

    def publish(self, state: FetchState) -> None:
        self._value = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener %r failed", listener)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
