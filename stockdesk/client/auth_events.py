from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Callable

from stockdesk.core.logging import get_logger
from stockdesk.domain.enums import AuthEvent

logger = get_logger(__name__)

AuthCallback = Callable[[AuthEvent, dict[str, Any] | None], None]

_ids = itertools.count(1)


@dataclass(slots=True)
class AuthSubscription:
    callback: AuthCallback
    _registry: "AuthListeners"
    id: int = field(default_factory=lambda: next(_ids))
    active: bool = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._registry.discard(self.id)


class AuthListeners:
    """Registry of ``on_auth_state_change`` callbacks."""

    def __init__(self) -> None:
        self._listeners: dict[int, AuthSubscription] = {}

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, callback: AuthCallback, initial: tuple[AuthEvent, dict[str, Any] | None]) -> AuthSubscription:
        event, session = initial
        # a callback that fails on the initial state is never registered
        callback(event, session)
        subscription = AuthSubscription(callback=callback, _registry=self)
        self._listeners[subscription.id] = subscription
        return subscription

    def discard(self, subscription_id: int) -> None:
        self._listeners.pop(subscription_id, None)

    def emit(self, event: AuthEvent, session: dict[str, Any] | None) -> None:
        for subscription in list(self._listeners.values()):
            try:
                subscription.callback(event, session)
            except Exception:
                # one broken listener must not stop delivery to the rest
                logger.exception("Auth listener %s failed on %s", subscription.id, event.value)
