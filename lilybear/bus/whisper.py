"""Synchronous addressed publish/subscribe bus."""

import itertools
import threading
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from lilybear.bus.events import BROADCAST, HandlerFault, WhisperMessage
from lilybear.bus.registry import AddressRegistry
from lilybear.utils.helpers import truncate_string

WhisperHandler = Callable[[WhisperMessage], None]
FaultCallback = Callable[[HandlerFault], None]


@dataclass(frozen=True)
class SubscriptionHandle:
    """Token returned by `WhisperBus.subscribe`, used to unsubscribe."""

    id: int
    name: str


@dataclass
class _Subscription:
    handle: SubscriptionHandle
    handler: WhisperHandler
    active: bool = True


class WhisperBus:
    """
    In-process bus delivering whispers to named subscribers.

    A whisper addressed to a name reaches every subscriber registered under
    that name plus every subscriber registered under the broadcast address.
    A whisper addressed to the broadcast address reaches everyone.

    Dispatch happens on the publishing thread, in subscription order, over a
    snapshot of the subscriber list taken when the publish starts: handlers
    subscribed meanwhile wait for the next publish, handlers unsubscribed
    meanwhile are skipped. A handler that raises is logged and skipped; the
    remaining handlers still run.
    """

    def __init__(self, on_fault: FaultCallback | None = None):
        self._subscriptions: list[_Subscription] = []
        self._registry = AddressRegistry()
        self._ids = itertools.count(1)
        self._lock = threading.RLock()  # Re-entrant: handlers may publish
        self._on_fault = on_fault

    @property
    def registry(self) -> AddressRegistry:
        return self._registry

    @property
    def subscribers(self) -> list[str]:
        """Names of all live subscriptions, in subscription order."""
        with self._lock:
            return [s.handle.name for s in self._subscriptions]

    def subscribe(self, name: str, handler: WhisperHandler) -> SubscriptionHandle:
        """Register `handler` for whispers to `name` (or to everyone)."""
        with self._lock:
            handle = SubscriptionHandle(id=next(self._ids), name=name)
            self._subscriptions.append(_Subscription(handle, handler))
            self._registry.add(name)
        logger.debug("Subscribed {} (#{})", name, handle.id)
        return handle

    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        """Remove the subscription behind `handle`. Unknown handles are ignored."""
        with self._lock:
            for i, sub in enumerate(self._subscriptions):
                if sub.handle == handle:
                    sub.active = False
                    del self._subscriptions[i]
                    self._registry.discard(handle.name)
                    logger.debug("Unsubscribed {} (#{})", handle.name, handle.id)
                    return

    def publish(self, msg: WhisperMessage) -> int:
        """
        Deliver `msg` to every matching subscriber.

        Returns:
            Number of handlers invoked (including ones that failed).
        """
        with self._lock:
            snapshot = [s for s in self._subscriptions if self._matches(s.handle.name, msg.to)]
            logger.debug(
                "[bus] {} → {}: {}", msg.sender, msg.to, truncate_string(msg.body, 120)
            )
            invoked = 0
            for sub in snapshot:
                if not sub.active:  # Unsubscribed by an earlier handler in this dispatch
                    continue
                self._deliver(sub, msg)
                invoked += 1
            return invoked

    @staticmethod
    def _matches(subscribed_as: str, to: str) -> bool:
        return to == BROADCAST or subscribed_as == to or subscribed_as == BROADCAST

    def _deliver(self, sub: _Subscription, msg: WhisperMessage) -> None:
        try:
            sub.handler(msg)
        except Exception as e:
            logger.exception(
                "Whisper handler for {} failed on message from {}: {}",
                sub.handle.name,
                msg.sender,
                e,
            )
            if self._on_fault is not None:
                fault = HandlerFault(subscriber=sub.handle.name, message=msg, error=e)
                try:
                    self._on_fault(fault)
                except Exception as cb_err:
                    logger.error("Fault callback raised: {}", cb_err)
