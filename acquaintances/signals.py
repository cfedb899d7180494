"""
Lifecycle signals emitted by the verification store.

The store only announces *that* something happened; delivery (notifications,
queues, websockets) belongs to whoever subscribes. Callbacks are invoked
synchronously, in subscription order, with ``(signal, initiator, counterparty)``.
"""
import enum
import logging
from typing import Callable, Dict, List

from acquaintances.models import PartyRef

logger = logging.getLogger(__name__)

SignalCallback = Callable[["LifecycleSignal", PartyRef, PartyRef], None]


class LifecycleSignal(str, enum.Enum):
    SENT = "verification.sent"
    ACCEPTED = "verification.accepted"
    DENIED = "verification.denied"
    CANCELLED = "verification.cancelled"


class SignalDispatcher:
    def __init__(self):
        self.subscribers: Dict[LifecycleSignal, List[SignalCallback]] = {}

    def subscribe(self, signal: LifecycleSignal, callback: SignalCallback):
        """Subscribe a callback to a signal"""
        signal = LifecycleSignal(signal)
        self.subscribers.setdefault(signal, []).append(callback)
        logger.debug(f"Subscribed to {signal.value}")

    def subscribe_all(self, callback: SignalCallback):
        """Subscribe a callback to every lifecycle signal"""
        for signal in LifecycleSignal:
            self.subscribe(signal, callback)

    def unsubscribe(self, signal: LifecycleSignal, callback: SignalCallback):
        """Unsubscribe a callback from a signal"""
        callbacks = self.subscribers.get(LifecycleSignal(signal), [])
        if callback in callbacks:
            callbacks.remove(callback)

    def dispatch(self, signal: LifecycleSignal, initiator: PartyRef, counterparty: PartyRef):
        """Invoke every callback subscribed to `signal`."""
        logger.debug(f"Dispatching {signal.value} ({initiator} -> {counterparty})")
        for callback in list(self.subscribers.get(signal, [])):
            try:
                callback(signal, initiator, counterparty)
            except Exception:
                # The mutation is already committed; remaining subscribers still run.
                logger.exception(f"Handler for {signal.value} failed")
