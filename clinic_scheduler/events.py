"""
Event listener registry that decouples side effects from the booking core.

Outbound integrations (notification email, CRM contact sync) register a
listener for an event name. The core publishes after its own write has
succeeded and never depends on a listener's outcome: a failing listener
is logged and skipped.
"""

import inspect
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

SESSION_CREATED = "session.created"
PATIENT_CREATED = "patient.created"

_LISTENERS: dict[str, list[Callable[[Any], Any]]] = {}


def register_listener(event: str, listener: Callable[[Any], Any]) -> None:
    """Register a sync or async callable for an event name."""
    _LISTENERS.setdefault(event, []).append(listener)
    logger.debug("Listener registered for %s: %r", event, listener)


def get_registered_listeners(event: str) -> list[Callable[[Any], Any]]:
    """Return the listeners registered for an event."""
    return list(_LISTENERS.get(event, []))


def clear_listeners() -> None:
    """Drop every listener. Used by test fixtures for isolation."""
    _LISTENERS.clear()


async def publish(event: str, payload: Any) -> int:
    """Deliver ``payload`` to every listener of ``event``.

    Returns:
        The number of listeners that completed without raising.
    """
    delivered = 0
    for listener in get_registered_listeners(event):
        try:
            result = listener(payload)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Listener %r failed for %s", listener, event)
            continue
        delivered += 1
    return delivered
