"""
Fire-and-forget notification channel.

The engine calls ``notifier.emit(topic, payload)`` after every bind,
unbind and slot creation. Delivery is best-effort: a failing listener is
logged and never aborts a scheduling pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from settlejobs.logging import getLogger

log = getLogger(__name__)

JOB_ASSIGNED = "job:assigned"
JOB_UNASSIGNED = "job:unassigned"
SLOT_CREATED = "job:slot_created"


class Notifier(Protocol):
    def emit(self, topic: str, payload: dict[str, Any]) -> None: ...


class NullNotifier:
    """Discards every event."""

    def emit(self, topic: str, payload: dict[str, Any]) -> None:
        return None


@dataclass(slots=True)
class RecordingNotifier:
    """Keeps ``(topic, payload)`` pairs in arrival order."""

    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def emit(self, topic: str, payload: dict[str, Any]) -> None:
        self.events.append((topic, payload))

    def topics(self) -> list[str]:
        return [t for t, _ in self.events]

    def clear(self) -> None:
        self.events.clear()


def safe_emit(notifier: Notifier, topic: str, payload: dict[str, Any]) -> None:
    """Emit *topic*, logging (not raising) listener failures."""
    try:
        notifier.emit(topic, payload)
    except Exception:  # noqa: BLE001 - listeners must not break a pass
        log.exception(f"Notifier failed on {topic}")
