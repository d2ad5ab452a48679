"""Event pipeline infrastructure for settlejobs."""

from typing import Any, Callable

from settlejobs.core.decorators import event as event_decorator
from settlejobs.core.event import Event
from settlejobs.core.pipeline import Pipeline
from settlejobs.core.registry import get_event, list_events

event: Callable[..., Any] = event_decorator

__all__ = [
    "Event",
    "Pipeline",
    "event",
    "get_event",
    "list_events",
]
