"""Event pipeline with explicit execution order."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import yaml

from settlejobs.core.event import Event
from settlejobs.core.registry import get_event

if TYPE_CHECKING:
    from settlejobs.jobsystem import JobSystem


@dataclass(slots=True)
class Pipeline:
    """
    Ordered list of events executed once per simulated day.

    Attributes
    ----------
    events : list[Event]
        Event instances in execution order.

    See Also
    --------
    Pipeline.from_event_list : Build pipeline from event name list
    Pipeline.from_yaml : Build pipeline from a YAML file
    """

    events: list[Event] = field(default_factory=list)
    _event_map: dict[str, Event] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self._event_map = {event.name: event for event in self.events}

    @classmethod
    def from_event_list(cls, event_names: list[str]) -> Pipeline:
        """
        Build pipeline from ordered list of event names.

        Raises
        ------
        KeyError
            If an event name is not registered.
        """
        return cls(events=[get_event(name)() for name in event_names])

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> Pipeline:
        """
        Build pipeline from a YAML file with an ``events`` list.

        Entries are ``event_name`` or ``event_name x N`` (run N times).

        Raises
        ------
        ValueError
            If the file has no ``events`` list.
        KeyError
            If an event name is not registered.

        Examples
        --------
        >>> pipeline = Pipeline.from_yaml("my_pipeline.yml")  # doctest: +SKIP
        """
        yaml_path = Path(yaml_path)
        with open(yaml_path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config.get("events"), list):
            raise ValueError(f"YAML file must have an 'events' list: {yaml_path}")

        event_names: list[str] = []
        for spec in config["events"]:
            event_names.extend(cls._parse_event_spec(str(spec)))
        return cls.from_event_list(event_names)

    @staticmethod
    def _parse_event_spec(spec: str) -> list[str]:
        """
        Parse an event specification string into event names.

        - ``'event_name'`` → ``['event_name']``
        - ``'event_name x 3'`` → ``['event_name'] * 3``
        """
        spec = spec.strip()
        match = re.match(r"^(.+?)\s+x\s+(\d+)$", spec)
        if match:
            return [match.group(1).strip()] * int(match.group(2))
        return [spec]

    def execute(self, system: JobSystem) -> None:
        for event in self.events:
            event.execute(system)

    def insert_after(self, after: str, event: Event | str) -> None:
        """
        Insert *event* after the event named *after*.

        Raises
        ------
        ValueError
            If *after* is not in the pipeline.
        """
        if after not in self._event_map:
            raise ValueError(f"Event '{after}' not found in pipeline")
        if isinstance(event, str):
            event = get_event(event)()
        idx = self.events.index(self._event_map[after])
        self.events.insert(idx + 1, event)
        self._event_map[event.name] = event

    def remove(self, event_name: str) -> None:
        """
        Remove the event named *event_name*.

        Raises
        ------
        ValueError
            If the event is not in the pipeline.
        """
        if event_name not in self._event_map:
            raise ValueError(f"Event '{event_name}' not found in pipeline")
        self.events.remove(self._event_map.pop(event_name))

    def replace(self, old_name: str, new_event: Event | str) -> None:
        """
        Swap the event named *old_name* for *new_event*.

        Raises
        ------
        ValueError
            If *old_name* is not in the pipeline.
        """
        if old_name not in self._event_map:
            raise ValueError(f"Event '{old_name}' not found in pipeline")
        if isinstance(new_event, str):
            new_event = get_event(new_event)()
        idx = self.events.index(self._event_map.pop(old_name))
        self.events[idx] = new_event
        self._event_map[new_event.name] = new_event

    def names(self) -> list[str]:
        return [e.name for e in self.events]

    def __len__(self) -> int:
        return len(self.events)

    def __repr__(self) -> str:
        return f"Pipeline(n_events={len(self.events)})"
