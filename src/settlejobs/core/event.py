"""Event base class for the daily pipeline."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from settlejobs.logging import SettleLogger, getLogger

if TYPE_CHECKING:
    from settlejobs.jobsystem import JobSystem


def _camel_to_snake(name: str) -> str:
    """Convert CamelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


@dataclass(slots=True)
class Event(ABC):
    """
    One step of the daily tick.

    An Event operates on a :class:`~settlejobs.jobsystem.JobSystem` and
    mutates its slot table and world in place. Events run in the exact
    order the :class:`~settlejobs.core.pipeline.Pipeline` lists them.

    Notes
    -----
    Subclasses are registered automatically via ``__init_subclass__`` under
    their snake_case class name (or the ``name=`` class keyword).
    """

    name: ClassVar[str] = ""

    def __init_subclass__(cls, name: str = "", **kwargs: Any) -> None:
        super(Event, cls).__init_subclass__(**kwargs)

        # @dataclass(slots=True) re-creates the class and re-enters this hook
        # without the keyword, so keep a name that is already set
        if name != "":
            cls.name = name
        elif cls.name == "":
            cls.name = _camel_to_snake(cls.__name__)

        from settlejobs.core.registry import _EVENT_REGISTRY

        _EVENT_REGISTRY[cls.name] = cls

    def get_logger(self) -> SettleLogger:
        """
        Logger named ``settlejobs.events.{name}``.

        Per-event levels come from the ``logging.events`` config section:

        logging:
          events:
            auto_assign_workers: DEBUG
        """
        return getLogger(f"settlejobs.events.{self.name}")

    @abstractmethod
    def execute(self, system: JobSystem) -> None:
        """Run the step; all mutations are in place."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
