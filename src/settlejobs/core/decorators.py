"""
Decorator for concise Event definitions.

Instead of::

    from dataclasses import dataclass
    from settlejobs.core import Event

    @dataclass(slots=True)
    class RebuildSlots(Event):
        def execute(self, system): ...

write::

    from settlejobs.core import event

    @event
    class RebuildSlots:
        def execute(self, system): ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar

T = TypeVar("T")


def event(
    cls: type[T] | None = None,
    *,
    name: str | None = None,
    **dataclass_kwargs: Any,
) -> type[T] | Callable[[type[T]], type[T]]:
    """
    Make *cls* a registered :class:`~settlejobs.core.event.Event` dataclass.

    Parameters
    ----------
    cls : type, optional
        The class to decorate (supplied when used without parentheses).
    name : str, optional
        Registry name; defaults to the snake_case class name.
    **dataclass_kwargs : Any
        Passed to ``@dataclass``; ``slots=True`` unless overridden.

    Returns
    -------
    type or Callable
        The decorated class, or a decorator when called with arguments.

    Examples
    --------
    >>> @event(name="custom_step")
    ... class CustomStep:
    ...     def execute(self, system):
    ...         pass
    """
    from settlejobs.core.event import Event

    dataclass_kwargs.setdefault("slots", True)

    def decorator(cls: type[T]) -> type[T]:
        if not issubclass(cls, Event):
            # rebuild with Event as the only base so slots stay valid
            namespace = {
                "__module__": cls.__module__,
                "__qualname__": cls.__qualname__,
                "__annotations__": getattr(cls, "__annotations__", {}),
            }
            for attr_name in dir(cls):
                if not attr_name.startswith("__"):
                    namespace[attr_name] = getattr(cls, attr_name)
            if cls.__doc__:
                namespace["__doc__"] = cls.__doc__
            if name is not None:
                namespace["name"] = name

            cls = type(cls.__name__, (Event,), namespace)

        if name is not None:
            cls.name = name  # type: ignore[attr-defined]

        return dataclass(**dataclass_kwargs)(cls)

    if cls is None:
        return decorator
    return decorator(cls)
