"""Default daily pipeline."""

from importlib import resources
from pathlib import Path

from settlejobs.core.pipeline import Pipeline


def create_default_pipeline() -> Pipeline:
    """
    Create the default daily event pipeline from ``default_pipeline.yml``.

    Order: rebuild slots, drop dangling bindings, auto-assign, sync
    building rosters, compute production. Modify the result with
    ``insert_after()``, ``remove()`` and ``replace()``, or load a custom
    file with ``Pipeline.from_yaml()``.
    """
    import settlejobs.events  # noqa: F401  (registers the built-in events)

    traversable = resources.files("settlejobs") / "default_pipeline.yml"
    with resources.as_file(traversable) as yaml_fs_path:
        return Pipeline.from_yaml(Path(yaml_fs_path))
