"""
Typed YAML loading on PyYAML and pydantic v2.

Every loader reports the offending file in its error message:
``FileNotFoundError`` when the file is missing, ``ValueError`` when it cannot
be decoded, is not YAML, is empty, or fails validation.
"""

from pathlib import Path
from typing import Any, TypeVar, overload

import yaml
from pydantic import TypeAdapter, ValidationError

T = TypeVar("T")
U = TypeVar("U")


def read_yaml(path: Path | str) -> Any:
    """Parse a YAML file into plain Python data; empty documents are rejected."""
    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"File not found: {source}")

    try:
        data = yaml.safe_load(source.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise ValueError(f"Unable to decode UTF-8 in {source}: {e}") from e
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {source}: {e}") from e

    if data is None:
        raise ValueError(f"Empty YAML file: {source}")
    return data


def validate_typed(
    data: Any,
    source: Path | str,
    *,
    adapter: TypeAdapter[T] | None = None,
    model: type[T] | None = None,
) -> T:
    """Validate already-parsed data against ``adapter`` or ``model``, naming ``source`` on failure."""
    if (adapter is None) == (model is None):
        raise ValueError("Provide exactly one of 'adapter' or 'model'.")
    if adapter is None:
        adapter = TypeAdapter(model)
    try:
        return adapter.validate_python(data)
    except ValidationError as e:
        raise ValueError(f"Invalid structure in {source}: {e}") from e


@overload
def load_yaml_typed(path: Path | str, *, adapter: TypeAdapter[T]) -> T: ...


@overload
def load_yaml_typed(path: Path | str, *, model: type[T]) -> T: ...


def load_yaml_typed(
    path: Path | str,
    *,
    adapter: TypeAdapter[T] | None = None,
    model: type[T] | None = None,
) -> T:
    """Read ``path`` and parse it into a typed object.

    Example:
        load_yaml_typed("policy.yaml", model=PlanningPolicy)
        load_yaml_typed("switches.yaml", adapter=TypeAdapter(list[SwitchProfile]))
    """
    return validate_typed(read_yaml(path), path, adapter=adapter, model=model)


def load_yaml_list(path: Path | str, item_model: type[U]) -> list[U]:
    """Load a top-level YAML list into ``list[item_model]``."""
    return load_yaml_typed(path, adapter=TypeAdapter(list[item_model]))  # type: ignore[index]
