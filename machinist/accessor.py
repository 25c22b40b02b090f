"""
Entity accessor — reads and writes the field holding an entity's state.

Writes are copy-on-write: ``set`` returns a new entity and never mutates
the one it was given.
"""

import copy
import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class StateAccessor:
    """
    Accessor for the state field of an entity.

    Works with dataclasses, namedtuples, mappings and plain objects.
    Any object with compatible ``get`` / ``set`` methods can be used
    in its place.

    Args:
        attr: Name of the field (or mapping key) holding the state
              (default: "state").

    Raises:
        ValueError: If attr is not a non-empty identifier.
    """

    attr: str = "state"

    def __post_init__(self):
        if not isinstance(self.attr, str) or not self.attr.isidentifier():
            raise ValueError(f"attr must be a non-empty identifier, got {self.attr!r}")

    def get(self, entity: Any) -> Any:
        """
        Return the current state of ``entity``.

        Raises:
            KeyError: If a mapping entity has no such key.
            AttributeError: If an object entity has no such attribute.
        """
        if isinstance(entity, Mapping):
            if self.attr not in entity:
                raise KeyError(
                    f"Entity has no {self.attr!r} key. "
                    f"Pass attr= to read the state from another key."
                )
            return entity[self.attr]
        if not hasattr(entity, self.attr):
            raise AttributeError(
                f"{type(entity).__name__} has no attribute {self.attr!r}. "
                f"Pass attr= to read the state from another field."
            )
        return getattr(entity, self.attr)

    def set(self, entity: Any, state: Any) -> Any:
        """Return a copy of ``entity`` with its state field set to ``state``."""
        if dataclasses.is_dataclass(entity) and not isinstance(entity, type):
            return dataclasses.replace(entity, **{self.attr: state})
        if isinstance(entity, tuple) and hasattr(entity, "_replace"):
            return entity._replace(**{self.attr: state})
        if isinstance(entity, dict):
            updated = copy.copy(entity)
            updated[self.attr] = state
            return updated
        if isinstance(entity, Mapping):
            return {**entity, self.attr: state}
        updated = copy.copy(entity)
        setattr(updated, self.attr, state)
        return updated
