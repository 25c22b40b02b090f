"""
Helper utilities for declaring transitions.

Provides the declaration constructors (``from_``, ``to``, ``event``) and
a class decorator that lets an entity carry its own transitions.
"""

import logging
from typing import Any, Callable, Iterable, Optional

from machinist.accessor import StateAccessor
from machinist.builder import build
from machinist.resolver import transit
from machinist.types import (
    ANY,
    _UNSET,
    Declaration,
    EventDeclaration,
    FromDeclaration,
    ToDeclaration,
    TransitResult,
)

logger = logging.getLogger(__name__)

__all__ = ["ANY", "from_", "to", "event", "transitions"]


def from_(
    state: Any,
    body: Optional[Iterable[ToDeclaration]] = None,
    *,
    to: Any = _UNSET,
    event: Optional[str] = None,
) -> FromDeclaration:
    """
    Declare a transition from ``state``.

    Args:
        state: Source state, or ANY for every state known so far.
        body: to() entries grouping several transitions by source.
        to: Destination state.
        event: Triggering event. Left out inside an event() block.

    Example:
        from_("locked", to="unlocked", event="unlock")
        from_("unlocked", [
            to("locked", event="lock"),
            to("opened", event="open"),
        ])
    """
    return FromDeclaration(
        state=state,
        to=to,
        event=event,
        body=tuple(body) if body is not None else None,
    )


def to(target: Any, event: Optional[str] = None) -> ToDeclaration:
    """Declare one destination inside a from_() block."""
    return ToDeclaration(target=target, event=event)


def event(
    name: str,
    body: Iterable[FromDeclaration],
    guard: Optional[Callable[[Any], Any]] = None,
) -> EventDeclaration:
    """
    Declare several transitions triggered by the same event.

    With a ``guard``, the destination is ``guard(entity)`` at call time and
    the ``to`` of each entry only documents the possible outcomes.

    Example:
        event("update_score", [
            from_("in_progress", to="approved"),
            from_("in_progress", to="reproved"),
        ], guard=check_score)
    """
    return EventDeclaration(event=name, body=tuple(body), guard=guard)


def transitions(*declarations: Declaration, attr: str = "state"):
    """
    Class decorator giving an entity class its own ``transit`` method.

    The declarations are compiled when the class is defined, so an
    unsupported declaration fails at import time. Guards must be plain
    functions (the class body is not available yet).

    Usage:
        @transitions(
            from_("locked", to="unlocked", event="unlock"),
            from_("unlocked", to="locked", event="lock"),
        )
        @dataclass(frozen=True)
        class Door:
            state: str = "locked"

        Door().transit("unlock")   # TransitResult(entity=Door(state="unlocked"))

    Args:
        declarations: Ordered from_() / event() declarations.
        attr: Field holding the state (default: "state").

    Raises:
        CompileError: On an unsupported or malformed declaration.
    """
    accessor = StateAccessor(attr)
    table = build(declarations)

    def decorate(cls):
        def _transit(self, event: str) -> TransitResult:
            return transit(self, event, table, accessor)

        _transit.__name__ = "transit"
        _transit.__qualname__ = f"{cls.__qualname__}.transit"
        _transit.__doc__ = "Apply ``event`` and return a TransitResult."

        cls.transit = _transit
        cls.__transitions__ = table
        cls.list_states = staticmethod(table.list_states)
        cls.list_events = staticmethod(table.list_events)
        cls.list_transitions = staticmethod(table.list_transitions)

        logger.info(f"{cls.__name__} transitions — {len(table.rules)} rules")
        return cls

    return decorate
