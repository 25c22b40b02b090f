"""
Rule table builder — compiles declarations into an ordered rule table.

Features:
- Simple, from-grouped and event-grouped (optionally guarded) declarations
- Any-state rules expanded against the states known at that point
- Rejection of no-longer-supported shapes with a suggested rewrite
- Deterministic state, event and transition catalogs (declaration order)

Usage:
    from machinist.builder import build
    from machinist.helpers import ANY, event, from_, to

    table = build([
        from_("new", to="registered", event="register"),
        from_("registered", [
            to("approved", event="approve"),
            to("reproved", event="reprove"),
        ]),
        event("score", [from_("approved"), from_("reproved")], guard=check_score),
        from_(ANY, to="expired", event="expire"),
    ])

    table.list_states()   # ["new", "registered", "approved", "reproved", "expired"]
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from machinist.exceptions import InvalidDeclarationError, UnsupportedSyntaxError
from machinist.types import (
    ANY,
    _UNSET,
    Declaration,
    EventDeclaration,
    FromDeclaration,
    GuardedTarget,
    LiteralTarget,
    Target,
    ToDeclaration,
    TransitionRule,
    render_value,
)

logger = logging.getLogger(__name__)


class _Placeholder:
    def __init__(self, text: str):
        self._text = text

    def __repr__(self) -> str:
        return self._text


_NEW_STATE = _Placeholder("your_new_state")
_NEW_EVENT = _Placeholder("your_event")


def _is_function(value: Any) -> bool:
    return callable(value) and not isinstance(value, (type, Enum))


@dataclass(frozen=True)
class RuleTable:
    """
    Immutable, ordered collection of normalized rules plus catalogs.

    Attributes:
        rules: Normalized rules in declaration order (first match wins).
        states: Distinct states used as a source or literal destination,
                in first-seen order.
        events: Distinct event identifiers, in first-seen order.
    """

    rules: Tuple[TransitionRule, ...] = ()
    states: Tuple[Any, ...] = ()
    events: Tuple[str, ...] = ()

    def match(self, state: Any, event: str) -> Optional[TransitionRule]:
        """Return the first rule for ``state`` and ``event``, or None."""
        for rule in self.rules:
            if rule.matches(state, event):
                return rule
        return None

    def list_states(self) -> List[Any]:
        return list(self.states)

    def list_events(self) -> List[str]:
        return list(self.events)

    def list_transitions(self) -> List[Dict[str, Any]]:
        """Ordered ``{from, to, event}`` dicts; guarded rules show the guard."""
        return [rule.to_dict() for rule in self.rules]

    def __len__(self) -> int:
        return len(self.rules)


class RuleTableBuilder:
    """
    Accumulates declarations, in order, into a RuleTable.

    Any-state rules are expanded when they are added, so a state first
    seen in a later declaration is not covered by an earlier ANY rule.
    A builder that raised a CompileError should be discarded.
    """

    def __init__(self):
        self._rules: List[TransitionRule] = []
        # Plain lists: states are compared by equality and may be unhashable
        self._states: List[Any] = []
        self._events: List[str] = []

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def add(self, declaration: Declaration) -> "RuleTableBuilder":
        """
        Validate and expand one top-level declaration.

        Raises:
            UnsupportedSyntaxError: On a no-longer-supported shape.
            InvalidDeclarationError: On a malformed declaration.
        """
        if isinstance(declaration, EventDeclaration):
            self._add_event_block(declaration)
        elif isinstance(declaration, FromDeclaration):
            if declaration.is_block:
                self._add_from_block(declaration)
            else:
                self._add_simple(declaration)
        else:
            raise InvalidDeclarationError(
                f"Expected a from_() or event() declaration, got {type(declaration).__name__}",
                repr(declaration),
            )
        return self

    def extend(self, declarations: Iterable[Declaration]) -> "RuleTableBuilder":
        for declaration in declarations:
            self.add(declaration)
        return self

    def build(self) -> RuleTable:
        """Freeze the accumulated rules and catalogs."""
        table = RuleTable(
            rules=tuple(self._rules),
            states=tuple(self._states),
            events=tuple(self._events),
        )
        logger.info(
            f"Rule table built — {len(table.rules)} rules, "
            f"{len(table.states)} states, {len(table.events)} events"
        )
        return table

    # ------------------------------------------------------------------
    # Declaration shapes
    # ------------------------------------------------------------------

    def _add_simple(self, declaration: FromDeclaration) -> None:
        rendered = declaration.render()
        if declaration.to is _UNSET:
            raise InvalidDeclarationError("from_() requires a `to` destination", rendered)
        self._check_event(declaration.event, rendered)
        if _is_function(declaration.to):
            raise _function_destination(rendered, declaration.state, declaration.event, declaration.to)
        self._check_literal(declaration.to, rendered)
        self._append(declaration.state, declaration.event, LiteralTarget(declaration.to))

    def _add_from_block(self, declaration: FromDeclaration) -> None:
        rendered = declaration.render()
        if declaration.to is not _UNSET or declaration.event is not None:
            raise InvalidDeclarationError(
                "A from_() block takes its destinations and events from its to() entries",
                rendered,
            )
        # Validate the whole block first so a rejected block adds nothing
        for entry in declaration.body:
            if not isinstance(entry, ToDeclaration):
                raise InvalidDeclarationError(
                    f"A from_() block may only contain to() entries, got {type(entry).__name__}",
                    rendered,
                )
            self._check_event(entry.event, rendered)
            if _is_function(entry.target):
                raise _function_destination(rendered, declaration.state, entry.event, entry.target)
            self._check_literal(entry.target, rendered)

        for entry in declaration.body:
            self._append(declaration.state, entry.event, LiteralTarget(entry.target))

    def _add_event_block(self, declaration: EventDeclaration) -> None:
        rendered = declaration.render()
        self._check_event(declaration.event, rendered)
        guard = declaration.guard
        if guard is not None and not callable(guard):
            raise InvalidDeclarationError(
                f"guard must be callable, got {type(guard).__name__}", rendered
            )

        # Validate the whole block first so a rejected block adds nothing
        for entry in declaration.body:
            if not isinstance(entry, FromDeclaration):
                raise InvalidDeclarationError(
                    f"An event() block may only contain from_() entries, got {type(entry).__name__}",
                    rendered,
                )
            if entry.is_block:
                raise _nested_from_block(rendered, declaration, entry)
            if entry.event is not None:
                raise InvalidDeclarationError(
                    "from_() inside an event() block must not set its own event", rendered
                )
            if guard is None:
                if entry.to is _UNSET:
                    raise InvalidDeclarationError(
                        "from_() inside an unguarded event() block requires a `to` destination",
                        rendered,
                    )
                if _is_function(entry.to):
                    raise _function_destination(rendered, entry.state, declaration.event, entry.to)
            elif _is_function(entry.to):
                raise InvalidDeclarationError(
                    "The guard already computes the destination; `to` must be a state or omitted",
                    rendered,
                )
            if entry.to is not _UNSET:
                self._check_literal(entry.to, rendered)

        for entry in declaration.body:
            if guard is None:
                target: Target = LiteralTarget(entry.to)
            else:
                target = GuardedTarget(guard, entry.to)
            self._append(entry.state, declaration.event, target)

    # ------------------------------------------------------------------
    # Expansion and catalogs
    # ------------------------------------------------------------------

    def _append(self, source: Any, event: str, target: Target) -> None:
        if source is ANY:
            # Snapshot: states observed by this very expansion are not sources
            sources = list(self._states)
            if not sources:
                logger.warning(
                    f"ANY rule for event {event!r} declared before any state — expands to nothing"
                )
        else:
            sources = [source]

        for state in sources:
            rule = TransitionRule(from_state=state, event=event, target=target)
            self._rules.append(rule)
            self._observe_state(state)
            if isinstance(target, LiteralTarget):
                self._observe_state(target.value)
            elif target.declared is not _UNSET:
                self._observe_state(target.declared)
            if event not in self._events:
                self._events.append(event)
            logger.debug(f"Rule: {render_value(state)} --{event}--> {render_value(rule.to)}")

    def _observe_state(self, state: Any) -> None:
        if state not in self._states:
            self._states.append(state)

    @staticmethod
    def _check_event(event: Any, rendered: str) -> None:
        if not isinstance(event, str) or not event:
            raise InvalidDeclarationError(
                f"event must be a non-empty string, got {event!r}", rendered
            )

    @staticmethod
    def _check_literal(value: Any, rendered: str) -> None:
        if value is ANY:
            raise InvalidDeclarationError("ANY can only be used as a source state", rendered)


def build(declarations: Iterable[Declaration]) -> RuleTable:
    """
    Compile declarations into a RuleTable.

    Either every declaration is accepted or a CompileError is raised;
    there is no partial table.

    Args:
        declarations: Ordered from_() / event() declarations.

    Returns:
        The immutable RuleTable.

    Raises:
        UnsupportedSyntaxError: On a no-longer-supported shape.
        InvalidDeclarationError: On a malformed declaration.
    """
    return RuleTableBuilder().extend(declarations).build()


# ── Diagnostics ───────────────────────────────────────────────────────────────

def _nested_from_block(
    rendered: str, block: EventDeclaration, nested: FromDeclaration
) -> UnsupportedSyntaxError:
    flat = tuple(
        FromDeclaration(nested.state, to=getattr(entry, "target", _NEW_STATE))
        for entry in nested.body
    )
    suggestion = EventDeclaration(block.event, flat, guard=block.guard)
    return UnsupportedSyntaxError(
        "`event` blocks no longer support `from_` blocks inside them",
        rendered,
        suggestion.render(),
    )


def _function_destination(
    rendered: str, state: Any, event: Optional[str], function: Any
) -> UnsupportedSyntaxError:
    suggestion = EventDeclaration(
        event if event is not None else _NEW_EVENT,
        (FromDeclaration(state, to=_NEW_STATE),),
        guard=function,
    )
    return UnsupportedSyntaxError(
        "`from_` no longer accepts a function as its `to` value; "
        "pass it as the guard of an `event` block instead",
        rendered,
        suggestion.render(),
    )

