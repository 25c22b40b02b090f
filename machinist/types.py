"""
Transition data types and structures.

Defines the core types used by the rule compiler and resolver:
- ANY: Marker standing in for "every state known so far"
- LiteralTarget / GuardedTarget: Destination of a normalized rule
- TransitionRule: The atomic, normalized rule
- FromDeclaration / ToDeclaration / EventDeclaration: Rule declarations
- TransitionError: Call-time error kinds
- TransitResult: Outcome of a transit call
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Tuple, Union


class _AnyState:
    """Singleton marker for any-state rules."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ANY"


ANY = _AnyState()

# Sentinel for an omitted ``to`` (None is a legitimate state value)
_UNSET = object()


def render_value(value: Any) -> str:
    """Render a state, event or guard the way it is written in a declaration."""
    if value is ANY:
        return "ANY"
    if value is _UNSET:
        return "..."
    if callable(value) and not isinstance(value, Enum):
        return getattr(value, "__qualname__", None) or repr(value)
    return repr(value)


# ── Rule destinations ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LiteralTarget:
    """Destination known at definition time."""

    value: Any

    def resolve(self, entity: Any) -> Any:
        return self.value


@dataclass(frozen=True)
class GuardedTarget:
    """
    Destination computed from the entity at call time.

    Args:
        guard: Callable taking the entity and returning the new state.
        declared: The literal ``to`` written next to the guard, if any.
                  Kept for the state catalog only; never used to resolve.
    """

    guard: Callable[[Any], Any]
    declared: Any = _UNSET

    def resolve(self, entity: Any) -> Any:
        return self.guard(entity)


Target = Union[LiteralTarget, GuardedTarget]


@dataclass(frozen=True)
class TransitionRule:
    """
    A normalized ``(from_state, event) -> target`` rule.

    Args:
        from_state: Concrete state value this rule applies to.
        event: Event identifier that triggers the rule.
        target: LiteralTarget or GuardedTarget.
    """

    from_state: Any
    event: str
    target: Target

    @property
    def guard(self) -> Optional[Callable[[Any], Any]]:
        """The guard function, or None for literal rules."""
        if isinstance(self.target, GuardedTarget):
            return self.target.guard
        return None

    @property
    def to(self) -> Any:
        """Literal destination, or the guard itself for guarded rules."""
        if isinstance(self.target, GuardedTarget):
            return self.target.guard
        return self.target.value

    def matches(self, state: Any, event: str) -> bool:
        return self.from_state == state and self.event == event

    def to_dict(self) -> dict:
        """Serialise to a plain ``{from, to, event}`` dictionary."""
        return {"from": self.from_state, "to": self.to, "event": self.event}


# ── Declarations ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ToDeclaration:
    """A ``to(...)`` entry inside a from-block."""

    target: Any
    event: Optional[str] = None

    def render(self) -> str:
        if self.event is None:
            return f"to({render_value(self.target)})"
        return f"to({render_value(self.target)}, event={render_value(self.event)})"


@dataclass(frozen=True)
class FromDeclaration:
    """
    A ``from_(...)`` declaration.

    Either a simple rule (``to`` and ``event`` set) or, when ``body`` is
    given, a from-block grouping several ``to`` entries by source (an
    empty block adds no rules).
    Inside an event block ``event`` is left unset.
    """

    state: Any
    to: Any = _UNSET
    event: Optional[str] = None
    body: Optional[Tuple[Any, ...]] = None

    @property
    def is_block(self) -> bool:
        return self.body is not None

    def render(self) -> str:
        if self.is_block:
            lines = [f"from_({render_value(self.state)}, ["]
            lines += [f"    {_render(entry)}," for entry in self.body]
            lines.append("])")
            return "\n".join(lines)
        args = [render_value(self.state)]
        if self.to is not _UNSET:
            args.append(f"to={render_value(self.to)}")
        if self.event is not None:
            args.append(f"event={render_value(self.event)}")
        return f"from_({', '.join(args)})"


@dataclass(frozen=True)
class EventDeclaration:
    """An ``event(...)`` block grouping several sources by event."""

    event: str
    body: Tuple[Any, ...] = field(default_factory=tuple)
    guard: Optional[Callable[[Any], Any]] = None

    def render(self) -> str:
        lines = [f"event({render_value(self.event)}, ["]
        for entry in self.body:
            for line in _render(entry).splitlines():
                lines.append(f"    {line}")
            lines[-1] += ","
        closing = "])"
        if self.guard is not None:
            closing = f"], guard={render_value(self.guard)})"
        lines.append(closing)
        return "\n".join(lines)


Declaration = Union[FromDeclaration, EventDeclaration]


def _render(entry: Any) -> str:
    render = getattr(entry, "render", None)
    return render() if render is not None else repr(entry)


# ── Transit outcome ───────────────────────────────────────────────────────────

class TransitionError(Enum):
    """Call-time error kinds returned by ``transit``."""

    NOT_ALLOWED = "not_allowed"   # No rule matches the current state and event


@dataclass(frozen=True)
class TransitResult:
    """
    Outcome of a transit call.

    Exactly one of ``entity`` (on success) or ``error`` is meaningful.
    Callers are expected to branch on ``ok``.
    """

    entity: Any = None
    error: Optional[TransitionError] = None

    @classmethod
    def success(cls, entity: Any) -> "TransitResult":
        return cls(entity=entity)

    @classmethod
    def not_allowed(cls) -> "TransitResult":
        return cls(error=TransitionError.NOT_ALLOWED)

    @property
    def ok(self) -> bool:
        """True if the transition was applied."""
        return self.error is None

    def to_dict(self) -> dict:
        """Serialise to ``{"ok": entity}`` or ``{"error": "not_allowed"}``."""
        if self.ok:
            return {"ok": self.entity}
        return {"error": self.error.value}
