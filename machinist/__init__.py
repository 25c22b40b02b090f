"""
machinist
~~~~~~~~~

Declarative finite state machines: describe the legal transitions of an
entity as data and get a single ``transit(entity, event)`` operation.

Quick start:
    from machinist import ANY, StateMachine, event, from_, to, transitions
    from machinist import RuleTable, TransitResult, TransitionError, build
"""

from machinist.accessor import StateAccessor
from machinist.builder import RuleTable, RuleTableBuilder, build
from machinist.exceptions import (
    CompileError,
    InvalidDeclarationError,
    NoLongerSupportedSyntaxError,
    UnsupportedSyntaxError,
)
from machinist.helpers import event, from_, to, transitions
from machinist.machine import StateMachine
from machinist.resolver import transit
from machinist.types import (
    ANY,
    EventDeclaration,
    FromDeclaration,
    GuardedTarget,
    LiteralTarget,
    ToDeclaration,
    TransitionError,
    TransitionRule,
    TransitResult,
)

__all__ = [
    "ANY",
    "StateMachine",
    "StateAccessor",
    "RuleTable",
    "RuleTableBuilder",
    "build",
    "transit",
    "from_",
    "to",
    "event",
    "transitions",
    "TransitionRule",
    "LiteralTarget",
    "GuardedTarget",
    "FromDeclaration",
    "ToDeclaration",
    "EventDeclaration",
    "TransitionError",
    "TransitResult",
    "CompileError",
    "InvalidDeclarationError",
    "UnsupportedSyntaxError",
    "NoLongerSupportedSyntaxError",
]
