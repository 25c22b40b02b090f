"""
StateMachine — a reusable rule set for an externally-defined entity.

Features:
- Declarative transitions via an abstract ``define_transitions`` method
- Optional entity type binding; other entities are never allowed to transit
- Configurable state field (``state_attr``) or a fully custom accessor
- Several machines may drive the same entity type with different rules
- Introspection of states, events and transitions

Usage:
    from dataclasses import dataclass
    from machinist import StateMachine, event, from_

    @dataclass
    class Candidate:
        name: str
        state: str = "new"
        test_score: int = 0

    class SelectionProcessV1(StateMachine):
        entity_type = Candidate
        MINIMUM_SCORE = 100

        def define_transitions(self):
            return [
                from_("new", to="registered", event="register"),
                from_("registered", to="started_test", event="start_test"),
                event("send_test", [
                    from_("started_test", to="approved"),
                    from_("started_test", to="reproved"),
                ], guard=self._check_score),
                from_("approved", to="enrolled", event="enroll"),
            ]

        def _check_score(self, candidate):
            return "approved" if candidate.test_score >= self.MINIMUM_SCORE else "reproved"

    result = SelectionProcessV1().transit(Candidate("Ada"), "register")
    result.entity.state   # "registered"
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from machinist.accessor import StateAccessor
from machinist.builder import RuleTable, build
from machinist.resolver import transit
from machinist.types import Declaration, TransitResult

logger = logging.getLogger(__name__)


class StateMachine(ABC):
    """
    Base class for rule sets.

    Subclass this and implement ``define_transitions``. The rule table is
    compiled once, on first use, and is read-only afterwards.

    Attributes:
        entity_type: If set, only instances of this type can transit;
                     anything else is NOT_ALLOWED (default: None = any).
        state_attr: Field holding the entity's state (default: "state").
    """

    entity_type: Optional[type] = None
    state_attr: str = "state"

    def __init__(self):
        self._table: Optional[RuleTable] = None
        self._accessor: Optional[StateAccessor] = None
        self._initialized: bool = False

    # ------------------------------------------------------------------
    # Abstract interface — subclasses must implement this
    # ------------------------------------------------------------------

    @abstractmethod
    def define_transitions(self) -> List[Declaration]:
        """Return the ordered from_() / event() declarations."""

    def define_accessor(self) -> StateAccessor:
        """Return the accessor for the entity's state field."""
        return StateAccessor(self.state_attr)

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """
        Compile the declarations into a rule table.

        Called automatically on first use.

        Raises:
            CompileError: On an unsupported or malformed declaration.
        """
        if self._initialized:
            return

        self._accessor = self.define_accessor()
        self._table = build(self.define_transitions())
        self._initialized = True

        logger.info(
            f"{self.__class__.__name__} initialised — "
            f"{len(self._table.rules)} transitions, "
            f"{len(self._table.states)} states, "
            f"{len(self._table.events)} events"
        )

    @property
    def table(self) -> RuleTable:
        """The compiled rule table."""
        if not self._initialized:
            self.initialize()
        return self._table

    # ------------------------------------------------------------------
    # Transit
    # ------------------------------------------------------------------

    def transit(self, entity: Any, event: str) -> TransitResult:
        """
        Apply ``event`` to ``entity``.

        Returns:
            TransitResult with the updated copy, or NOT_ALLOWED when no
            rule matches or the entity is not an ``entity_type``.
        """
        table = self.table
        if self.entity_type is not None and not isinstance(entity, self.entity_type):
            logger.debug(
                f"{self.__class__.__name__}: {type(entity).__name__} is not a "
                f"{self.entity_type.__name__} — not allowed"
            )
            return TransitResult.not_allowed()
        return transit(entity, event, table, self._accessor)

    def can_transit(self, entity: Any, event: str) -> bool:
        """True if some rule would accept ``event`` for ``entity``."""
        table = self.table
        if self.entity_type is not None and not isinstance(entity, self.entity_type):
            return False
        return table.match(self._accessor.get(entity), event) is not None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def list_states(self) -> List[Any]:
        """Distinct states, in first-seen order."""
        return self.table.list_states()

    def list_events(self) -> List[str]:
        """Distinct events, in first-seen order."""
        return self.table.list_events()

    def list_transitions(self) -> List[Dict[str, Any]]:
        """Normalized ``{from, to, event}`` rules in declaration order."""
        return self.table.list_transitions()
