"""
Transition resolver — applies the first matching rule to an entity.

The resolver scans the rule table in declaration order, so precedence is
entirely decided by the builder. It holds no state between calls.
"""

import logging
from typing import Any, Optional

from machinist.accessor import StateAccessor
from machinist.builder import RuleTable
from machinist.types import TransitResult, render_value

logger = logging.getLogger(__name__)

_DEFAULT_ACCESSOR = StateAccessor()


def transit(
    entity: Any,
    event: str,
    table: RuleTable,
    accessor: Optional[StateAccessor] = None,
) -> TransitResult:
    """
    Move ``entity`` along the first rule matching its state and ``event``.

    Guarded rules take their destination from ``guard(entity)``; the
    returned value is used as-is, even if it is not in the state catalog.

    Args:
        entity: The entity to transit. Never mutated.
        event: Event identifier.
        table: Rule table produced by the builder.
        accessor: Reads/writes the state field (default: ``state``).

    Returns:
        TransitResult with the updated copy, or NOT_ALLOWED if no rule
        matches.
    """
    if accessor is None:
        accessor = _DEFAULT_ACCESSOR
    current = accessor.get(entity)

    rule = table.match(current, event)
    if rule is None:
        logger.debug(f"Not allowed: {render_value(current)} on {event!r}")
        return TransitResult.not_allowed()

    new_state = rule.target.resolve(entity)
    logger.debug(f"Transit: {render_value(current)} --{event}--> {render_value(new_state)}")
    return TransitResult.success(accessor.set(entity, new_state))
