"""Tests for machinist.helpers."""

from dataclasses import dataclass

import pytest

from machinist.exceptions import UnsupportedSyntaxError
from machinist.helpers import ANY, event, from_, to, transitions
from machinist.types import (
    EventDeclaration,
    FromDeclaration,
    ToDeclaration,
    TransitionError,
    TransitResult,
)


def check_score(candidate):
    return "approved" if candidate.score >= 70 else "reproved"


# ── Declaration constructors ──────────────────────────────────────────────────

class TestFrom:
    def test_simple(self):
        decl = from_("locked", to="unlocked", event="unlock")
        assert isinstance(decl, FromDeclaration)
        assert decl.state == "locked"
        assert decl.to == "unlocked"
        assert decl.event == "unlock"
        assert not decl.is_block

    def test_block(self):
        decl = from_("unlocked", [to("locked", event="lock"), to("opened", event="open")])
        assert decl.is_block
        assert decl.body == (
            ToDeclaration("locked", event="lock"),
            ToDeclaration("opened", event="open"),
        )

    def test_empty_block(self):
        decl = from_("a", [])
        assert decl.is_block
        assert decl.body == ()

    def test_simple_has_no_body(self):
        assert from_("a", to="b", event="go").body is None

    def test_body_accepts_generator(self):
        decl = from_("a", (to(t, event=t) for t in ["b", "c"]))
        assert len(decl.body) == 2

    def test_any(self):
        assert from_(ANY, to="expired", event="expire").state is ANY


class TestEvent:
    def test_event_block(self):
        decl = event("submit", [from_("form", to="form2")])
        assert isinstance(decl, EventDeclaration)
        assert decl.event == "submit"
        assert decl.guard is None
        assert decl.body == (FromDeclaration("form", to="form2"),)

    def test_guard_stored(self):
        assert event("score", [from_("testing")], guard=check_score).guard is check_score


# ── transitions decorator ─────────────────────────────────────────────────────

@transitions(
    from_("locked", to="unlocked", event="unlock"),
    from_("unlocked", [
        to("locked", event="lock"),
        to("opened", event="open"),
    ]),
    from_("opened", to="closed", event="close"),
    from_("closed", to="opened", event="open"),
    from_("closed", to="locked", event="lock"),
)
@dataclass(frozen=True)
class Door:
    state: str = "locked"


@transitions(
    from_(1, to=2, event="next"),
    from_(2, to=3, event="next"),
    attr="step",
)
@dataclass
class Counter:
    step: int = 1


@transitions(
    from_("new", to="testing", event="start"),
    event("finish", [
        from_("testing", to="approved"),
        from_("testing", to="reproved"),
    ], guard=check_score),
)
@dataclass
class Candidate:
    state: str = "new"
    score: int = 0


class TestTransitionsDecorator:
    def test_door(self):
        result = Door().transit("unlock")
        assert result == TransitResult.success(Door("unlocked"))
        assert result.entity.transit("close").error == TransitionError.NOT_ALLOWED

    def test_door_open(self):
        opened = Door("unlocked").transit("open").entity
        assert opened == Door("opened")
        assert opened.transit("lock").to_dict() == {"error": "not_allowed"}

    def test_custom_attr(self):
        step_2 = Counter().transit("next").entity
        step_3 = step_2.transit("next").entity
        assert step_3 == Counter(3)
        assert step_3.transit("next").error == TransitionError.NOT_ALLOWED

    def test_guard(self):
        testing = Candidate("testing", score=80)
        assert testing.transit("finish").entity == Candidate("approved", score=80)
        assert Candidate("testing", score=10).transit("finish").entity.state == "reproved"

    def test_introspection(self):
        assert Counter.list_states() == [1, 2, 3]
        assert Counter.list_events() == ["next"]
        assert Door.list_transitions()[1] == {"from": "unlocked", "to": "locked", "event": "lock"}

    def test_table_attached(self):
        assert len(Door.__transitions__) == 6

    def test_method_name(self):
        assert Door.transit.__name__ == "transit"

    def test_unsupported_syntax_at_definition(self):
        with pytest.raises(UnsupportedSyntaxError):
            @transitions(from_("a", to=check_score, event="go"))
            class Bad:
                state = "a"
