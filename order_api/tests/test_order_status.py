from __future__ import annotations

import itertools

import pytest

from order_api.app.domain import (
    TERMINAL,
    TRANSITIONS,
    Ok,
    OrderStatus,
    Rejected,
    can_transition,
    check_transition,
)

S = OrderStatus

ALLOWED = {
    (S.PENDING, S.PROCESSING),
    (S.PENDING, S.CANCELLED),
    (S.PROCESSING, S.SHIPPED),
    (S.SHIPPED, S.DELIVERED),
}

REASONS = {
    S.PENDING: "PENDING orders can only move to PROCESSING or be CANCELLED",
    S.PROCESSING: "PROCESSING orders can only move to SHIPPED",
    S.SHIPPED: "SHIPPED orders can only move to DELIVERED",
    S.DELIVERED: "Cannot update status of a delivered order",
    S.CANCELLED: "Cannot update status of a cancelled order",
}


@pytest.mark.parametrize("src,dst", list(itertools.product(S, S)))
def test_every_pair_matches_table(src, dst):
    decision = check_transition(src, dst)
    if (src, dst) in ALLOWED:
        assert decision == Ok()
        assert can_transition(src, dst)
    else:
        assert decision == Rejected(REASONS[src])
        assert not can_transition(src, dst)


@pytest.mark.parametrize("status", list(S))
def test_same_status_is_rejected(status):
    assert isinstance(check_transition(status, status), Rejected)


def test_terminal_states_have_no_outgoing_transitions():
    assert TERMINAL == {S.DELIVERED, S.CANCELLED}
    for status in TERMINAL:
        assert not TRANSITIONS[status].allowed


def test_table_covers_every_status():
    assert set(TRANSITIONS) == set(S)


def test_accepts_raw_string_values():
    assert check_transition("PENDING", "PROCESSING") == Ok()
    assert check_transition("SHIPPED", "PENDING") == Rejected(REASONS[S.SHIPPED])


def test_decision_is_deterministic():
    first = [check_transition(a, b) for a, b in itertools.product(S, S)]
    second = [check_transition(a, b) for a, b in itertools.product(S, S)]
    assert first == second
