"""Tests for the contract status machine."""

from datetime import date

import pytest

from housnkuh.domain.contracts.lifecycle import (
    ContractStatus,
    can_transition,
    effective_status,
    ensure_transition,
)
from housnkuh.shared.exceptions import StateError


class TestTransitions:
    @pytest.mark.parametrize(
        "current, target",
        [
            ("pending", "scheduled"),
            ("pending", "cancelled"),
            ("scheduled", "active"),
            ("scheduled", "cancelled"),
            ("active", "cancelled"),
        ],
    )
    def test_allowed(self, current, target):
        assert can_transition(current, target)
        assert ensure_transition(current, target) == ContractStatus(target)

    @pytest.mark.parametrize(
        "current, target",
        [
            ("cancelled", "active"),
            ("cancelled", "scheduled"),
            ("active", "scheduled"),
            ("pending", "active"),
            ("scheduled", "pending"),
        ],
    )
    def test_forbidden_raise_state_error(self, current, target):
        assert not can_transition(current, target)
        with pytest.raises(StateError):
            ensure_transition(current, target)

    def test_cancelled_is_terminal(self):
        assert not any(can_transition("cancelled", s) for s in ContractStatus)


class TestEffectiveStatus:
    def test_scheduled_before_start(self):
        assert effective_status("scheduled", date(2025, 9, 1), date(2025, 8, 31)) == ContractStatus.SCHEDULED

    def test_scheduled_becomes_active_on_start_date(self):
        assert effective_status("scheduled", date(2025, 9, 1), date(2025, 9, 1)) == ContractStatus.ACTIVE

    def test_cancelled_stays_cancelled(self):
        assert effective_status("cancelled", date(2025, 9, 1), date(2026, 1, 1)) == ContractStatus.CANCELLED

    def test_pending_is_not_activated(self):
        assert effective_status("pending", date(2025, 9, 1), date(2026, 1, 1)) == ContractStatus.PENDING
