"""
Tests for the ownership gate and pause switch
"""

import pytest

from fee_ledger.storage import InMemoryStorage
from fee_ledger.ownership import OwnershipGate
from fee_ledger.pause import PauseState, PauseSwitch
from fee_ledger.errors import NotInitialized, SystemPaused, Unauthorized, FailureReason


class TestOwnershipGate:

    def test_require_owner_before_initialization(self):
        gate = OwnershipGate(InMemoryStorage())
        with pytest.raises(NotInitialized):
            gate.require_owner("anyone")

    def test_owner_passes_others_rejected(self):
        gate = OwnershipGate(InMemoryStorage())
        gate.set_owner("owner")

        gate.require_owner("owner")
        with pytest.raises(Unauthorized) as exc_info:
            gate.require_owner("mallory")
        assert exc_info.value.reason == FailureReason.UNAUTHORIZED
        assert gate.owner() == "owner"


class TestPauseSwitch:

    def test_active_by_default(self):
        switch = PauseSwitch(InMemoryStorage())
        assert switch.state() == PauseState.ACTIVE
        switch.require_active()

    def test_pause_and_unpause(self):
        switch = PauseSwitch(InMemoryStorage())
        switch.set_state(PauseState.PAUSED)
        assert switch.is_paused()
        with pytest.raises(SystemPaused):
            switch.require_active()

        switch.set_state(PauseState.ACTIVE)
        switch.require_active()

    def test_repeated_state_is_accepted(self):
        switch = PauseSwitch(InMemoryStorage())
        switch.set_state(PauseState.PAUSED)
        switch.set_state(PauseState.PAUSED)
        assert switch.is_paused()
