"""
Test suite for the allowance store
"""

import pytest

from fee_ledger.storage import InMemoryStorage
from fee_ledger.allowances import AllowanceStore
from fee_ledger.ledger import MAX_UINT256
from fee_ledger.errors import InsufficientAllowance


@pytest.fixture
def allowances():
    return AllowanceStore(InMemoryStorage())


class TestAllowanceStore:

    def test_default_allowance_is_zero(self, allowances):
        assert allowances.allowance("alice", "bob") == 0

    def test_approve_replaces_rather_than_accumulates(self, allowances):
        allowances.approve("alice", "bob", 100)
        allowances.approve("alice", "bob", 30)
        assert allowances.allowance("alice", "bob") == 30

    def test_allowances_are_directional(self, allowances):
        allowances.approve("alice", "bob", 100)
        assert allowances.allowance("bob", "alice") == 0

    def test_consume_decrements_exactly(self, allowances):
        allowances.approve("alice", "bob", 100)
        allowances.consume("alice", "bob", 60)
        assert allowances.allowance("alice", "bob") == 40

        allowances.consume("alice", "bob", 40)
        assert allowances.allowance("alice", "bob") == 0

    def test_consume_more_than_approved(self, allowances):
        allowances.approve("alice", "bob", 10)
        with pytest.raises(InsufficientAllowance, match="approved 10, requested 11"):
            allowances.consume("alice", "bob", 11)
        assert allowances.allowance("alice", "bob") == 10

    def test_max_allowance_is_unlimited(self, allowances):
        allowances.approve("alice", "bob", MAX_UINT256)
        allowances.consume("alice", "bob", 10 ** 30)
        assert allowances.allowance("alice", "bob") == MAX_UINT256
