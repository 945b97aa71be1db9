"""
Allowance Store

Approved amounts a spender may move on an owner's behalf.
"""

from .storage import StorageInterface
from .errors import InsufficientAllowance
from .ledger import MAX_UINT256, require_amount


class AllowanceStore:
    """(owner, spender) -> approved amount"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "allowances"

    @staticmethod
    def _key(owner: str, spender: str) -> str:
        return f"{owner}:{spender}"

    def allowance(self, owner: str, spender: str) -> int:
        data = self.storage.load(self.table_name, self._key(owner, spender))
        return int(data["amount"]) if data else 0

    def approve(self, owner: str, spender: str, amount: int) -> None:
        """Replace the stored allowance (approvals never accumulate)"""
        require_amount(amount)
        self.storage.save(self.table_name, self._key(owner, spender), {
            "owner": owner,
            "spender": spender,
            "amount": str(amount),
        })

    def consume(self, owner: str, spender: str, amount: int) -> None:
        """
        Spend amount from the (owner, spender) allowance

        An allowance of MAX_UINT256 is unlimited and left untouched.

        Raises:
            InsufficientAllowance: If the stored allowance is below amount
        """
        require_amount(amount)
        current = self.allowance(owner, spender)
        if current == MAX_UINT256:
            return
        if current < amount:
            raise InsufficientAllowance(
                f"Insufficient allowance for {spender} on {owner}: "
                f"approved {current}, requested {amount}"
            )
        self.approve(owner, spender, current - amount)
