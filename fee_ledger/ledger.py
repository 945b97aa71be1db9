"""
Balance Ledger

Per-account balances and total supply. Every mutation is a balanced
debit/credit pair (or a mint that raises supply by the same amount it
credits), so the sum of balances always equals total supply.
"""

from dataclasses import dataclass
from typing import Dict, List

from .storage import StorageInterface
from .errors import InsufficientBalance, InvalidAmount


MAX_UINT256 = 2 ** 256 - 1
ZERO_ADDRESS = "0x" + "0" * 40


def require_amount(amount: int, field: str = "amount") -> int:
    """Validate that amount is an unsigned 256-bit integer"""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"{field} must be an integer, got {type(amount).__name__}")
    if amount < 0 or amount > MAX_UINT256:
        raise InvalidAmount(f"{field} {amount} is outside the unsigned 256-bit range")
    return amount


@dataclass
class AccountBalance:
    """Snapshot of a single account record"""
    account: str
    balance: int

    def to_dict(self) -> Dict[str, str]:
        return {"account": self.account, "balance": str(self.balance)}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'AccountBalance':
        return cls(account=data["account"], balance=int(data["balance"]))


class BalanceLedger:
    """
    Holds balances and total supply

    Callers are expected to wrap multi-step operations in storage.atomic();
    each individual move is itself atomic because both sides are validated
    before either record is written.
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "balances"
        self.supply_table = "supply"

    def balance_of(self, account: str) -> int:
        """Get balance for an account (zero when the account was never credited)"""
        data = self.storage.load(self.table_name, account)
        if data:
            return AccountBalance.from_dict(data).balance
        return 0

    def total_supply(self) -> int:
        data = self.storage.load(self.supply_table, "total")
        return int(data["total_supply"]) if data else 0

    def move(self, from_account: str, to_account: str, amount: int) -> None:
        """
        Debit from_account and credit to_account by exactly amount

        Raises:
            InsufficientBalance: If from_account holds less than amount
        """
        require_amount(amount)
        from_balance = self.balance_of(from_account)
        if from_balance < amount:
            raise InsufficientBalance(
                f"Insufficient balance for {from_account}: "
                f"available {from_balance}, requested {amount}"
            )

        with self.storage.atomic():
            self._write(from_account, from_balance - amount)
            # Re-read so a self-transfer nets to zero
            self._write(to_account, self.balance_of(to_account) + amount)

    def mint(self, to_account: str, amount: int) -> None:
        """Credit to_account and raise total supply by amount"""
        require_amount(amount)
        new_supply = self.total_supply() + amount
        if new_supply > MAX_UINT256:
            raise InvalidAmount(f"Minting {amount} would overflow total supply")

        with self.storage.atomic():
            self._write(to_account, self.balance_of(to_account) + amount)
            self.storage.save(self.supply_table, "total", {"total_supply": str(new_supply)})

    def holders(self) -> List[AccountBalance]:
        """All account records, including zero balances"""
        return [AccountBalance.from_dict(data) for data in self.storage.load_all(self.table_name)]

    def verify_conservation(self) -> bool:
        """Check that the sum of balances equals total supply"""
        return sum(holder.balance for holder in self.holders()) == self.total_supply()

    def _write(self, account: str, balance: int) -> None:
        self.storage.save(self.table_name, account, AccountBalance(account, balance).to_dict())
