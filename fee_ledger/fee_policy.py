"""
Fee Policy

Holds the exemption registry, the fee rate and the treasury reference, and
computes how a proposed transfer splits into a fee leg and a net leg.

Two fee variants are supported and deliberately kept distinct:

UNCONDITIONAL
    The exemption registry is maintained but never consulted when value
    moves. fee = amount * rate // 100. Configuration is validated: the rate
    is capped at MAX_FEE_RATE and the treasury may not be the null address.

EXEMPTION_CHECKED
    A transfer is taxed only when neither party is exempt and rate > 0.
    fee = amount * rate // 200. The configuration checks are inert: any
    non-negative rate and a null treasury are accepted.

calculate_tax() always uses the divide-by-200 formula, so under
UNCONDITIONAL the estimate does not match what a transfer actually charges.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .storage import StorageInterface
from .errors import FeeExceedsAmount, InvalidAddress, InvalidFeeRate, VariantMismatch
from .ledger import ZERO_ADDRESS, require_amount


MAX_FEE_RATE = 200
TAX_DIVISOR = 200
UNCONDITIONAL_DIVISOR = 100


class FeeVariant(Enum):
    """How transfers are taxed"""
    UNCONDITIONAL = "unconditional"
    EXEMPTION_CHECKED = "exemption_checked"


@dataclass(frozen=True)
class FeeSplit:
    """Result of FeePolicy.compute"""
    fee_amount: int
    net_amount: int
    taxed: bool


class FeePolicy:
    """Exemption registry, fee rate and treasury reference"""

    def __init__(self, storage: StorageInterface, variant: Optional[FeeVariant] = None):
        """
        A ledger keeps the variant it was initialized with. When storage
        already holds a policy its variant is adopted; passing a different
        one raises VariantMismatch.
        """
        self.storage = storage
        self.table_name = "fee_policy"
        self.exemptions_table = "exemptions"

        stored = self._state().get("variant")
        if stored is None:
            self.variant = variant or FeeVariant.EXEMPTION_CHECKED
        else:
            self.variant = FeeVariant(stored)
            if variant is not None and variant != self.variant:
                raise VariantMismatch(
                    f"Stored fee policy uses {self.variant.value}, not {variant.value}"
                )

    @property
    def validates_configuration(self) -> bool:
        return self.variant == FeeVariant.UNCONDITIONAL

    # Queries

    def fee_rate(self) -> int:
        return int(self._state().get("fee_rate", "0"))

    def treasury(self) -> Optional[str]:
        return self._state().get("treasury")

    def is_exempt(self, account: str) -> bool:
        data = self.storage.load(self.exemptions_table, account)
        return bool(data and data["exempt"])

    def exempt_accounts(self) -> List[str]:
        return sorted(record["account"] for record in self.storage.find(self.exemptions_table, {"exempt": True}))

    def calculate_tax(self, amount: int) -> int:
        """Estimate the fee for amount: amount * rate // 200"""
        require_amount(amount)
        return amount * self.fee_rate() // TAX_DIVISOR

    def compute(self, from_account: str, to_account: str, amount: int) -> FeeSplit:
        """
        Split amount into fee and net legs under the active variant

        Raises:
            FeeExceedsAmount: If the computed fee is larger than amount
        """
        require_amount(amount)
        rate = self.fee_rate()

        if self.variant == FeeVariant.UNCONDITIONAL:
            fee = amount * rate // UNCONDITIONAL_DIVISOR
        else:
            if rate == 0 or self.is_exempt(from_account) or self.is_exempt(to_account):
                return FeeSplit(fee_amount=0, net_amount=amount, taxed=False)
            fee = amount * rate // TAX_DIVISOR

        if fee == 0:
            return FeeSplit(fee_amount=0, net_amount=amount, taxed=False)
        if fee > amount:
            raise FeeExceedsAmount(
                f"Fee {fee} exceeds transfer amount {amount} at rate {rate}"
            )
        return FeeSplit(fee_amount=fee, net_amount=amount - fee, taxed=True)

    # Mutations (authorization is checked by the caller)

    def set_fee_rate(self, new_rate: int) -> Tuple[int, int]:
        """Set the fee rate, returning (old_rate, new_rate)"""
        if isinstance(new_rate, bool) or not isinstance(new_rate, int) or new_rate < 0:
            raise InvalidFeeRate(f"Fee rate must be a non-negative integer, got {new_rate!r}")
        if self.validates_configuration and new_rate > MAX_FEE_RATE:
            raise InvalidFeeRate(f"Fee rate {new_rate} exceeds maximum {MAX_FEE_RATE}")

        old_rate = self.fee_rate()
        self._update(fee_rate=str(new_rate))
        return old_rate, new_rate

    def set_treasury(self, new_treasury: str) -> Tuple[Optional[str], str]:
        """
        Point fees at new_treasury, returning (old_treasury, new_treasury)

        The old treasury loses its exemption and the new one gains it.
        """
        if self.validates_configuration and (not new_treasury or new_treasury == ZERO_ADDRESS):
            raise InvalidAddress("Treasury cannot be the null address")

        old_treasury = self.treasury()
        if old_treasury is not None:
            self.set_exemption(old_treasury, False)
        self.set_exemption(new_treasury, True)
        self._update(treasury=new_treasury)
        return old_treasury, new_treasury

    def set_exemption(self, account: str, exempt: bool) -> None:
        self.storage.save(self.exemptions_table, account, {"account": account, "exempt": bool(exempt)})

    def _state(self) -> Dict[str, str]:
        return self.storage.load(self.table_name, "current") or {}

    def _update(self, **fields: str) -> None:
        state = self._state()
        state.update(fields)
        state["variant"] = self.variant.value
        self.storage.save(self.table_name, "current", state)
