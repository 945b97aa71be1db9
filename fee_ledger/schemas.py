"""
Pydantic schemas for API requests and responses

Amounts travel as decimal strings so 256-bit values keep full precision.
"""

from pydantic import BaseModel, Field, field_validator

from .ledger import MAX_UINT256


class AmountModel(BaseModel):
    amount: str = Field(..., description="Unsigned integer amount as a decimal string")

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, value: str) -> str:
        if not (value.isascii() and value.isdigit()):
            raise ValueError("amount must be a non-negative integer string")
        if int(value) > MAX_UINT256:
            raise ValueError("amount exceeds the unsigned 256-bit range")
        return value

    def to_int(self) -> int:
        return int(self.amount)


class TransferRequest(AmountModel):
    to: str


class TransferFromRequest(AmountModel):
    owner: str = Field(..., description="Account whose balance and allowance are spent")
    to: str


class ApproveRequest(AmountModel):
    spender: str


class SetTreasuryRequest(BaseModel):
    treasury: str


class SetFeeRateRequest(BaseModel):
    fee_rate: int


class SetExemptionRequest(BaseModel):
    account: str
    exempt: bool


class TokenInfoResponse(BaseModel):
    name: str
    symbol: str
    decimals: int
    total_supply: str
    owner: str
    treasury: str
    fee_rate: int
    max_fee_rate: int
    fee_variant: str
    paused: bool
