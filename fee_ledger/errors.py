"""
Ledger Error Taxonomy

Every rejected operation raises a LedgerError subclass tagged with a
FailureReason. LedgerError derives from ValueError so callers that treat
domain failures as ValueError keep working.
"""

from enum import Enum


class FailureReason(Enum):
    """Tag carried by every rejected operation"""
    UNAUTHORIZED = "unauthorized"
    INVALID_ADDRESS = "invalid_address"
    INVALID_FEE_RATE = "invalid_fee_rate"
    INVALID_AMOUNT = "invalid_amount"
    ALREADY_INITIALIZED = "already_initialized"
    NOT_INITIALIZED = "not_initialized"
    VARIANT_MISMATCH = "variant_mismatch"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    INSUFFICIENT_ALLOWANCE = "insufficient_allowance"
    FEE_EXCEEDS_AMOUNT = "fee_exceeds_amount"
    SYSTEM_PAUSED = "system_paused"


class LedgerError(ValueError):
    """Base class for all ledger failures"""
    reason: FailureReason

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"reason": self.reason.value, "message": self.message}


class Unauthorized(LedgerError):
    reason = FailureReason.UNAUTHORIZED


class InvalidAddress(LedgerError):
    reason = FailureReason.INVALID_ADDRESS


class InvalidFeeRate(LedgerError):
    reason = FailureReason.INVALID_FEE_RATE


class InvalidAmount(LedgerError):
    reason = FailureReason.INVALID_AMOUNT


class AlreadyInitialized(LedgerError):
    reason = FailureReason.ALREADY_INITIALIZED


class NotInitialized(LedgerError):
    reason = FailureReason.NOT_INITIALIZED


class VariantMismatch(LedgerError):
    """Configured fee variant differs from the one the ledger was created with"""
    reason = FailureReason.VARIANT_MISMATCH


class InsufficientBalance(LedgerError):
    reason = FailureReason.INSUFFICIENT_BALANCE


class InsufficientAllowance(LedgerError):
    reason = FailureReason.INSUFFICIENT_ALLOWANCE


class FeeExceedsAmount(LedgerError):
    """Net amount subtraction would underflow"""
    reason = FailureReason.FEE_EXCEEDS_AMOUNT


class SystemPaused(LedgerError):
    reason = FailureReason.SYSTEM_PAUSED
