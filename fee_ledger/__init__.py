"""
Fee Ledger

A value-transfer ledger with a policy-driven treasury fee, integer
amounts throughout, and a hash-chained audit trail.
"""

from .token import TaxedToken
from .fee_policy import FeeVariant, FeeSplit, MAX_FEE_RATE
from .ledger import MAX_UINT256, ZERO_ADDRESS

__version__ = "1.0.0"

__all__ = [
    "TaxedToken",
    "FeeVariant",
    "FeeSplit",
    "MAX_FEE_RATE",
    "MAX_UINT256",
    "ZERO_ADDRESS",
]
