"""
Core math modules для пула ликвидности

Математические примитивы и численные алгоритмы с гарантией стабильности.
"""

# Numerical Safeguards
from src.core.math.numerical_safeguards import (
    # Epsilon constants
    POOL_INVARIANT_REL_TOL,
    # NaN/Inf
    is_valid_float,
    # Epsilon comparisons
    is_close,
    # Validation
    validate_in_range,
    validate_non_negative,
    validate_positive,
)

# Constant-product math
from src.core.math.cpmm import (
    SwapQuote,
    ZeroStakeError,
    invariant_holds,
    paired_amount,
    proportional_shares,
    quote_swap,
    ratios_match,
    split_fee,
    stake_weights,
)

__all__ = [
    # Numerical Safeguards — Epsilon constants
    "POOL_INVARIANT_REL_TOL",
    # Numerical Safeguards — NaN/Inf
    "is_valid_float",
    # Numerical Safeguards — Epsilon comparisons
    "is_close",
    # Numerical Safeguards — Validation
    "validate_in_range",
    "validate_non_negative",
    "validate_positive",
    # CPMM — Exceptions
    "ZeroStakeError",
    # CPMM — Types
    "SwapQuote",
    # CPMM — Functions
    "invariant_holds",
    "paired_amount",
    "proportional_shares",
    "quote_swap",
    "ratios_match",
    "split_fee",
    "stake_weights",
]
