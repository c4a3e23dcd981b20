"""Pool — двухактивный пул ликвидности с постоянным произведением.

- Pool: swap, add_liquidity, compute_paired_amount, fee_shares, snapshot
- PoolConfig / ToleranceConfig: конфигурация создания пула
"""

from .config import (
    DEFAULT_FEE_RATE,
    PAIR_NAME_SEPARATOR,
    PoolConfig,
    ToleranceConfig,
    split_pair_name,
)
from .pool import Pool

__all__ = [
    "Pool",
    "PoolConfig",
    "ToleranceConfig",
    "DEFAULT_FEE_RATE",
    "PAIR_NAME_SEPARATOR",
    "split_pair_name",
]
