"""
Domain models and value objects.

Contains fundamental domain entities like Balance, ProviderStake, PoolSnapshot
and the pool error taxonomy.
"""

from src.core.domain.balance import Balance
from src.core.domain.errors import (
    InsufficientLiquidity,
    InvalidArgument,
    InvalidConfiguration,
    InvalidRatio,
    InvariantViolation,
    NoStakeholders,
    PoolError,
    SameAssetSwap,
    UnknownAsset,
    UnknownProvider,
)
from src.core.domain.pool_snapshot import AssetSnapshot, PoolSnapshot, ProviderSnapshot
from src.core.domain.provider_stake import ProviderStake

__all__ = [
    # Balance
    "Balance",
    # Provider stake
    "ProviderStake",
    # Snapshot models
    "PoolSnapshot",
    "AssetSnapshot",
    "ProviderSnapshot",
    # Errors
    "PoolError",
    "InvalidConfiguration",
    "InvalidArgument",
    "UnknownAsset",
    "UnknownProvider",
    "SameAssetSwap",
    "InsufficientLiquidity",
    "InvalidRatio",
    "InvariantViolation",
    "NoStakeholders",
]
