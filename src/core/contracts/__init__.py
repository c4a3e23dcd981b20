"""
Contract Validation Module

Модуль для валидации JSON контрактов пула ликвидности.
"""

from .validators import (
    ContractValidator,
    PoolConfigValidator,
    PoolSnapshotValidator,
    SchemaLoader,
    get_schema_loader,
    validate_pool_config,
    validate_pool_snapshot,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "PoolConfigValidator",
    "PoolSnapshotValidator",
    # Functions
    "get_schema_loader",
    "validate_pool_config",
    "validate_pool_snapshot",
]
