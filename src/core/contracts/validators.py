"""
JSON Schema Contract Validators

Модуль для валидации JSON документов, которыми пул обменивается со
встраивающими приложениями. Использует библиотеку jsonschema.

Схемы:
- pool_config.json   (документ создания пула)
- pool_snapshot.json (снапшот состояния пула)
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

# Схемы поставляются внутри пакета src.core.contracts
DEFAULT_SCHEMA_DIR = Path(__file__).parent / "schema"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    По умолчанию схемы берутся из каталога schema/ рядом с этим модулем
    (поставляются вместе с пакетом как package data).
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or DEFAULT_SCHEMA_DIR
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'pool_config')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Валидируем саму схему (meta-validation)
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema


_SCHEMA_LOADER: SchemaLoader | None = None


def get_schema_loader() -> SchemaLoader:
    """Общий экземпляр загрузчика (создаётся при первом обращении)."""
    global _SCHEMA_LOADER
    if _SCHEMA_LOADER is None:
        _SCHEMA_LOADER = SchemaLoader()
    return _SCHEMA_LOADER


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = get_schema_loader().load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Валидация данных против схемы.

        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        """Проверка валидности данных без exception."""
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        """Итератор по всем ошибкам валидации."""
        return self.validator.iter_errors(data)


class PoolConfigValidator(ContractValidator):
    """Валидатор для pool_config контракта."""

    def __init__(self):
        super().__init__("pool_config")


class PoolSnapshotValidator(ContractValidator):
    """Валидатор для pool_snapshot контракта."""

    def __init__(self):
        super().__init__("pool_snapshot")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_pool_config(data: Dict[str, Any]) -> None:
    """
    Валидация документа создания пула.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    PoolConfigValidator().validate(data)


def validate_pool_snapshot(data: Dict[str, Any]) -> None:
    """
    Валидация снапшота пула.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    PoolSnapshotValidator().validate(data)
