"""Dashboard configuration management helpers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from transport_stats.domain.exceptions import ConfigurationError

ENV_PREFIX = "TRANSPORT_STATS_"
_INT_FIELDS = ("top_routes_limit", "recent_days_limit", "top_vehicles_limit")
_STR_FIELDS = ("source", "db_path", "sales_collection", "currency", "log_level")
_OPTIONAL_STR_FIELDS = ("firestore_project", "firestore_api_key")


def _str_to_int(name: str, value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(
            "Invalid integer value", context={name: value}
        ) from exc


@dataclass(frozen=True)
class DashboardConfig:
    """Immutable configuration object loaded from env or files."""

    source: str = "sqlite"
    db_path: str = "sales.db"
    firestore_project: Optional[str] = None
    firestore_api_key: Optional[str] = None
    sales_collection: str = "historial"
    top_routes_limit: int = 8
    recent_days_limit: int = 14
    top_vehicles_limit: int = 10
    currency: str = "USD"
    log_level: str = "INFO"

    _ALLOWED_SOURCES = {"sqlite", "firestore"}
    _ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

    def __post_init__(self) -> None:
        self.validate()

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        defaults = cls()

        def env(name: str) -> str | None:
            return os.getenv(f"{ENV_PREFIX}{name}")

        return cls(
            source=env("SOURCE") or defaults.source,
            db_path=env("DB_PATH") or defaults.db_path,
            firestore_project=env("FIRESTORE_PROJECT") or defaults.firestore_project,
            firestore_api_key=env("FIRESTORE_API_KEY") or defaults.firestore_api_key,
            sales_collection=env("SALES_COLLECTION") or defaults.sales_collection,
            top_routes_limit=_str_to_int(
                "top_routes_limit", env("TOP_ROUTES_LIMIT"), defaults.top_routes_limit
            ),
            recent_days_limit=_str_to_int(
                "recent_days_limit", env("RECENT_DAYS_LIMIT"), defaults.recent_days_limit
            ),
            top_vehicles_limit=_str_to_int(
                "top_vehicles_limit",
                env("TOP_VEHICLES_LIMIT"),
                defaults.top_vehicles_limit,
            ),
            currency=env("CURRENCY") or defaults.currency,
            log_level=(env("LOG_LEVEL") or defaults.log_level).upper(),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "DashboardConfig":
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        raw = file_path.read_text()
        data: Dict[str, Any]
        suffix = file_path.suffix.lower()
        if suffix == ".json":
            data = json.loads(raw)
        elif suffix in {".yaml", ".yml"}:
            data = cls._load_yaml(raw)
        else:
            raise ConfigurationError(
                "Unsupported config format. Use JSON or YAML.",
                context={"path": str(file_path)},
            )
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration file must contain a mapping",
                context={"path": str(file_path)},
            )
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                "Unknown configuration keys", context={"keys": unknown}
            )
        return cls(**data)

    def validate(self) -> None:
        self._validate_types()
        if self.source not in self._ALLOWED_SOURCES:
            raise ConfigurationError(
                f"source must be one of {sorted(self._ALLOWED_SOURCES)}",
                context={"source": self.source},
            )
        if self.source == "firestore" and not self.firestore_project:
            raise ConfigurationError("firestore_project is required for firestore source")
        if self.source == "sqlite" and not self.db_path:
            raise ConfigurationError("db_path is required for sqlite source")
        for name in _INT_FIELDS:
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be greater than zero")
        if self.log_level.upper() not in self._ALLOWED_LOG_LEVELS:
            raise ConfigurationError(
                "Unknown log level", context={"log_level": self.log_level}
            )

    def _validate_types(self) -> None:
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"{name} must be an integer", context={name: value}
                )
        for name in _STR_FIELDS + _OPTIONAL_STR_FIELDS:
            value = getattr(self, name)
            if value is None and name in _OPTIONAL_STR_FIELDS:
                continue
            if not isinstance(value, str):
                raise ConfigurationError(
                    f"{name} must be a string", context={name: value}
                )

    @staticmethod
    def _load_yaml(raw: str) -> Dict[str, Any]:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to parse YAML config files") from exc
        return yaml.safe_load(raw) or {}
