"""System configuration loaded from foliotrack.yaml.

Search order (first hit wins):
1. Path passed explicitly (CLI ``--config``)
2. ./config/foliotrack.yaml (project-relative)
3. ~/.foliotrack/foliotrack.yaml (user home)
4. Built-in defaults

Example foliotrack.yaml:
    display_currency: EUR
    logging:
      level: INFO
    engine:
      strict: false
    cache:
      quote_ttl_seconds: 1800
      dashboard_ttl_seconds: 300
    exchange_rates:
      USD:
        EUR: 0.92
        INR: 83.2
    sectors:
      AAPL: Technology
"""

from decimal import Decimal
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from foliotrack.services.holdings.models import EngineConfig
from foliotrack.system.log_system import LoggingConfig

DEFAULT_CONFIG_LOCATIONS = (
    Path("config/foliotrack.yaml"),
    Path("~/.foliotrack/foliotrack.yaml"),
)


class CacheConfig(BaseModel):
    """Time-to-live settings for the quote and dashboard caches."""

    quote_ttl_seconds: float = Field(default=30 * 60, description="Quote cache TTL (30 minutes)")
    dashboard_ttl_seconds: float = Field(default=5 * 60, description="Dashboard cache TTL (5 minutes)")

    @field_validator("quote_ttl_seconds", "dashboard_ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: float) -> float:
        """TTL must be positive."""
        if v <= 0:
            raise ValueError(f"TTL must be positive, got {v}")
        return v

    model_config = ConfigDict(frozen=True)


class SystemConfig(BaseModel):
    """
    Complete system configuration.

    Attributes:
        display_currency: Currency the dashboard reports in
        logging: Logging configuration
        engine: Holdings engine policy (strict oversell handling)
        cache: Cache TTLs
        exchange_rates: Static FX table, ``{from: {to: rate}}``
        sectors: Ticker -> sector used for sector allocation
    """

    display_currency: str = "USD"
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    exchange_rates: dict[str, dict[str, Decimal]] = Field(default_factory=dict)
    sectors: dict[str, str] = Field(default_factory=dict)

    @field_validator("display_currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """Currency codes are stored upper-case."""
        return v.strip().upper()

    @classmethod
    def from_yaml(cls, path: Path) -> "SystemConfig":
        """Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the YAML cannot be parsed or is not a mapping
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML from {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

        return cls(**data)

    @classmethod
    def load(cls, path: str | Path | None = None) -> "SystemConfig":
        """Load configuration using the search order in the module docstring."""
        if path is not None:
            explicit = Path(path).expanduser()
            if not explicit.exists():
                raise FileNotFoundError(f"Config file not found: {path}")
            return cls.from_yaml(explicit)

        for candidate in DEFAULT_CONFIG_LOCATIONS:
            candidate = candidate.expanduser()
            if candidate.exists():
                return cls.from_yaml(candidate)

        return cls()


_system_config: SystemConfig | None = None


def get_system_config() -> SystemConfig:
    """Get the process-wide system configuration, loading it on first use."""
    global _system_config
    if _system_config is None:
        _system_config = SystemConfig.load()
    return _system_config


def reload_system_config(path: str | Path | None = None) -> SystemConfig:
    """Force reload of the system configuration."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
