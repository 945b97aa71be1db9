"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

from .fee_policy import FeeVariant


class LedgerConfig(BaseSettings):
    """Fee ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="FEE_LEDGER_",
        env_file=".env",
        case_sensitive=False,
    )

    # Fee policy
    fee_variant: FeeVariant = FeeVariant.EXEMPTION_CHECKED
    initial_fee_rate: int = 100

    # Token metadata and initial supply
    token_name: str = "Fee Ledger Token"
    token_symbol: str = "FLT"
    decimals: int = 18
    initial_supply_units: int = 1_000_000

    # Storage configuration
    storage_backend: str = "memory"  # memory or sqlite
    database_path: str = "fee_ledger.db"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090
    owner_address: Optional[str] = None
    treasury_address: Optional[str] = None

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Feature flags
    enable_audit_logging: bool = True


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
