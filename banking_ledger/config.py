"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from decimal import Decimal, InvalidOperation
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings

from .currency import Currency


class LedgerConfig(BaseSettings):
    """Banking ledger configuration"""

    # Ledger currency (ISO 4217 code)
    currency: str = "USD"

    # Loan ceiling policy, applied per approve_loan request:
    #   fixed             -> amount <= max_loan_amount
    #   balance_multiple  -> amount <= balance * loan_balance_multiple
    loan_limit_policy: Literal["fixed", "balance_multiple"] = "fixed"
    max_loan_amount: str = "10000.00"
    loan_balance_multiple: str = "5"

    # Feature flags
    enable_audit_logging: bool = True

    # Logging configuration
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    class Config:
        env_prefix = "BANKING_LEDGER_"
        env_file = ".env"
        case_sensitive = False

    @field_validator("currency")
    @classmethod
    def _known_currency(cls, value: str) -> str:
        code = value.strip().upper()
        if code not in Currency.__members__:
            raise ValueError(f"Unsupported currency: {value}")
        return code

    @field_validator("max_loan_amount", "loan_balance_multiple")
    @classmethod
    def _non_negative_decimal(cls, value: str) -> str:
        try:
            parsed = Decimal(value)
        except InvalidOperation:
            raise ValueError(f"Not a decimal number: {value!r}") from None
        if not parsed.is_finite() or parsed < 0:
            raise ValueError(f"Must be a finite, non-negative number: {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def ledger_currency(self) -> Currency:
        return Currency[self.currency]


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
