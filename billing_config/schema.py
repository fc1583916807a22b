"""
Billing configuration schema.

Frozen dataclasses that the YAML configuration file is parsed into.  The
loader produces a ``BillingConfig``; bridges translate it into kernel
objects (exchange-rate table, converter, reporting settings).
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExchangeRateConfig:
    """Static exchange-rate table, one entry per currency, relative to the base."""

    base_currency: str
    rates: tuple[tuple[str, str], ...] = ()  # (currency_code, decimal string)

    def as_dict(self) -> dict[str, str]:
        return dict(self.rates)


@dataclass(frozen=True)
class ReportingDefaults:
    """Defaults for dashboard and period reports."""

    default_period_count: int = 6
    expense_ratio: str = "0.70"
    recent_limit: int = 10


@dataclass(frozen=True)
class BillingConfig:
    """The complete, validated configuration for one deployment."""

    config_id: str
    version: int
    default_currency: str
    database_url: str
    log_level: str
    exchange_rates: ExchangeRateConfig
    reporting: ReportingDefaults = field(default_factory=ReportingDefaults)
    checksum: str = ""
