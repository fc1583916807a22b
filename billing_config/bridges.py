"""
Config -> Kernel Bridges.

Functions that convert a ``BillingConfig`` into kernel objects.  These live
in billing_config (the producer) because the kernel never imports
billing_config.

Usage:
    from billing_config import get_active_config
    from billing_config.bridges import build_reporting_service

    config = get_active_config()
    reporting = build_reporting_service(session, config)
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from billing_config.schema import BillingConfig
from billing_kernel.domain.clock import Clock
from billing_kernel.domain.converter import CurrencyConverter, ExchangeRateTable
from billing_kernel.logging_config import configure_logging
from billing_kernel.services.reporting_service import (
    ReportingService,
    ReportingSettings,
)


def build_exchange_rate_table(config: BillingConfig) -> ExchangeRateTable:
    """Exchange-rate table from the configured rates."""
    return ExchangeRateTable(
        base_currency=config.exchange_rates.base_currency,
        rates={code: Decimal(rate) for code, rate in config.exchange_rates.rates},
    )


def build_converter(config: BillingConfig) -> CurrencyConverter:
    return CurrencyConverter(build_exchange_rate_table(config))


def build_reporting_settings(config: BillingConfig) -> ReportingSettings:
    return ReportingSettings(
        currency=config.default_currency,
        default_period_count=config.reporting.default_period_count,
        expense_ratio=Decimal(config.reporting.expense_ratio),
        recent_limit=config.reporting.recent_limit,
    )


def build_reporting_service(
    session: Session,
    config: BillingConfig,
    clock: Clock | None = None,
) -> ReportingService:
    """ReportingService wired with the configured converter and settings."""
    return ReportingService(
        session,
        converter=build_converter(config),
        clock=clock,
        settings=build_reporting_settings(config),
    )


def configure_logging_from_config(config: BillingConfig, stream=None) -> None:
    """Install the kernel's JSON log handler at the configured level."""
    configure_logging(level=config.log_level, stream=stream)
