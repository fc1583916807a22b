"""
billing_config -- single public entrypoint for billing configuration.

Responsibility:
    Provides the one way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``BillingConfig``.

Architecture position:
    Configuration -- sits above ``billing_kernel``.  The kernel MUST NEVER
    import from ``billing_config``; ``billing_config.bridges`` translates
    the config into kernel objects.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - Deterministic checksum: the same YAML document always yields the same
      ``BillingConfig.checksum``.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``KeyError`` / ``ValueError`` -- missing or invalid fields.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``BILLING_CONFIG_TRACE`` log entry with the config id, version and
    checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from billing_config.loader import load_config_file
from billing_config.schema import BillingConfig, ExchangeRateConfig, ReportingDefaults

_logger = logging.getLogger("billing_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> BillingConfig:
    """
    Load, validate and return the active configuration.

    Args:
        config_path: Override path to a YAML configuration file.
            Defaults to billing_config/sets/default.yaml.

    Raises:
        FileNotFoundError: If the file does not exist.
        KeyError: If a required key is missing.
        ValueError: If a value fails validation.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = load_config_file(path)

    _logger.info(
        "BILLING_CONFIG_TRACE",
        extra={
            "trace_type": "BILLING_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "default_currency": config.default_currency,
            "rate_count": len(config.exchange_rates.rates),
            "source": str(path),
        },
    )
    return config


__all__ = [
    "BillingConfig",
    "DEFAULT_CONFIG_PATH",
    "ExchangeRateConfig",
    "ReportingDefaults",
    "get_active_config",
]
