"""
Configuration Loader (``billing_config.loader``).

Responsibility
--------------
Loads the YAML configuration file and parses it into the frozen
``billing_config.schema`` dataclasses.  Runtime callers go through
``billing_config.get_active_config()`` rather than calling this directly.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; required keys have no silent defaults.
* Exchange rates are kept as decimal strings so no float ever reaches
  the kernel.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Non-positive rate or period count  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from billing_config.schema import BillingConfig, ExchangeRateConfig, ReportingDefaults


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _decimal_string(value: Any, what: str) -> str:
    # str() first: YAML hands unquoted numbers over as floats
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"{what} is not a decimal number: {value!r}") from exc
    if not parsed.is_finite():
        raise ValueError(f"{what} must be finite, got {value!r}")
    return str(parsed)


def parse_exchange_rates(data: dict[str, Any]) -> ExchangeRateConfig:
    """Parse the ``exchange_rates`` section."""
    base = str(data["base_currency"]).upper()
    rates: list[tuple[str, str]] = []
    for code, raw in sorted((data.get("rates") or {}).items()):
        rate = _decimal_string(raw, f"exchange rate for {code}")
        if Decimal(rate) <= 0:
            raise ValueError(f"exchange rate for {code} must be positive, got {raw!r}")
        rates.append((str(code).upper(), rate))
    return ExchangeRateConfig(base_currency=base, rates=tuple(rates))


def parse_reporting(data: dict[str, Any]) -> ReportingDefaults:
    """Parse the optional ``reporting`` section."""
    defaults = ReportingDefaults()
    period_count = int(data.get("default_period_count", defaults.default_period_count))
    if period_count < 1:
        raise ValueError(f"default_period_count must be at least 1, got {period_count}")
    recent_limit = int(data.get("recent_limit", defaults.recent_limit))
    if recent_limit < 0:
        raise ValueError(f"recent_limit must not be negative, got {recent_limit}")
    ratio = _decimal_string(
        data.get("expense_ratio", defaults.expense_ratio), "expense_ratio"
    )
    if not Decimal(0) <= Decimal(ratio) <= Decimal(1):
        raise ValueError(f"expense_ratio must be between 0 and 1, got {ratio}")
    return ReportingDefaults(
        default_period_count=period_count,
        expense_ratio=ratio,
        recent_limit=recent_limit,
    )


def parse_config(data: dict[str, Any]) -> BillingConfig:
    """
    Parse a full configuration document.

    The checksum is computed over the raw document, so two files with the
    same content always produce the same checksum.
    """
    database = data.get("database") or {}
    logging_section = data.get("logging") or {}
    return BillingConfig(
        config_id=str(data["config_id"]),
        version=int(data.get("version", 1)),
        default_currency=str(data.get("default_currency", "USD")).upper(),
        database_url=str(database.get("url", "sqlite://")),
        log_level=str(logging_section.get("level", "INFO")).upper(),
        exchange_rates=parse_exchange_rates(data["exchange_rates"]),
        reporting=parse_reporting(data.get("reporting") or {}),
        checksum=compute_checksum(data),
    )


def load_config_file(path: Path) -> BillingConfig:
    """Load and parse one configuration file."""
    return parse_config(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
