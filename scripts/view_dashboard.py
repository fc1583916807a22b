#!/usr/bin/env python3
"""
View dashboard statistics and period buckets from persisted data.

Connects to the database named in the billing configuration (or on the
command line) and prints the dashboard totals, the most recent invoices
and the revenue/payments/estimated-expenses buckets.

Usage:
    python3 scripts/view_dashboard.py
    python3 scripts/view_dashboard.py --db-url sqlite:///billing.db --periods 12
    python3 scripts/view_dashboard.py --owner 6f1c... --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from uuid import UUID

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

W = 72


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print billing dashboard statistics and period buckets",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to a billing YAML config")
    parser.add_argument("--db-url", default=None, help="Database URL (overrides the config)")
    parser.add_argument("--owner", type=UUID, default=None, help="Restrict to one owner id")
    parser.add_argument("--periods", type=int, default=None, help="Number of monthly buckets")
    parser.add_argument(
        "--preset",
        choices=["last_3_months", "last_6_months", "last_12_months"],
        default=None,
        help="Named report range (overrides --periods)",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of tables")
    parser.add_argument(
        "--verbose", action="store_true", help="Emit kernel logs to stderr at the configured level"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    from billing_config import get_active_config
    from billing_config.bridges import build_reporting_service, configure_logging_from_config
    from billing_kernel.db.engine import get_session, init_engine_from_url
    from billing_kernel.domain.aggregation import bucket_to_dict, stats_to_dict
    from billing_kernel.domain.values import Money, format_money
    from billing_kernel.exceptions import BillingKernelError

    if not args.verbose:
        logging.disable(logging.CRITICAL)
    config = get_active_config(args.config)
    if args.verbose:
        configure_logging_from_config(config, stream=sys.stderr)

    # -----------------------------------------------------------------
    # Connect
    # -----------------------------------------------------------------
    try:
        init_engine_from_url(args.db_url or config.database_url, echo=False)
    except Exception as exc:
        print(f"  ERROR: Could not connect: {exc}", file=sys.stderr)
        return 1

    session = get_session()
    try:
        svc = build_reporting_service(session, config)
        try:
            stats = svc.compute_dashboard_stats(owner_id=args.owner)
            if args.preset:
                buckets = svc.compute_preset_buckets(args.preset, owner_id=args.owner)
            else:
                buckets = svc.compute_report_buckets(args.periods, owner_id=args.owner)
        except BillingKernelError as exc:
            print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
            return 1

        if args.json:
            print(json.dumps(
                {
                    "dashboard": stats_to_dict(stats),
                    "buckets": [bucket_to_dict(b) for b in buckets],
                },
                indent=2,
            ))
            return 0

        # -----------------------------------------------------------------
        # Dashboard
        # -----------------------------------------------------------------
        print("=" * W)
        print("  DASHBOARD".center(W))
        print("=" * W)
        print(f"  {'Total revenue':<30}{format_money(stats.total_revenue):>40}")
        print(f"  {'Total payments':<30}{format_money(stats.total_payments):>40}")
        print(f"  {'Outstanding balance':<30}{format_money(stats.outstanding_balance):>40}")
        print(f"  {'Pending invoices':<30}{stats.pending_invoices:>40}")
        print()

        print("  Recent invoices")
        print("  " + "-" * (W - 2))
        for inv in stats.recent_invoices:
            print(
                f"  {inv.issue_date.isoformat():<12}{inv.title[:28]:<30}"
                f"{inv.status.value:<10}{format_money(inv.amount):>18}"
            )
        if not stats.recent_invoices:
            print("  (none)")
        print()

        # -----------------------------------------------------------------
        # Buckets
        # -----------------------------------------------------------------
        print("=" * W)
        print("  PERIODS".center(W))
        print("=" * W)
        print(f"  {'Period':<12}{'Revenue':>18}{'Payments':>18}{'Est. expenses':>22}")
        print("  " + "-" * (W - 2))
        currency = svc.settings.currency
        for b in buckets:
            print(
                f"  {b.label:<12}{format_money(b.revenue):>18}"
                f"{format_money(b.payments_total):>18}{format_money(b.estimated_expenses):>22}"
            )
        revenue = Money.sum((b.revenue for b in buckets), currency)
        payments = Money.sum((b.payments_total for b in buckets), currency)
        print("  " + "-" * (W - 2))
        print(f"  {'Total':<12}{format_money(revenue):>18}{format_money(payments):>18}")
        print()
        print("  Expenses are estimated from revenue, not recorded.")
        return 0

    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())
