"""
Billing Kernel - Invoice/Payment Ledger and Reconciliation Engine

A small-business billing core with:
- Integer minor-unit Money with round-half-up conversion
- Static-table currency conversion through a base currency
- Invoice status derived from the payment set on every payment change
- Period-bucketed revenue and payment aggregation for reports
"""

__version__ = "0.1.0"
