"""
Typed Exception Hierarchy for the Billing Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The API layer translates every failure of a payment or invoice mutation into
a client-facing response.  It must do so by exception TYPE and CODE, never by
parsing message text:

    try:
        payment_service.record_payment(...)
    except CurrencyMismatchError as e:
        api_response(code=e.code, expected=e.currency1, got=e.currency2)
    except InvoiceNotFoundError as e:
        api_response(code=e.code, invoice=e.invoice_id)

Every exception:
  1. Is a dedicated class (catch by type, not message)
  2. Has a ``code`` class attribute (machine-readable, API-safe)
  3. Carries structured data as attributes

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BillingKernelError (base)
    |
    +-- MoneyError
    |   +-- InvalidAmountError
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |   +-- CurrencyMismatchError
    |   +-- UnsupportedCurrencyError
    |
    +-- LedgerError
    |   +-- InvoiceNotFoundError
    |   +-- PaymentNotFoundError
    |   +-- ReportNotFoundError
    |
    +-- ConcurrencyError
        +-- ReconciliationConflictError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                     | When Raised
----------------|--------------------------|------------------------------------------
Money           | INVALID_AMOUNT           | Unparseable or non-finite monetary input
----------------|--------------------------|------------------------------------------
Currency        | INVALID_CURRENCY         | Not a three-letter currency code
                | CURRENCY_MISMATCH        | Arithmetic across currencies without conversion
                | UNSUPPORTED_CURRENCY     | Code absent from the exchange-rate table
----------------|--------------------------|------------------------------------------
Ledger          | INVOICE_NOT_FOUND        | Payment or edit references a missing invoice
                | PAYMENT_NOT_FOUND        | Update/delete of a missing payment
                | REPORT_NOT_FOUND         | Report snapshot ID doesn't exist
----------------|--------------------------|------------------------------------------
Concurrency     | RECONCILIATION_CONFLICT  | Invoice status changed under a reconciliation pass

===============================================================================
PROPAGATION
===============================================================================

The kernel never retries and never logs-and-ignores.  A failed payment
mutation is rolled back together with its reconciliation pass and the
exception reaches the caller unchanged.  Retry policy (e.g. on
ReconciliationConflictError) belongs to the API layer.
"""


class BillingKernelError(Exception):
    """
    Base exception for all billing kernel errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "BILLING_KERNEL_ERROR"


# Money-related exceptions


class MoneyError(BillingKernelError):
    """Base exception for monetary value errors."""

    code: str = "MONEY_ERROR"


class InvalidAmountError(MoneyError):
    """Monetary input is not a finite, parseable number."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, value: object):
        self.value = repr(value)
        super().__init__(f"Invalid monetary amount: {value!r}")


# Currency-related exceptions


class CurrencyError(BillingKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Currency code is not a three-letter code."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: object):
        self.currency = str(currency)
        super().__init__(f"Invalid currency code: {currency!r}")


class CurrencyMismatchError(CurrencyError):
    """Attempted operation on mismatched currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, currency1: str, currency2: str):
        self.currency1 = currency1
        self.currency2 = currency2
        super().__init__(f"Currency mismatch: {currency1} vs {currency2}")


class UnsupportedCurrencyError(CurrencyError):
    """Currency has no entry in the exchange-rate table."""

    code: str = "UNSUPPORTED_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"No exchange rate configured for currency: {currency}")


# Ledger-related exceptions


class LedgerError(BillingKernelError):
    """Base exception for invoice/payment/report lookups."""

    code: str = "LEDGER_ERROR"


class InvoiceNotFoundError(LedgerError):
    """Invoice with given ID was not found."""

    code: str = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: str):
        self.invoice_id = str(invoice_id)
        super().__init__(f"Invoice not found: {invoice_id}")


class PaymentNotFoundError(LedgerError):
    """Payment with given ID was not found."""

    code: str = "PAYMENT_NOT_FOUND"

    def __init__(self, payment_id: str):
        self.payment_id = str(payment_id)
        super().__init__(f"Payment not found: {payment_id}")


class ReportNotFoundError(LedgerError):
    """Report snapshot with given ID was not found."""

    code: str = "REPORT_NOT_FOUND"

    def __init__(self, report_id: str):
        self.report_id = str(report_id)
        super().__init__(f"Report not found: {report_id}")


# Concurrency-related exceptions


class ConcurrencyError(BillingKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class ReconciliationConflictError(ConcurrencyError):
    """Invoice status was written by another transaction during a pass."""

    code: str = "RECONCILIATION_CONFLICT"

    def __init__(self, invoice_id: str, expected_version: int):
        self.invoice_id = str(invoice_id)
        self.expected_version = expected_version
        super().__init__(
            f"Reconciliation conflict on invoice {invoice_id}: "
            f"version {expected_version} was modified by another transaction"
        )
