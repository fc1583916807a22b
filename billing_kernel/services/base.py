"""
BaseService -- abstract base for all billing kernel services.

Responsibility:
    Holds the caller's SQLAlchemy ``Session`` and the one transactional
    helper every mutating service shares: ``savepoint()``, which runs a
    write and the reconciliation pass it triggers as a single unit.

Architecture position:
    Kernel > Services -- imperative shell around the pure domain core.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or rollback the outer transaction.
      The caller (``session_scope()``, a request handler, or the test
      harness) owns commit/rollback.
    - All-or-nothing units: work inside ``savepoint()`` is either kept as a
      whole or rolled back as a whole; the outer transaction stays usable.

Failure modes:
    - Any exception inside ``savepoint()`` rolls the SAVEPOINT back, is
      logged as ``mutation_rolled_back`` and propagates unchanged.
    - If a subclass calls ``session.commit()``, a payment write and its
      reconciliation can become visible separately.
"""

from abc import ABC
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from billing_kernel.db.base import Base
from billing_kernel.logging_config import get_logger

logger = get_logger("services.base")

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.

    Non-goals:
        - Does NOT manage the outer transaction lifecycle.
        - Does NOT provide query-only (read) methods -- those belong
          in ``billing_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def savepoint(self, operation: str) -> Iterator[None]:
        """
        Run the block inside a SAVEPOINT.

        Usage::

            with self.savepoint("record_payment"):
                self._ledger.add_payment(payment)
                self._reconciliation.on_payment_created(invoice_id)
        """
        try:
            with self.session.begin_nested():
                yield
        except Exception as exc:
            logger.warning(
                "mutation_rolled_back",
                extra={
                    "service": type(self).__name__,
                    "operation": operation,
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            raise
