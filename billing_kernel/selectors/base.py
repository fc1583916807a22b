"""
Module: billing_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors, plus
    the filter clauses every ledger listing shares (owner scope, inclusive
    date range) and DTO materialization.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain DTOs.  MUST NOT import from services/.

Invariants enforced:
    - Read-only access: Selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - DTO return convention: Selectors return frozen dataclasses, NOT raw ORM
      model instances.
    - Owner scope: ``owner_id=None`` means every owner (administrator view).
"""

from abc import ABC
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import Select
from sqlalchemy.orm import InstrumentedAttribute, Session


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def _owned_by(stmt: Select, model: type, owner_id: UUID | None) -> Select:
        if owner_id is None:
            return stmt
        return stmt.where(model.owner_id == owner_id)

    @staticmethod
    def _within(
        stmt: Select,
        column: InstrumentedAttribute,
        start: date | None,
        end: date | None,
    ) -> Select:
        """Restrict ``column`` to the inclusive range [start, end]."""
        if start is not None:
            stmt = stmt.where(column >= start)
        if end is not None:
            stmt = stmt.where(column <= end)
        return stmt

    def _dtos(self, stmt: Select) -> list[Any]:
        return [model.to_dto() for model in self.session.execute(stmt).scalars()]
