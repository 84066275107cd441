"""
Module: property_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
    Selectors provide structured read access to payment data without
    mutation capability.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors MUST NOT call session.add(),
      session.delete(), session.commit(), or session.flush().
    - DTO return convention: selectors return frozen dataclasses, not ORM
      instances.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from property_kernel.db.base import Base
from property_kernel.domain.clock import Clock, SystemClock

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        """
        Initialize the selector.

        Args:
            session: SQLAlchemy session for database operations.
            clock: Clock for "as of now" defaults.  Defaults to SystemClock.
        """
        self.session = session
        self._clock = clock or SystemClock()
