import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

from keycurve.common.errors import InvalidSupply
from keycurve.common.math import Number, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitResult:
    """Outcome of a compare-and-set on a subject's supply. current_supply is the stored value afterwards."""
    committed: bool
    current_supply: Decimal


class SupplyRepository(ABC):
    """
    Single owner of each subject's key supply.

    Curves never hold supply; callers read it here, quote against it, and write the quote's
    new_supply back with commit(). commit() only succeeds if the stored supply still equals
    the value the quote was computed from.
    """

    @abstractmethod
    def read(self, subject: str) -> Decimal:
        """Current supply for 'subject'; 0 for a subject that has never traded."""
        pass

    @abstractmethod
    def commit(self, subject: str, expected_supply: Number, new_supply: Number) -> CommitResult:
        """Set supply to 'new_supply' only if it currently equals 'expected_supply'."""
        pass


class InMemorySupplyRepository(SupplyRepository):
    """Dict-backed repository; a lock makes each compare-and-set atomic across threads."""

    def __init__(self, initial: Optional[Dict[str, Number]] = None):
        self._lock = threading.Lock()
        self._supplies: Dict[str, Decimal] = {}
        for subject, supply in (initial or {}).items():
            self._supplies[subject] = self._checked(supply)

    @staticmethod
    def _checked(supply: Number) -> Decimal:
        value = to_decimal(supply)
        if not value.is_finite() or value < 0:
            raise InvalidSupply(f"Stored supply cannot be negative, got {supply}.")
        return value

    def read(self, subject: str) -> Decimal:
        with self._lock:
            return self._supplies.get(subject, Decimal("0"))

    def commit(self, subject: str, expected_supply: Number, new_supply: Number) -> CommitResult:
        expected = to_decimal(expected_supply)
        new_value = self._checked(new_supply)
        with self._lock:
            current = self._supplies.get(subject, Decimal("0"))
            if current != expected:
                logger.warning(
                    "Rejected supply commit for %s: expected %s, stored %s", subject, expected, current
                )
                return CommitResult(committed=False, current_supply=current)
            self._supplies[subject] = new_value
            return CommitResult(committed=True, current_supply=new_value)

    def subjects(self):
        with self._lock:
            return sorted(self._supplies)
