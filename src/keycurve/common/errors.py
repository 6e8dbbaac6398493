from decimal import Decimal
from typing import List, Optional


class BondingCurveError(ValueError):
    """Base class for every pricing / settlement error raised by keycurve."""


class InvalidAmount(BondingCurveError):
    """Trade amount is zero, negative or not a finite number."""


class InvalidSupply(BondingCurveError):
    """Supply passed in is negative or not a finite number."""


class SupplyExhausted(BondingCurveError):
    """Supply already sits at max_supply; a buy cannot fill anything."""


class NoSupply(BondingCurveError):
    """Supply is zero; there is nothing to sell."""


class InvalidConfig(BondingCurveError):
    """CurveConfig failed one or more construction-time checks."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class StaleSupply(BondingCurveError):
    """The supply a quote was computed against no longer matches the stored supply."""

    def __init__(self, subject: str, expected: Decimal, actual: Optional[Decimal]):
        self.subject = subject
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Supply for '{subject}' changed from {expected} to {actual} before commit."
        )
