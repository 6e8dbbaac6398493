from decimal import Decimal
from typing import Tuple

from keycurve.common.math import bps_fraction, clamp


class LinearCurveHelper:
    """A separate helper class for the arithmetic used by LinearBondingCurve."""

    @staticmethod
    def price_at(supply: Decimal, base_price: Decimal, increment: Decimal, max_supply: Decimal) -> Decimal:
        """
        price(s) = base_price + clamp(s, 0, max_supply) * increment
        """
        return base_price + clamp(supply, Decimal("0"), max_supply) * increment

    @staticmethod
    def average_price(
        start: Decimal,
        end: Decimal,
        base_price: Decimal,
        increment: Decimal,
        max_supply: Decimal,
    ) -> Decimal:
        """
        Mean of the linear price function over [start, end]. Both ends are clamped to
        [0, max_supply] and the order of the arguments does not matter.
        """
        lo = clamp(min(start, end), Decimal("0"), max_supply)
        hi = clamp(max(start, end), Decimal("0"), max_supply)
        p_lo = LinearCurveHelper.price_at(lo, base_price, increment, max_supply)
        if lo == hi:
            return p_lo
        p_hi = LinearCurveHelper.price_at(hi, base_price, increment, max_supply)
        return (p_lo + p_hi) / Decimal("2")

    @staticmethod
    def cost_between(start: Decimal, end: Decimal, base_price: Decimal, increment: Decimal) -> Decimal:
        """
        Computes the integral of the linear price function from 'start' to 'end':
            cost = base_price*(end - start) + (increment/2)*(end^2 - start^2).
        Equal to average_price * (end - start) for an unclamped range.
        """
        return (base_price * (end - start)) + (increment / Decimal("2")) * (end ** 2 - start ** 2)

    @staticmethod
    def split_fees(trade_value: Decimal, creator_fee_bps: Decimal, protocol_fee_bps: Decimal) -> Tuple[Decimal, Decimal]:
        """Returns (creator_fee, protocol_fee) for a pre-fee trade value."""
        return bps_fraction(trade_value, creator_fee_bps), bps_fraction(trade_value, protocol_fee_bps)

    @staticmethod
    def unfilled_pct(requested: Decimal, filled: Decimal) -> Decimal:
        """Percentage of 'requested' that could not be filled."""
        if filled < requested:
            return (requested - filled) / requested * Decimal("100")
        return Decimal("0")
