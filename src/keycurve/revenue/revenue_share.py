from decimal import Decimal, ROUND_FLOOR

from keycurve.common.errors import InvalidAmount
from keycurve.common.math import Number, bps_fraction, to_decimal
from keycurve.common.model import RevenueDistribution

CREATOR_SHARE_BPS = Decimal("500")
PROTOCOL_SHARE_BPS = Decimal("250")
REFERRER_SHARE_BPS = Decimal("100")

HIGH_VOLUME_SOL = Decimal("100")
MID_VOLUME_SOL = Decimal("10")
HIGH_HOLDER_COUNT = 1000
MID_HOLDER_COUNT = 100
MAX_VOLUME_MULTIPLIER = 10


class RevenueShareHelper:
    """Splits trade value between creator, protocol and an optional referrer."""

    @staticmethod
    def calculate_distribution(
        total_amount: Number,
        has_referrer: bool,
        creator_bps: Number = CREATOR_SHARE_BPS,
        protocol_bps: Number = PROTOCOL_SHARE_BPS,
        referrer_bps: Number = REFERRER_SHARE_BPS,
    ) -> RevenueDistribution:
        """
        creator/protocol/referrer each take their bps share of 'total_amount'; whatever is
        left over is 'remaining_amount' (the seller's proceeds, or the curve's reserve on a buy).
        The referrer share is zero when there is no referrer.
        """
        total = to_decimal(total_amount)
        if not total.is_finite() or total <= 0:
            raise InvalidAmount(f"Revenue amount must be greater than 0, got {total_amount}.")

        creator_amount = bps_fraction(total, to_decimal(creator_bps))
        protocol_amount = bps_fraction(total, to_decimal(protocol_bps))
        referrer_amount = bps_fraction(total, to_decimal(referrer_bps)) if has_referrer else Decimal("0")

        remaining = total - creator_amount - protocol_amount - referrer_amount
        if remaining < 0:
            raise InvalidAmount("Revenue shares add up to more than the total amount.")

        return RevenueDistribution(
            creator_amount=creator_amount,
            protocol_amount=protocol_amount,
            referrer_amount=referrer_amount,
            remaining_amount=remaining,
        )

    @staticmethod
    def calculate_dynamic_fee_rate(base_fee_bps: int, volume_24h: Number, holder_count: int) -> int:
        """
        Discounts a fee for busy, widely held keys. Whole bps, rounded down at each step:
          - 24h volume > 100 SOL: x0.90, > 10 SOL: x0.95
          - holders > 1000: x0.85, > 100: x0.90
        The result never drops below half of 'base_fee_bps'.
        """
        volume = to_decimal(volume_24h)
        fee = int(base_fee_bps)

        if volume > HIGH_VOLUME_SOL:
            fee = fee * 90 // 100
        elif volume > MID_VOLUME_SOL:
            fee = fee * 95 // 100

        if holder_count > HIGH_HOLDER_COUNT:
            fee = fee * 85 // 100
        elif holder_count > MID_HOLDER_COUNT:
            fee = fee * 90 // 100

        return max(fee, int(base_fee_bps) // 2)

    @staticmethod
    def calculate_creator_lifetime_value(supply: Number, current_price: Number, total_volume: Number) -> Decimal:
        """
        market_cap * creator share, scaled by (10 + min(whole SOL of volume, 10)) / 10.
        """
        market_cap = to_decimal(supply) * to_decimal(current_price)
        volume = to_decimal(total_volume)

        multiplier = 10
        if volume > 0:
            whole_sol = int(volume.to_integral_value(rounding=ROUND_FLOOR))
            multiplier += min(whole_sol, MAX_VOLUME_MULTIPLIER)

        return bps_fraction(market_cap, CREATOR_SHARE_BPS) * Decimal(multiplier) / Decimal("10")
