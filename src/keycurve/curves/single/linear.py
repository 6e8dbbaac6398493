import logging
from decimal import Decimal, InvalidOperation
from typing import List

from keycurve.common.enums import OrderSide
from keycurve.common.errors import InvalidAmount, InvalidSupply, NoSupply, SupplyExhausted
from keycurve.common.math import Number, to_decimal
from keycurve.common.model import CurveConfig, CurvePoint, CurveStats, KeyMetrics, TradeQuote
from keycurve.curves.single.base import BondingCurve
from keycurve.curves.utils.format_helper import FormatHelper
from keycurve.curves.utils.linear_curve_helper import LinearCurveHelper as helper

logger = logging.getLogger(__name__)


class LinearBondingCurve(BondingCurve):
    """
        A linear key curve with a supply ceiling and a two-way fee split.

        The price at supply s is:
          price(s) = base_price + clamp(s, 0, max_supply) * price_increment

        A trade moving supply from a to b is charged the mean price over [a, b]:
          avg(a, b) = (price(a) + price(b)) / 2
        which, for a linear function, equals the integral of price over [a, b] divided by (b - a).

        Buys that would cross max_supply and sells that would cross zero are partially
        filled; the unfilled share is reported as price_impact_pct instead of an error.
        Creator and protocol fees are added on top of a buy and taken out of a sell.
    """

    def __init__(self, config: CurveConfig):
        super().__init__(config)

    @staticmethod
    def _checked_amount(amount: Number) -> Decimal:
        try:
            value = to_decimal(amount)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidAmount(f"Amount is not a number: {amount!r}")
        if not value.is_finite() or value <= 0:
            raise InvalidAmount(f"Amount must be a finite number greater than 0, got {amount}.")
        return value

    @staticmethod
    def _checked_supply(supply: Number) -> Decimal:
        try:
            value = to_decimal(supply)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidSupply(f"Supply is not a number: {supply!r}")
        if not value.is_finite() or value < 0:
            raise InvalidSupply(f"Supply must be a finite number >= 0, got {supply}.")
        return value

    def spot_price(self, supply: Number) -> Decimal:
        """
        Return the unit price at 'supply'. Supplies outside [0, max_supply] are clamped.
        """
        cfg = self.config
        return helper.price_at(to_decimal(supply), cfg.base_price, cfg.price_increment, cfg.max_supply)

    def average_price(self, start: Number, end: Number) -> Decimal:
        cfg = self.config
        return helper.average_price(
            to_decimal(start), to_decimal(end), cfg.base_price, cfg.price_increment, cfg.max_supply
        )

    def _build_quote(
        self,
        side: OrderSide,
        requested: Decimal,
        supply: Decimal,
        new_supply: Decimal,
        filled: Decimal,
    ) -> TradeQuote:
        cfg = self.config
        execution_price = self.average_price(min(supply, new_supply), max(supply, new_supply))
        trade_value = execution_price * filled
        creator_fee, protocol_fee = helper.split_fees(trade_value, cfg.creator_fee_bps, cfg.protocol_fee_bps)

        if side is OrderSide.BUY:
            total_cost = trade_value + creator_fee + protocol_fee
        else:
            total_cost = trade_value - creator_fee - protocol_fee

        quote = TradeQuote(
            side=side,
            requested_amount=requested,
            filled_amount=filled,
            execution_price=execution_price,
            trade_value=trade_value,
            creator_fee=creator_fee,
            protocol_fee=protocol_fee,
            total_cost=total_cost,
            new_supply=new_supply,
            price_impact_pct=helper.unfilled_pct(requested, filled),
        )
        logger.debug(
            "%s quote: supply=%s requested=%s filled=%s total_cost=%s impact=%s",
            side, supply, requested, filled, total_cost, quote.price_impact_pct
        )
        return quote

    def quote_buy(self, supply: Number, amount: Number) -> TradeQuote:
        """
        Buys up to 'amount' keys from 'supply':
          1) amount must be > 0, supply must be >= 0
          2) new_supply = min(supply + amount, max_supply)
          3) nothing fillable -> SupplyExhausted
          4) total_cost = trade_value + creator_fee + protocol_fee
        """
        amount = self._checked_amount(amount)
        supply = self._checked_supply(supply)

        new_supply = min(supply + amount, self.config.max_supply)
        filled = new_supply - supply
        if filled <= 0:
            raise SupplyExhausted(f"Cannot buy more keys, max supply {self.config.max_supply} reached.")

        return self._build_quote(OrderSide.BUY, amount, supply, new_supply, filled)

    def quote_sell(self, supply: Number, amount: Number) -> TradeQuote:
        """
        Sells up to 'amount' keys from 'supply', never taking supply below zero.
        The seller receives trade_value - creator_fee - protocol_fee.
        """
        amount = self._checked_amount(amount)
        supply = self._checked_supply(supply)
        if supply <= 0:
            raise NoSupply("No keys to sell.")

        new_supply = max(supply - amount, Decimal("0"))
        filled = supply - new_supply

        return self._build_quote(OrderSide.SELL, amount, supply, new_supply, filled)

    def max_buy_for_payment(self, supply: Number, max_payment: Number) -> Decimal:
        """
        Largest whole number of keys whose buy total_cost (fees included) fits in 'max_payment'.
        Returns 0 when not even one key is affordable.
        """
        try:
            budget = to_decimal(max_payment)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidAmount(f"Payment is not a number: {max_payment!r}")
        if not budget.is_finite() or budget <= 0:
            raise InvalidAmount(f"Payment must be greater than 0, got {max_payment}.")
        supply = self._checked_supply(supply)

        remaining = self.config.max_supply - supply
        if remaining <= 0:
            raise SupplyExhausted(f"Cannot buy more keys, max supply {self.config.max_supply} reached.")

        low, high = 1, int(remaining)
        result = 0
        while low <= high:
            mid = (low + high) // 2
            if self.quote_buy(supply, mid).total_cost <= budget:
                result = mid
                low = mid + 1
            else:
                high = mid - 1

        return Decimal(result)

    def liquidity(self, supply: Number) -> Decimal:
        """
        Value paid out (before fees) if the entire supply were sold back into the curve.
        """
        supply = to_decimal(supply)
        if supply <= 0:
            return Decimal("0")
        supply = min(supply, self.config.max_supply)
        return self.average_price(Decimal("0"), supply) * supply

    def curve_stats(self, supply: Number) -> CurveStats:
        supply = self._checked_supply(supply)
        return CurveStats(
            current_price=self.spot_price(supply),
            market_cap=self.market_cap(supply),
            liquidity=self.liquidity(supply),
            supply=supply,
            max_supply=self.config.max_supply,
        )

    def key_metrics(
        self,
        supply: Number,
        total_volume: Number,
        holders: int,
        creator_earnings: Number,
    ) -> KeyMetrics:
        zero = Decimal("0")
        supply = to_decimal(supply)
        return KeyMetrics(
            current_price=max(zero, self.spot_price(supply)),
            market_cap=max(zero, self.market_cap(supply)),
            total_volume=max(zero, to_decimal(total_volume)),
            holders=max(0, int(holders)),
            supply=max(zero, supply),
            max_supply=self.config.max_supply,
            creator_earnings=max(zero, to_decimal(creator_earnings)),
        )

    @staticmethod
    def validate_trade_amount(amount: Number, max_amount: Number) -> bool:
        try:
            value = to_decimal(amount)
            limit = to_decimal(max_amount)
        except (InvalidOperation, TypeError, ValueError):
            return False
        if not value.is_finite() or limit.is_nan():
            return False
        return Decimal("0") < value <= limit

    def curve_points(self, steps: int = 100) -> List[CurvePoint]:
        """
        Samples the curve at steps + 1 evenly spaced supplies from 0 to max_supply.
        """
        if steps < 1:
            raise InvalidAmount(f"steps must be >= 1, got {steps}.")
        step_size = self.config.max_supply / Decimal(steps)
        points = []
        for i in range(steps + 1):
            supply = step_size * i
            points.append(CurvePoint(supply=supply, price=self.spot_price(supply), market_cap=self.market_cap(supply)))
        return points

    def format_price(self, price: Number) -> str:
        return FormatHelper.format_price(price)

    def format_amount(self, amount: Number) -> str:
        return FormatHelper.format_amount(amount)
