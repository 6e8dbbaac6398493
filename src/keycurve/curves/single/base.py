import logging
from abc import ABC, abstractmethod
from decimal import Decimal

from keycurve.common.enums import OrderSide
from keycurve.common.errors import InvalidAmount
from keycurve.common.math import Number, to_decimal
from keycurve.common.model import CurveConfig, TradeQuote, TradeRequest

logger = logging.getLogger(__name__)

MAX_IMPACT_PCT = Decimal("100")
MIN_TRADE_SIZE = Decimal("0.1")
SEARCH_TOLERANCE = Decimal("0.01")


class BondingCurve(ABC):
    """
    Abstract base class defining the interface for any bonding curve implementation.

    Subclasses supply the price function and the two quote directions. The impact check and
    the optimal size search here only go through those quotes, so they work for any curve shape.
    A curve never holds supply: every method takes the caller's supply and returns a value.
    """
    def __init__(self, config: 'CurveConfig'):
        """
        :param config: CurveConfig - already validated, immutable curve parameters
        """
        if not isinstance(config, CurveConfig):
            raise TypeError(f"Expected CurveConfig, got {type(config).__name__}.")
        self._config = config

    @property
    def config(self) -> 'CurveConfig':
        """Returns the curve configuration."""
        return self._config

    @abstractmethod
    def spot_price(self, supply: Number) -> Decimal:
        """
        Returns the unit price at a given supply.

        :param supply: Current supply of keys.
        :return: Decimal: The price at given supply.
        """
        pass

    @abstractmethod
    def quote_buy(self, supply: Number, amount: Number) -> 'TradeQuote':
        """
        Quotes buying 'amount' keys starting from 'supply'. Fees are added to the trade value.

        :param supply: Supply before the trade.
        :param amount: Number of keys the user wants to buy.
        :return: TradeQuote
        """
        pass

    @abstractmethod
    def quote_sell(self, supply: Number, amount: Number) -> 'TradeQuote':
        """
        Quotes selling 'amount' keys back into the curve from 'supply'. Fees are deducted from
        the trade value.

        :param supply: Supply before the trade.
        :param amount: Number of keys the user wants to sell.
        :return: TradeQuote
        """
        pass

    def quote_trade(self, supply: Number, amount: Number, side: 'OrderSide') -> 'TradeQuote':
        if side is OrderSide.BUY:
            return self.quote_buy(supply, amount)
        return self.quote_sell(supply, amount)

    def quote(self, request: 'TradeRequest', supply: Number) -> 'TradeQuote':
        """Quotes a TradeRequest against the given supply."""
        return self.quote_trade(supply, request.amount, request.side)

    def market_cap(self, supply: Number) -> Decimal:
        supply = to_decimal(supply)
        if supply <= 0:
            return Decimal("0")
        return self.spot_price(supply) * supply

    def impact(self, supply: Number, amount: Number, is_buy: bool) -> Decimal:
        """
        Percentage of 'amount' that would go unfilled. Returns 100 whenever the quote itself
        cannot be computed; callers must treat 100 as "do not execute".
        """
        try:
            quote = self.quote_trade(supply, amount, OrderSide.from_is_buy(is_buy))
        except (ValueError, ArithmeticError, TypeError) as e:
            logger.debug("Impact check failed for supply=%s amount=%s: %s", supply, amount, e)
            return MAX_IMPACT_PCT
        return quote.price_impact_pct

    def _search_upper_bound(self, supply: Decimal, is_buy: bool) -> Decimal:
        if is_buy:
            return max(Decimal("1"), self.config.max_supply - supply)
        return max(Decimal("1"), supply)

    def max_size_for_impact(self, supply: Number, max_impact_pct: Number, is_buy: bool) -> Decimal:
        """
        Bisects trade size over [0.1, upper_bound] for the largest amount whose impact stays
        within 'max_impact_pct'. Stops once the interval is no wider than 0.01.
        Never returns less than 0.1.
        """
        max_impact_pct = to_decimal(max_impact_pct)
        if not max_impact_pct.is_finite() or max_impact_pct < 0:
            raise InvalidAmount(f"max_impact_pct must be a finite number >= 0, got {max_impact_pct}.")

        # Out of range supplies are left to impact(), which reports them as 100%.
        try:
            supply = to_decimal(supply)
        except (ArithmeticError, TypeError, ValueError):
            return MIN_TRADE_SIZE
        if not supply.is_finite():
            return MIN_TRADE_SIZE

        low = MIN_TRADE_SIZE
        high = self._search_upper_bound(supply, is_buy)
        best = low

        while high - low > SEARCH_TOLERANCE:
            mid = (low + high) / Decimal("2")
            if self.impact(supply, mid, is_buy) <= max_impact_pct:
                best = mid
                low = mid
            else:
                high = mid

        return max(MIN_TRADE_SIZE, best)
