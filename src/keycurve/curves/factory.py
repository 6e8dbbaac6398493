from dataclasses import replace
from decimal import Decimal
from typing import Optional

from keycurve.common.enums import OrderSide
from keycurve.common.errors import InvalidConfig
from keycurve.common.math import Number
from keycurve.common.model import CurveConfig, TradeQuote
from keycurve.curves.single.linear import LinearBondingCurve


DEFAULT_CURVE_CONFIG = CurveConfig(
    base_price=Decimal("0.001"),
    price_increment=Decimal("0.0001"),
    max_supply=Decimal("1000000"),
    creator_fee_bps=Decimal("500"),
    protocol_fee_bps=Decimal("250"),
)


def create_bonding_curve(config: Optional[CurveConfig] = None, **overrides) -> LinearBondingCurve:
    """
    Builds a LinearBondingCurve from 'config' (DEFAULT_CURVE_CONFIG when omitted) with any
    CurveConfig field overridden by keyword, e.g. create_bonding_curve(creator_fee_bps=300).
    """
    base = config or DEFAULT_CURVE_CONFIG
    if overrides:
        base = replace(base, **overrides)
    return LinearBondingCurve(base)


def calculate_key_price(supply: Number, config: Optional[CurveConfig] = None) -> Decimal:
    return LinearBondingCurve(config or DEFAULT_CURVE_CONFIG).spot_price(supply)


def calculate_trade_quote(
    supply: Number,
    amount: Number,
    is_buy: bool,
    config: Optional[CurveConfig] = None,
) -> TradeQuote:
    curve = LinearBondingCurve(config or DEFAULT_CURVE_CONFIG)
    return curve.quote_trade(supply, amount, OrderSide.from_is_buy(is_buy))


def is_valid_config(**fields) -> bool:
    """True when the given CurveConfig fields would construct successfully."""
    try:
        CurveConfig(**fields)
    except (InvalidConfig, TypeError):
        return False
    return True
