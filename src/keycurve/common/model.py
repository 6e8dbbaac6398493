from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from typing import Optional

from keycurve.common.enums import OrderSide
from keycurve.common.errors import InvalidConfig
from keycurve.common.math import to_decimal
from keycurve.validation.config_validator import validate_config


@dataclass(frozen=True)
class CurveConfig:
    """Immutable parameters of one subject's linear key curve. Validated on construction."""
    base_price: Decimal
    price_increment: Decimal
    max_supply: Decimal
    creator_fee_bps: Decimal = Decimal("0")
    protocol_fee_bps: Decimal = Decimal("0")

    def __post_init__(self):
        errors = []
        for f in fields(self):
            raw = getattr(self, f.name)
            try:
                object.__setattr__(self, f.name, to_decimal(raw))
            except (InvalidOperation, TypeError, ValueError):
                errors.append(f"CurveConfig: '{f.name}' is not a number: {raw!r}.")
        if errors:
            raise InvalidConfig(errors)
        validate_config(self)

    @property
    def total_fee_bps(self) -> Decimal:
        return self.creator_fee_bps + self.protocol_fee_bps


@dataclass(frozen=True)
class TradeQuote:
    """Outcome of a hypothetical trade, valid only against the supply it was computed from."""
    side: OrderSide
    requested_amount: Decimal
    filled_amount: Decimal
    execution_price: Decimal
    trade_value: Decimal
    creator_fee: Decimal
    protocol_fee: Decimal
    total_cost: Decimal
    new_supply: Decimal
    price_impact_pct: Decimal

    @property
    def total_fees(self) -> Decimal:
        return self.creator_fee + self.protocol_fee

    @property
    def is_partial(self) -> bool:
        return self.filled_amount < self.requested_amount


@dataclass(frozen=True)
class KeyMetrics:
    """Read-only display snapshot for a subject's key."""
    current_price: Decimal
    market_cap: Decimal
    total_volume: Decimal
    holders: int
    supply: Decimal
    max_supply: Decimal
    creator_earnings: Decimal


@dataclass(frozen=True)
class CurveStats:
    current_price: Decimal
    market_cap: Decimal
    liquidity: Decimal
    supply: Decimal
    max_supply: Decimal


@dataclass(frozen=True)
class CurvePoint:
    """One sample of the curve, used for plotting."""
    supply: Decimal
    price: Decimal
    market_cap: Decimal


@dataclass(frozen=True)
class RevenueDistribution:
    creator_amount: Decimal
    protocol_amount: Decimal
    referrer_amount: Decimal
    remaining_amount: Decimal


@dataclass
class TradeRequest:
    """Represents a discrete purchase or sale of a subject's keys."""
    subject: str
    side: OrderSide
    amount: Decimal = Decimal("0")
    referrer: Optional[str] = None
