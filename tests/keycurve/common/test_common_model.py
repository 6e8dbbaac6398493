import dataclasses
import pytest

from decimal import Decimal

from keycurve.common.enums import OrderSide
from keycurve.common.errors import BondingCurveError, InvalidConfig, StaleSupply
from keycurve.common.model import CurveConfig, TradeQuote, TradeRequest


def _config(**overrides):
    values = dict(
        base_price=Decimal("0.001"),
        price_increment=Decimal("0.0001"),
        max_supply=Decimal("1000000"),
        creator_fee_bps=Decimal("500"),
        protocol_fee_bps=Decimal("250"),
    )
    values.update(overrides)
    return CurveConfig(**values)


def test_curve_config_coerces_to_decimal():
    """
    ints, strings and floats all end up as Decimal; floats keep their written value.
    """
    config = CurveConfig(base_price=0.001, price_increment="0.0001", max_supply=100, creator_fee_bps=5)
    assert config.base_price == Decimal("0.001")
    assert config.price_increment == Decimal("0.0001")
    assert config.max_supply == Decimal("100")
    assert config.creator_fee_bps == Decimal("5")
    assert config.protocol_fee_bps == Decimal("0")
    assert all(isinstance(getattr(config, f.name), Decimal) for f in dataclasses.fields(config))


def test_curve_config_is_frozen():
    config = _config()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.base_price = Decimal("1")


def test_curve_config_total_fee_bps():
    assert _config().total_fee_bps == Decimal("750")


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"base_price": Decimal("0")}, "base_price"),
        ({"base_price": Decimal("-1")}, "base_price"),
        ({"price_increment": Decimal("0")}, "price_increment"),
        ({"max_supply": Decimal("0.5")}, "max_supply"),
        ({"creator_fee_bps": Decimal("1001")}, "creator_fee_bps"),
        ({"creator_fee_bps": Decimal("-1")}, "creator_fee_bps"),
        ({"protocol_fee_bps": Decimal("501")}, "protocol_fee_bps"),
        ({"base_price": Decimal("NaN")}, "base_price"),
        ({"max_supply": Decimal("Infinity")}, "max_supply"),
        ({"base_price": "abc"}, "base_price"),
    ]
)
def test_curve_config_rejects_invalid_fields(overrides, fragment):
    with pytest.raises(InvalidConfig) as exc_info:
        _config(**overrides)
    assert any(fragment in message for message in exc_info.value.errors)


def test_curve_config_rejects_fee_pair_900_600():
    """
    900 bps creator + 600 bps protocol must not construct.
    """
    with pytest.raises(InvalidConfig):
        _config(creator_fee_bps=900, protocol_fee_bps=600)


def test_curve_config_accepts_max_fees():
    config = _config(creator_fee_bps=1000, protocol_fee_bps=500)
    assert config.total_fee_bps == Decimal("1500")


def test_curve_config_collects_every_error():
    with pytest.raises(InvalidConfig) as exc_info:
        CurveConfig(base_price=0, price_increment=0, max_supply=0)
    assert len(exc_info.value.errors) == 3
    assert isinstance(exc_info.value, BondingCurveError)
    assert isinstance(exc_info.value, ValueError)


def test_trade_quote_helpers():
    quote = TradeQuote(
        side=OrderSide.BUY,
        requested_amount=Decimal("5"),
        filled_amount=Decimal("2"),
        execution_price=Decimal("1"),
        trade_value=Decimal("2"),
        creator_fee=Decimal("0.1"),
        protocol_fee=Decimal("0.05"),
        total_cost=Decimal("2.15"),
        new_supply=Decimal("10"),
        price_impact_pct=Decimal("60"),
    )
    assert quote.total_fees == Decimal("0.15")
    assert quote.is_partial


def test_trade_request_defaults():
    request = TradeRequest(subject="alice", side=OrderSide.BUY)
    assert request.amount == Decimal("0")
    assert request.referrer is None


def test_stale_supply_message():
    error = StaleSupply("alice", Decimal("1"), Decimal("2"))
    assert error.expected == Decimal("1")
    assert error.actual == Decimal("2")
    assert "alice" in str(error)
