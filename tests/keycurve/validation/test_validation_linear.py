import pytest

from decimal import Decimal
from unittest.mock import patch

from keycurve.common.model import CurveConfig
from keycurve.curves.single.linear import LinearBondingCurve
from keycurve.validation.linear_validator import LinearCurveValidator


@pytest.fixture
def valid_curve():
    return LinearBondingCurve(CurveConfig(
        base_price=Decimal("0.001"),
        price_increment=Decimal("0.0001"),
        max_supply=Decimal("1000000"),
        creator_fee_bps=Decimal("500"),
        protocol_fee_bps=Decimal("250"),
    ))


def test_run_all_validations_clean(valid_curve):
    results = LinearCurveValidator.run_all_validations(valid_curve)
    assert results["errors"] == []
    assert results["warnings"] == []
    assert results["info"]["boundary_tests_run"] is True
    assert results["info"]["final_supply_after_scenario"] == "2"
    assert results["info"]["param_summary"]["creator_fee_bps"] == "500"


def test_run_all_validations_rejects_other_types():
    with pytest.raises(ValueError):
        LinearCurveValidator.run_all_validations(object())


def test_validate_params_warns_on_zero_fees():
    config = CurveConfig(base_price=1, price_increment=1, max_supply=100)
    result = LinearCurveValidator.validate_params(config)
    assert result["errors"] == []
    assert any("fees are both zero" in w for w in result["warnings"])


def test_validate_params_warns_on_fractional_max_supply():
    config = CurveConfig(base_price=1, price_increment=1, max_supply="10.5", creator_fee_bps=100)
    result = LinearCurveValidator.validate_params(config)
    assert any("fractional" in w for w in result["warnings"])


def test_boundary_tests_report_missing_ceiling_error(valid_curve):
    """
    If quote_buy at max_supply stopped raising, the boundary test must flag it.
    """
    with patch.object(valid_curve, "quote_buy", return_value=None):
        result = LinearCurveValidator.boundary_tests(valid_curve)
    assert any("SupplyExhausted" in e for e in result["errors"])


def test_boundary_tests_price_range(valid_curve):
    result = LinearCurveValidator.boundary_tests(valid_curve)
    assert result["errors"] == []
    low, high = result["info"]["price_range"]
    assert Decimal(low) == Decimal("0.001")
    assert Decimal(high) == Decimal("100.001")


def test_scenario_tests_tiny_ceiling():
    """
    With max_supply=1 the second buy cannot fill; that is a warning, the sell still runs.
    """
    curve = LinearBondingCurve(CurveConfig(base_price=1, price_increment=1, max_supply=1, creator_fee_bps=100))
    result = LinearCurveValidator.scenario_tests(curve)
    assert result["errors"] == []
    assert any("buy(2)" in w for w in result["warnings"])
    assert result["info"]["final_supply_after_scenario"] == "0"
