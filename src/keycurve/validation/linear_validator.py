from decimal import Decimal
from typing import Any, Dict, List

from keycurve.common.errors import BondingCurveError, NoSupply, SupplyExhausted
from keycurve.common.model import CurveConfig
from keycurve.curves.single.linear import LinearBondingCurve
from keycurve.validation.config_validator import config_errors


class LinearCurveValidator:
    """
    Report-style validator for a LinearBondingCurve.
    Performs:
      1) Param checks (the CurveConfig invariants, plus warnings for unusual but legal values)
      2) Boundary tests (price at 0 and max_supply, quotes at the ceiling and floor)
      3) Scenario tests (a short buy/sell sequence threaded through new_supply)

    Each step returns a dict with:
      {
        "errors": [str...],
        "warnings": [str...],
        "info": {...}
      }
    and 'run_all_validations' aggregates them into a single result.
    """

    @staticmethod
    def validate_params(config: 'CurveConfig') -> Dict[str, Any]:
        errors: List[str] = config_errors(config)
        warnings: List[str] = []
        info: Dict[str, Any] = {}

        if not errors:
            if config.total_fee_bps == 0:
                warnings.append("LinearCurve: creator and protocol fees are both zero.")
            if config.max_supply != config.max_supply.to_integral_value():
                warnings.append("LinearCurve: 'max_supply' is fractional; whole-key buys cannot reach it.")

        info["param_summary"] = {
            "base_price": str(config.base_price),
            "price_increment": str(config.price_increment),
            "max_supply": str(config.max_supply),
            "creator_fee_bps": str(config.creator_fee_bps),
            "protocol_fee_bps": str(config.protocol_fee_bps),
        }

        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @staticmethod
    def boundary_tests(curve: 'LinearBondingCurve') -> Dict[str, Any]:
        errors: List[str] = []
        warnings: List[str] = []
        info: Dict[str, Any] = {}
        max_supply = curve.config.max_supply

        # 1) Spot price at supply=0 equals base price
        price_at_zero = curve.spot_price(Decimal("0"))
        if price_at_zero != curve.config.base_price:
            errors.append(f"Spot price at supply=0 is {price_at_zero}, expected base price.")

        # 2) Price never decreases between 0 and max_supply
        price_at_max = curve.spot_price(max_supply)
        if price_at_max < price_at_zero:
            errors.append("Spot price at max_supply is below spot price at 0.")

        # 3) Buying at the ceiling must refuse
        try:
            curve.quote_buy(max_supply, Decimal("1"))
            errors.append("quote_buy at max_supply did not raise SupplyExhausted.")
        except SupplyExhausted:
            pass

        # 4) Selling from zero must refuse
        try:
            curve.quote_sell(Decimal("0"), Decimal("1"))
            errors.append("quote_sell at supply=0 did not raise NoSupply.")
        except NoSupply:
            pass

        info["boundary_tests_run"] = True
        info["price_range"] = (str(price_at_zero), str(price_at_max))
        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @staticmethod
    def scenario_tests(curve: 'LinearBondingCurve') -> Dict[str, Any]:
        """
        Runs buy(1) -> buy(2) -> sell(1) from supply 0, carrying new_supply between steps.
        Checks for negative cost, negative supply, and that buys cost at least what sells return.
        """
        errors: List[str] = []
        warnings: List[str] = []
        info: Dict[str, Any] = {}

        supply = Decimal("0")
        buy_total = Decimal("0")
        for amount in (Decimal("1"), Decimal("2")):
            try:
                quote = curve.quote_buy(supply, amount)
            except BondingCurveError as e:
                warnings.append(f"Scenario step buy({amount}) stopped: {e}")
                continue
            if quote.total_cost < 0:
                errors.append(f"Buying {amount} keys => negative total cost.")
            supply = quote.new_supply
            buy_total += quote.total_cost

        try:
            sell = curve.quote_sell(supply, Decimal("1"))
        except BondingCurveError as e:
            errors.append(f"Exception in scenario step sell(1): {e}")
            info["final_supply_after_scenario"] = str(supply)
            return {
                "errors": errors,
                "warnings": warnings,
                "info": info
            }

        if sell.total_cost < 0:
            errors.append("Selling 1 key => negative proceeds.")
        if sell.new_supply < 0:
            errors.append("Supply is negative after sell(1).")
        if sell.total_cost > buy_total:
            errors.append("Selling returned more than the buys cost.")

        info["final_supply_after_scenario"] = str(sell.new_supply)
        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @staticmethod
    def run_all_validations(curve: 'LinearBondingCurve') -> Dict[str, Any]:
        """
        Aggregates:
          - param check
          - boundary tests
          - scenario tests
        Returns a dict with keys: errors, warnings, info
        """
        if not isinstance(curve, LinearBondingCurve):
            raise ValueError("Invalid curve type for LinearCurveValidator.")

        results = {
            "errors": [],
            "warnings": [],
            "info": {}
        }

        for step in (
            LinearCurveValidator.validate_params(curve.config),
            LinearCurveValidator.boundary_tests(curve),
            LinearCurveValidator.scenario_tests(curve),
        ):
            results["errors"].extend(step["errors"])
            results["warnings"].extend(step["warnings"])
            results["info"].update(step["info"])

        return results
