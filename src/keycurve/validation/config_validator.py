from decimal import Decimal
from typing import List

from keycurve.common.errors import InvalidConfig

MAX_CREATOR_FEE_BPS = Decimal("1000")
MAX_PROTOCOL_FEE_BPS = Decimal("500")
MAX_TOTAL_FEE_BPS = Decimal("10000")


def config_errors(config: "CurveConfig") -> List[str]:
    """
    Returns every invariant violation of a CurveConfig as a human readable message:
      - base_price > 0
      - price_increment > 0
      - max_supply >= 1
      - 0 <= creator_fee_bps <= 1000
      - 0 <= protocol_fee_bps <= 500
      - creator_fee_bps + protocol_fee_bps <= 10000
    Non-finite values (NaN, Infinity) are rejected for every field.
    """
    errors: List[str] = []

    for name in ("base_price", "price_increment", "max_supply", "creator_fee_bps", "protocol_fee_bps"):
        value = getattr(config, name, None)
        if not isinstance(value, Decimal) or not value.is_finite():
            errors.append(f"CurveConfig: '{name}' must be a finite number, got {value!r}.")
    if errors:
        return errors

    if config.base_price <= 0:
        errors.append("CurveConfig: 'base_price' must be > 0.")
    if config.price_increment <= 0:
        errors.append("CurveConfig: 'price_increment' must be > 0.")
    if config.max_supply < 1:
        errors.append("CurveConfig: 'max_supply' must be >= 1.")
    if not Decimal("0") <= config.creator_fee_bps <= MAX_CREATOR_FEE_BPS:
        errors.append(f"CurveConfig: 'creator_fee_bps' must be between 0 and {MAX_CREATOR_FEE_BPS}.")
    if not Decimal("0") <= config.protocol_fee_bps <= MAX_PROTOCOL_FEE_BPS:
        errors.append(f"CurveConfig: 'protocol_fee_bps' must be between 0 and {MAX_PROTOCOL_FEE_BPS}.")
    if config.creator_fee_bps + config.protocol_fee_bps > MAX_TOTAL_FEE_BPS:
        errors.append("CurveConfig: combined fees cannot exceed 10000 bps (100%).")

    return errors


def validate_config(config: "CurveConfig") -> None:
    """
    Raises InvalidConfig listing all violations, or returns None if the config is usable.
    """
    errors = config_errors(config)
    if errors:
        raise InvalidConfig(errors)
