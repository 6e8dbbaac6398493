import logging
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from flask import jsonify
from flask_openapi3 import Info, Tag
from flask_openapi3 import OpenAPI

from keycurve.common.enums import OrderSide
from keycurve.common.errors import BondingCurveError
from keycurve.common.model import CurveConfig, TradeQuote
from keycurve.config.settings import get_log_level, load_curve_config
from keycurve.curves.factory import DEFAULT_CURVE_CONFIG
from keycurve.curves.single.linear import LinearBondingCurve
from keycurve.logging_config import setup_logging

logger = logging.getLogger(__name__)

info = Info(title="Key Curve API", version="1.0.0")


class CurveTransactionAction(Enum):
    buy = "buy"
    sell = "sell"


class CurveConfigBody(BaseModel):
    base_price: Decimal = Field(description="Price at supply 0")
    price_increment: Decimal = Field(description="Price increase per key of supply")
    max_supply: Decimal = Field(description="Supply ceiling")
    creator_fee_bps: Decimal = Field(Decimal("0"), description="Creator fee in basis points")
    protocol_fee_bps: Decimal = Field(Decimal("0"), description="Protocol fee in basis points")


class CurveQuoteRequest(BaseModel):
    supply: Decimal = Field(description="Current key supply of the subject")
    amount: Decimal = Field(description="amount to buy / sell")
    action: CurveTransactionAction = Field(description="API action to perform")
    config: Optional[CurveConfigBody] = Field(None, description="Curve parameters; server default when omitted")


class CurveStatusRequest(BaseModel):
    supply: Decimal = Field(description="Current key supply of the subject")
    steps: int = Field(20, ge=1, le=1000, description="Number of intervals to sample the curve at")


curve_quote_tag = Tag(
    name="Bonding Curve Quote",
    description="Quote a buy or sell against a supply and get the execution information",
)
curve_status_tag = Tag(
    name="Bonding Curve Status",
    description="Get the shape of a bonding curve for plotting and additional info",
)


def quote_to_dict(quote: TradeQuote) -> dict:
    return {
        "side": str(quote.side),
        "requested_amount": str(quote.requested_amount),
        "filled_amount": str(quote.filled_amount),
        "execution_price": str(quote.execution_price),
        "trade_value": str(quote.trade_value),
        "creator_fee": str(quote.creator_fee),
        "protocol_fee": str(quote.protocol_fee),
        "total_cost": str(quote.total_cost),
        "new_supply": str(quote.new_supply),
        "price_impact_pct": str(quote.price_impact_pct),
    }


def _error_response(error: BondingCurveError):
    return jsonify({"error": type(error).__name__, "message": str(error)}), 400


def _default_config() -> CurveConfig:
    try:
        return load_curve_config()
    except FileNotFoundError:
        logger.warning("settings.toml not found; using built-in curve defaults")
        return DEFAULT_CURVE_CONFIG


def create_app(config: Optional[CurveConfig] = None) -> OpenAPI:
    app = OpenAPI(__name__, info=info)
    default_curve = LinearBondingCurve(config or _default_config())

    @app.post("/curve/quote", summary="Curve Quote", tags=[curve_quote_tag])
    def quote(body: CurveQuoteRequest):
        """
        Quotes a buy or sell on a curve. Nothing is settled: the caller owns the supply.
        """
        try:
            curve = default_curve
            if body.config is not None:
                curve = LinearBondingCurve(CurveConfig(**body.config.model_dump()))
            side = OrderSide.from_str(body.action.value)
            result = curve.quote_trade(body.supply, body.amount, side)
        except BondingCurveError as e:
            return _error_response(e)
        return jsonify(quote_to_dict(result))

    @app.get("/curve/status", summary="Curve Status", tags=[curve_status_tag])
    def status(query: CurveStatusRequest):
        """
        Return a representation of the curve which can be plotted visually by the caller,
        along with the spot price and stats at the supply specified by the caller.
        """
        try:
            stats = default_curve.curve_stats(query.supply)
            points = default_curve.curve_points(query.steps)
        except BondingCurveError as e:
            return _error_response(e)
        return jsonify({
            "spot_price": str(stats.current_price),
            "spot_price_display": default_curve.format_price(stats.current_price),
            "market_cap": str(stats.market_cap),
            "liquidity": str(stats.liquidity),
            "supply": str(stats.supply),
            "max_supply": str(stats.max_supply),
            "points": [
                {"supply": str(p.supply), "price": str(p.price), "market_cap": str(p.market_cap)}
                for p in points
            ],
        })

    return app


if __name__ == "__main__":
    setup_logging(level=get_log_level())
    create_app().run(debug=True)
