import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

from keycurve.common.errors import StaleSupply
from keycurve.common.math import to_lamports
from keycurve.common.model import RevenueDistribution, TradeQuote, TradeRequest
from keycurve.curves.single.base import BondingCurve
from keycurve.revenue.revenue_share import RevenueShareHelper
from keycurve.settlement.supply_repository import SupplyRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementReceipt:
    """
    What a caller needs to build the payment transfer: the committed quote, the supply it was
    computed against, and total_cost in whole lamports.
    """
    subject: str
    quote: TradeQuote
    previous_supply: Decimal
    lamports: int
    referral: Optional[RevenueDistribution] = None


class KeyTradeSettler:
    """
    Read-quote-commit loop over a SupplyRepository.

    Each attempt reads the subject's supply, quotes against it and commits new_supply with the
    read value as the expected supply. A concurrent trade that moved supply in between makes
    the commit fail; after 'max_attempts' failures StaleSupply is raised and nothing is settled.
    Quote errors (SupplyExhausted, NoSupply, ...) propagate unchanged and are never retried.
    """

    def __init__(
        self,
        repository: SupplyRepository,
        curve: BondingCurve,
        curves: Optional[Dict[str, BondingCurve]] = None,
        max_attempts: int = 1,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1.")
        self._repository = repository
        self._default_curve = curve
        self._curves = dict(curves or {})
        self._max_attempts = max_attempts

    def curve_for(self, subject: str) -> BondingCurve:
        return self._curves.get(subject, self._default_curve)

    def preview(self, request: TradeRequest) -> TradeQuote:
        """Quotes against the stored supply without committing anything."""
        supply = self._repository.read(request.subject)
        return self.curve_for(request.subject).quote(request, supply)

    def settle(self, request: TradeRequest) -> SettlementReceipt:
        curve = self.curve_for(request.subject)
        expected = None
        actual = None

        for attempt in range(1, self._max_attempts + 1):
            expected = self._repository.read(request.subject)
            quote = curve.quote(request, expected)
            result = self._repository.commit(request.subject, expected, quote.new_supply)
            if result.committed:
                logger.info(
                    "Settled %s of %s keys for %s: supply %s -> %s, total_cost=%s",
                    request.side, quote.filled_amount, request.subject, expected, quote.new_supply, quote.total_cost
                )
                return SettlementReceipt(
                    subject=request.subject,
                    quote=quote,
                    previous_supply=expected,
                    lamports=to_lamports(quote.total_cost),
                    referral=self._referral_split(request, quote, curve),
                )
            actual = result.current_supply
            logger.warning(
                "Stale supply for %s on attempt %d/%d: quoted at %s, now %s",
                request.subject, attempt, self._max_attempts, expected, actual
            )

        raise StaleSupply(request.subject, expected, actual)

    @staticmethod
    def _referral_split(request: TradeRequest, quote: TradeQuote, curve: BondingCurve) -> Optional[RevenueDistribution]:
        if request.referrer is None or quote.trade_value <= 0:
            return None
        return RevenueShareHelper.calculate_distribution(
            quote.trade_value,
            has_referrer=True,
            creator_bps=curve.config.creator_fee_bps,
            protocol_bps=curve.config.protocol_fee_bps,
        )
