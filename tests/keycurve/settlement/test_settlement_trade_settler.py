import threading

import pytest

from decimal import Decimal
from unittest.mock import patch

from keycurve.common.enums import OrderSide
from keycurve.common.errors import NoSupply, StaleSupply, SupplyExhausted
from keycurve.common.model import CurveConfig, TradeRequest
from keycurve.curves.single.linear import LinearBondingCurve
from keycurve.settlement.supply_repository import CommitResult, InMemorySupplyRepository
from keycurve.settlement.trade_settler import KeyTradeSettler


@pytest.fixture
def curve():
    return LinearBondingCurve(CurveConfig(
        base_price=Decimal("0.001"),
        price_increment=Decimal("0.0001"),
        max_supply=Decimal("1000000"),
        creator_fee_bps=Decimal("500"),
        protocol_fee_bps=Decimal("250"),
    ))


@pytest.fixture
def repo():
    return InMemorySupplyRepository()


class _RacingRepository(InMemorySupplyRepository):
    """
    Simulates another trade landing between read and commit for the first 'races' commits.
    """
    def __init__(self, races, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.races = races

    def commit(self, subject, expected_supply, new_supply):
        if self.races > 0:
            self.races -= 1
            current = self.read(subject)
            super().commit(subject, current, current + 1)
        return super().commit(subject, expected_supply, new_supply)


def test_settle_buy_updates_repository(curve, repo):
    settler = KeyTradeSettler(repo, curve)
    receipt = settler.settle(TradeRequest("alice", OrderSide.BUY, Decimal("10")))

    assert receipt.subject == "alice"
    assert receipt.previous_supply == Decimal("0")
    assert receipt.quote.new_supply == Decimal("10")
    assert receipt.quote.total_cost == Decimal("0.016125")
    assert receipt.lamports == 16_125_000
    assert receipt.referral is None
    assert repo.read("alice") == Decimal("10")


def test_settle_sell_after_buy(curve, repo):
    settler = KeyTradeSettler(repo, curve)
    settler.settle(TradeRequest("alice", OrderSide.BUY, Decimal("10")))
    receipt = settler.settle(TradeRequest("alice", OrderSide.SELL, Decimal("4")))

    assert receipt.previous_supply == Decimal("10")
    assert repo.read("alice") == Decimal("6")
    assert receipt.quote.total_cost == receipt.quote.trade_value - receipt.quote.total_fees


def test_settle_with_referrer(curve, repo):
    settler = KeyTradeSettler(repo, curve)
    receipt = settler.settle(TradeRequest("alice", OrderSide.BUY, Decimal("10"), referrer="bob"))
    assert receipt.referral is not None
    assert receipt.referral.referrer_amount == Decimal("0.00015")
    assert receipt.referral.creator_amount == receipt.quote.creator_fee


def test_quote_errors_propagate_and_nothing_commits(curve, repo):
    settler = KeyTradeSettler(repo, curve)
    with patch.object(repo, "commit", wraps=repo.commit) as commit_spy:
        with pytest.raises(NoSupply):
            settler.settle(TradeRequest("alice", OrderSide.SELL, Decimal("1")))
    commit_spy.assert_not_called()
    assert repo.read("alice") == Decimal("0")


def test_settle_at_ceiling_raises(curve):
    repo = InMemorySupplyRepository({"alice": Decimal("1000000")})
    settler = KeyTradeSettler(repo, curve)
    with pytest.raises(SupplyExhausted):
        settler.settle(TradeRequest("alice", OrderSide.BUY, Decimal("1")))


def test_stale_supply_raises_without_retry(curve):
    repo = _RacingRepository(races=1)
    settler = KeyTradeSettler(repo, curve)
    with pytest.raises(StaleSupply) as exc_info:
        settler.settle(TradeRequest("alice", OrderSide.BUY, Decimal("5")))
    assert exc_info.value.expected == Decimal("0")
    assert exc_info.value.actual == Decimal("1")
    assert repo.read("alice") == Decimal("1")


def test_stale_supply_retried_by_caller_policy(curve):
    repo = _RacingRepository(races=2)
    settler = KeyTradeSettler(repo, curve, max_attempts=3)
    receipt = settler.settle(TradeRequest("alice", OrderSide.BUY, Decimal("5")))
    assert receipt.previous_supply == Decimal("2")
    assert repo.read("alice") == Decimal("7")


def test_max_attempts_must_be_positive(curve, repo):
    with pytest.raises(ValueError):
        KeyTradeSettler(repo, curve, max_attempts=0)


def test_per_subject_curves(curve, repo):
    cheap = LinearBondingCurve(CurveConfig(base_price=1, price_increment=1, max_supply=5))
    settler = KeyTradeSettler(repo, curve, curves={"bob": cheap})
    assert settler.curve_for("bob") is cheap
    assert settler.curve_for("alice") is curve

    receipt = settler.settle(TradeRequest("bob", OrderSide.BUY, Decimal("10")))
    assert receipt.quote.new_supply == Decimal("5")
    assert receipt.quote.price_impact_pct == Decimal("50")


def test_preview_does_not_commit(curve, repo):
    settler = KeyTradeSettler(repo, curve)
    quote = settler.preview(TradeRequest("alice", OrderSide.BUY, Decimal("3")))
    assert quote.new_supply == Decimal("3")
    assert repo.read("alice") == Decimal("0")


def test_concurrent_settlements_never_lose_supply(curve, repo):
    """
    Concurrent buys against one subject all land once each, with retries on stale reads.
    """
    settler = KeyTradeSettler(repo, curve, max_attempts=10_000)

    def worker():
        for _ in range(25):
            settler.settle(TradeRequest("alice", OrderSide.BUY, Decimal("1")))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert repo.read("alice") == Decimal("200")


def test_commit_result_shape():
    result = CommitResult(committed=True, current_supply=Decimal("1"))
    assert result.committed and result.current_supply == Decimal("1")
