"""
Tests for Rebalancer sizing and the turnover gate.
"""

from decimal import Decimal

from momentum_rotation.risk.rebalancer import PortfolioSnapshot, Rebalancer


def snapshot(prices, holdings=None, liquidity="10000"):
    return PortfolioSnapshot(
        holdings={k: Decimal(str(v)) for k, v in (holdings or {}).items()},
        prices={k: Decimal(str(v)) for k, v in prices.items()},
        liquidity=Decimal(str(liquidity)),
    )


def test_one_third_weight_end_to_end():
    rebalancer = Rebalancer(Decimal("0.1"), quantity_decimals=2)

    plan = rebalancer.plan({"X": Decimal(1) / 3}, snapshot({"X": 100}))

    assert plan.targets["X"] == Decimal("33.33")
    assert plan.deltas["X"] == Decimal("33.33")
    assert plan.turnover == Decimal("0.3333")
    assert [(i.instrument, i.delta_quantity) for i in plan.intents] == [("X", Decimal("33.33"))]
    assert not plan.gated


def test_turnover_at_band_emits_nothing():
    rebalancer = Rebalancer(Decimal("0.1"))

    plan = rebalancer.plan({"A": Decimal("0.1")}, snapshot({"A": 10}, liquidity=1000))

    assert plan.turnover == Decimal("0.1")
    assert plan.intents == []
    assert plan.gated


def test_small_drift_is_suppressed_for_every_instrument():
    rebalancer = Rebalancer(Decimal("0.1"))
    weights = {"A": Decimal("0.5"), "B": Decimal("0.5")}

    # Holdings within a few percent of target
    plan = rebalancer.plan(weights, snapshot({"A": 100, "B": 50}, {"A": 48, "B": 103}))

    assert plan.deltas == {"A": Decimal(2), "B": Decimal(-3)}
    assert plan.turnover == Decimal("0.035")
    assert plan.intents == []


def test_gate_passes_all_nonzero_deltas_together():
    rebalancer = Rebalancer(Decimal("0.1"))
    weights = {"A": Decimal("0.5"), "B": Decimal("0.5"), "C": Decimal(0), "D": Decimal(0)}

    plan = rebalancer.plan(
        weights,
        snapshot({"A": 100, "B": 50, "C": 20, "D": 10}, {"A": 49, "C": 10}),
    )

    intents = {i.instrument: i.delta_quantity for i in plan.intents}
    assert intents == {"A": Decimal(1), "B": Decimal(100), "C": Decimal(-10)}
    assert plan.intents[2].side == "Sell"


def test_invalid_price_freezes_instrument():
    rebalancer = Rebalancer(Decimal("0.1"))
    weights = {"A": Decimal("0.5"), "B": Decimal("0.5")}

    plan = rebalancer.plan(weights, snapshot({"A": 0, "B": 50}, {"A": 7}))

    assert plan.targets["A"] == Decimal(7)
    assert plan.deltas["A"] == 0
    assert plan.turnover == Decimal("0.5")
    assert [i.instrument for i in plan.intents] == ["B"]


def test_non_positive_liquidity_yields_empty_plan():
    plan = Rebalancer(Decimal("0.1")).plan({"A": Decimal(1)}, snapshot({"A": 10}, liquidity=0))

    assert plan.intents == []
    assert plan.turnover == 0
    assert plan.targets == {}


def test_second_pass_after_fill_has_zero_turnover():
    rebalancer = Rebalancer(Decimal("0.1"), quantity_decimals=4)
    weights = {"A": Decimal(1) / 3, "B": Decimal(1) / 3}
    prices = {"A": 123, "B": 7}

    first = rebalancer.plan(weights, snapshot(prices))
    second = rebalancer.plan(weights, snapshot(prices, first.targets))

    assert first.intents
    assert second.turnover == 0
    assert second.intents == []
    assert second.targets == first.targets
