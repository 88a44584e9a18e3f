"""Tests for drawdown strategy classes and the equal-split convergence loop."""

import logging

import pytest
from retirement_sim_uk import (
    AssetType,
    BalancedStrategy,
    LowestGrowthFirstStrategy,
    MAX_CONVERGENCE_ROUNDS,
    STRATEGIES,
    TaxOptimizedStrategy,
    TaxPosition,
    TaxSettings,
    create_strategy,
    initial_tax_position,
)
from retirement_sim_uk.params import empty_pool, pool_total
from retirement_sim_uk.strategies import DrawdownStrategy, WithdrawalResult

GROWTH = {
    AssetType.CASH: 0.01,
    AssetType.BONDS: 0.02,
    AssetType.PROPERTY: 0.03,
    AssetType.PENSION: 0.05,
    AssetType.PENSION_CRYSTALLISED: 0.05,
    AssetType.STOCKS_AND_SHARES: 0.06,
    AssetType.ISA: 0.06,
}


def _pool(**balances):
    pool = empty_pool()
    for key, value in balances.items():
        pool[AssetType(key)] = value
    return pool


def _open_position():
    return initial_tax_position(TaxSettings())


class TestBalanced:
    def setup_method(self):
        self.s = BalancedStrategy(GROWTH)

    def test_proportional(self):
        pool = _pool(cash=1000, isa=3000)
        result = self.s.withdraw_from_assets(pool, 2000, _open_position())
        assert pool[AssetType.CASH] == pytest.approx(500)
        assert pool[AssetType.ISA] == pytest.approx(1500)
        assert result.remaining == pytest.approx(0)
        assert result.taxable_withdrawn == 0

    def test_taxable_share(self):
        pool = _pool(cash=2000, pension=2000)
        result = self.s.withdraw_from_assets(pool, 1000, _open_position())
        assert result.taxable_withdrawn == pytest.approx(500)

    def test_crystallised_pension_is_taxable(self):
        pool = _pool(pension_crystallised=1000)
        result = self.s.withdraw_from_assets(pool, 400, _open_position())
        assert result.taxable_withdrawn == pytest.approx(400)

    def test_more_than_available(self):
        pool = _pool(cash=300, isa=200)
        result = self.s.withdraw_from_assets(pool, 1000, _open_position())
        assert result.remaining == pytest.approx(500)
        assert pool_total(pool) == pytest.approx(0)

    def test_zero_amount(self):
        pool = _pool(cash=100)
        result = self.s.withdraw_from_assets(pool, 0, _open_position())
        assert result.remaining == 0
        assert pool[AssetType.CASH] == 100

    def test_ignores_negative_balances(self):
        pool = _pool(cash=-100, isa=1000)
        self.s.withdraw_from_assets(pool, 500, _open_position())
        assert pool[AssetType.CASH] == -100
        assert pool[AssetType.ISA] == pytest.approx(500)


class TestLowestGrowthFirst:
    def setup_method(self):
        self.s = LowestGrowthFirstStrategy(GROWTH)

    def test_cash_before_pension_before_isa(self):
        pool = _pool(cash=1000, pension=5000, isa=5000)
        result = self.s.withdraw_from_assets(pool, 3000, _open_position())
        assert pool[AssetType.CASH] == 0
        assert pool[AssetType.PENSION] == pytest.approx(3000)
        assert pool[AssetType.ISA] == pytest.approx(5000)
        assert result.taxable_withdrawn == pytest.approx(2000)

    def test_equal_rates_keep_category_order(self):
        """pension precedes pension_crystallised when both grow at the same rate"""
        pool = _pool(pension=1000, pension_crystallised=1000)
        self.s.withdraw_from_assets(pool, 1500, _open_position())
        assert pool[AssetType.PENSION] == 0
        assert pool[AssetType.PENSION_CRYSTALLISED] == pytest.approx(500)

    def test_exhausts_everything(self):
        pool = _pool(cash=100, bonds=100, isa=100)
        result = self.s.withdraw_from_assets(pool, 1000, _open_position())
        assert result.remaining == pytest.approx(700)
        assert all(v >= 0 for v in pool.values())


class TestTaxOptimized:
    def setup_method(self):
        self.s = TaxOptimizedStrategy(GROWTH)

    def test_fills_room_then_isa(self):
        pool = _pool(cash=50000, isa=50000)
        position = TaxPosition(personal_allowance_remaining=0, basic_rate_remaining=20000)
        result = self.s.withdraw_from_assets(pool, 30000, position)
        assert pool[AssetType.CASH] == pytest.approx(30000)
        assert pool[AssetType.ISA] == pytest.approx(40000)
        assert result.taxable_withdrawn == pytest.approx(20000)
        assert result.remaining == 0

    def test_higher_rate_only_after_isa_exhausted(self):
        pool = _pool(cash=10000, isa=5000, pension=50000)
        position = TaxPosition(personal_allowance_remaining=2000, basic_rate_remaining=10000)
        result = self.s.withdraw_from_assets(pool, 40000, position)
        assert pool[AssetType.CASH] == 0
        assert pool[AssetType.ISA] == 0
        # 2,000 within room + 23,000 beyond it
        assert pool[AssetType.PENSION] == pytest.approx(25000)
        assert result.taxable_withdrawn == pytest.approx(35000)
        assert result.remaining == 0

    def test_no_room_goes_straight_to_isa(self):
        pool = _pool(cash=10000, isa=10000)
        position = TaxPosition(personal_allowance_remaining=0, basic_rate_remaining=0)
        result = self.s.withdraw_from_assets(pool, 5000, position)
        assert pool[AssetType.ISA] == pytest.approx(5000)
        assert pool[AssetType.CASH] == 10000
        assert result.taxable_withdrawn == 0


class TestExecute:
    def test_tax_already_due_is_funded(self):
        s = BalancedStrategy(GROWTH)
        pools = [_pool(cash=5000)]
        positions = [TaxPosition(personal_allowance_remaining=0, basic_rate_remaining=0, tax=100)]
        result = s.execute(pools, 1000, positions)
        assert result.total_withdrawn == pytest.approx(1100)
        assert pools[0][AssetType.CASH] == pytest.approx(3900)

    def test_equal_split_then_second_round(self):
        s = BalancedStrategy(GROWTH)
        pools = [_pool(cash=100), _pool(cash=10000)]
        result = s.execute(pools, 1000, [_open_position(), _open_position()])
        assert result.withdrawn == pytest.approx([100, 900])
        assert result.rounds == 2
        assert result.unfunded == pytest.approx(0)

    def test_empty_pool_excluded(self):
        s = LowestGrowthFirstStrategy(GROWTH)
        pools = [empty_pool(), _pool(cash=5000)]
        result = s.execute(pools, 1000, [_open_position(), _open_position()])
        assert result.withdrawn == pytest.approx([0, 1000])
        assert result.rounds == 1

    def test_unfunded_when_assets_run_out(self):
        s = BalancedStrategy(GROWTH)
        pools = [_pool(cash=500)]
        result = s.execute(pools, 1000, [_open_position()])
        assert result.total_withdrawn == pytest.approx(500)
        assert result.unfunded == pytest.approx(500)

    def test_taxable_draw_updates_position(self):
        """15,000 of pension against a fresh position: (15,000 − 12,570) × 20%"""
        s = BalancedStrategy(GROWTH)
        start = _open_position()
        result = s.execute([_pool(pension=20000)], 15000, [start])
        assert result.tax_positions[0].tax == pytest.approx(486)
        assert start.tax == 0

    def test_no_shortfall_no_rounds(self):
        s = BalancedStrategy(GROWTH)
        pools = [_pool(cash=100)]
        result = s.execute(pools, 0, [_open_position()])
        assert result.rounds == 0
        assert pools[0][AssetType.CASH] == 100

    def test_warns_when_rounds_exhausted(self, caplog):
        class Trickle(DrawdownStrategy):
            NAME = "trickle"

            def withdraw_from_assets(self, pool, amount, tax_position):
                w = min(amount, 10.0, pool[AssetType.CASH])
                pool[AssetType.CASH] -= w
                return WithdrawalResult(amount - w, 0.0)

        pools = [_pool(cash=1000)]
        with caplog.at_level(logging.WARNING, logger="retirement_sim_uk.strategies"):
            result = Trickle().execute(pools, 500, [_open_position()])
        assert result.rounds == MAX_CONVERGENCE_ROUNDS
        assert result.unfunded == pytest.approx(400)
        assert "did not converge" in caplog.text

    @pytest.mark.parametrize("name", list(STRATEGIES))
    def test_never_negative(self, name):
        s = create_strategy(name, GROWTH)
        pools = [
            _pool(cash=3000, pension=20000, isa=5000),
            _pool(bonds=1000, pension_crystallised=4000, property=2000),
        ]
        before = sum(pool_total(p) for p in pools)
        result = s.execute(pools, 12000, [_open_position(), _open_position()])
        assert all(v >= 0 for p in pools for v in p.values())
        assert sum(pool_total(p) for p in pools) == pytest.approx(before - result.total_withdrawn)
        assert result.total_withdrawn == pytest.approx(12000)


class TestCreateStrategy:
    @pytest.mark.parametrize(
        "name, cls",
        [
            ("balanced", BalancedStrategy),
            ("lowest_growth_first", LowestGrowthFirstStrategy),
            ("tax_optimized", TaxOptimizedStrategy),
        ],
    )
    def test_known(self, name, cls):
        s = create_strategy(name, GROWTH)
        assert isinstance(s, cls)
        assert s.growth_rates is GROWTH

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown drawdown strategy"):
            create_strategy("yolo", GROWTH)
