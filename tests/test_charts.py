"""Tests for chart output."""

from datetime import date

import pytest
from retirement_sim_uk import (
    Asset,
    AssetType,
    Assumptions,
    IncomeNeed,
    PersonalInfo,
    ProjectionResult,
    RetirementData,
    calculate_projection,
    compare_strategies,
)
from retirement_sim_uk.charts import plot_asset_breakdown, plot_strategy_comparison


def _data():
    return RetirementData(
        personal=PersonalInfo(date_of_birth=date(1960, 1, 1)),
        assets=[Asset("cash", 60000, AssetType.CASH), Asset("isa", 40000, AssetType.ISA)],
        income_needs=[IncomeNeed("living", 30000)],
        assumptions=Assumptions(inflation_rate=0, category_growth_rates={}),
    )


class TestPlotAssetBreakdown:
    def test_writes_png(self, tmp_path):
        result = calculate_projection(_data(), max_years=10, current_year=2025)
        assert result.runs_out_at
        path = plot_asset_breakdown(result, tmp_path / "charts", name="balanced")
        assert path == tmp_path / "charts" / "assets-balanced.png"
        assert path.stat().st_size > 0

    def test_empty_result(self, tmp_path):
        with pytest.raises(ValueError):
            plot_asset_breakdown(ProjectionResult(), tmp_path)


class TestPlotStrategyComparison:
    def test_writes_png(self, tmp_path):
        results = compare_strategies(_data(), max_years=10, current_year=2025)
        path = plot_strategy_comparison(results, tmp_path)
        assert path.name == "strategies.png"
        assert path.exists()

    def test_all_empty(self, tmp_path):
        with pytest.raises(ValueError):
            plot_strategy_comparison({"balanced": ProjectionResult()}, tmp_path)
