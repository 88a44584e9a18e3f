"""Assumption presets and multi-strategy / multi-scenario execution."""

import dataclasses

from retirement_sim_uk.params import RetirementData
from retirement_sim_uk.simulation import ProjectionResult, calculate_projection
from retirement_sim_uk.strategies import STRATEGIES

# Real growth (%) by growth class; inflation in %
SCENARIOS = {
    "cautious": {
        "inflation_rate": 3.0,
        "category_growth_rates": {
            "pension": 3.0, "cash": 0.5, "stocks": 3.5, "bonds": 1.0, "property": 1.5, "other": 0.0,
        },
    },
    "central": {
        "inflation_rate": 2.5,
        "category_growth_rates": {
            "pension": 5.0, "cash": 1.0, "stocks": 5.0, "bonds": 2.0, "property": 3.0, "other": 0.0,
        },
    },
    "optimistic": {
        "inflation_rate": 2.0,
        "category_growth_rates": {
            "pension": 6.5, "cash": 1.5, "stocks": 6.5, "bonds": 2.5, "property": 4.0, "other": 0.0,
        },
    },
}


def with_scenario(data: RetirementData, scenario: str) -> RetirementData:
    """Copy of ``data`` with the named preset's assumptions swapped in."""
    overrides = SCENARIOS[scenario]
    assumptions = dataclasses.replace(
        data.assumptions,
        inflation_rate=overrides["inflation_rate"],
        category_growth_rates=dict(overrides["category_growth_rates"]),
    )
    return dataclasses.replace(data, assumptions=assumptions)


def compare_strategies(
    data: RetirementData,
    max_years: int | None = None,
    *,
    current_year: int | None = None,
) -> dict[str, ProjectionResult]:
    """Run every drawdown strategy over the same input, one after another.

    Each projection builds its own pools, so results are independent.
    """
    return {
        name: calculate_projection(data, max_years, name, current_year=current_year)
        for name in STRATEGIES
    }


def run_scenarios(
    data: RetirementData,
    strategy: str = "balanced",
    max_years: int | None = None,
    *,
    current_year: int | None = None,
) -> dict[str, ProjectionResult]:
    """Project ``data`` under every assumption preset with one strategy."""
    return {
        scenario: calculate_projection(
            with_scenario(data, scenario), max_years, strategy, current_year=current_year,
        )
        for scenario in SCENARIOS
    }
