"""UK Household Retirement Drawdown Projection Package."""

from retirement_sim_uk.params import (
    AssetType,
    Asset,
    IncomeNeed,
    RetirementIncome,
    MarketShock,
    OneOff,
    GlidePath,
    Assumptions,
    TaxSettings,
    PersonalInfo,
    RetirementData,
    PRIMARY,
    SPOUSE,
)
from retirement_sim_uk.tax import (
    TaxPosition,
    initial_tax_position,
    update_tax_position,
    calculate_income_tax,
)
from retirement_sim_uk.growth import (
    apply_growth,
    apply_market_shock,
    equity_weight,
    growth_rate_for,
)
from retirement_sim_uk.transfers import apply_bed_and_isa, TARGET_CRYSTALLISATION
from retirement_sim_uk.events import apply_one_offs
from retirement_sim_uk.strategies import (
    DrawdownStrategy,
    BalancedStrategy,
    LowestGrowthFirstStrategy,
    TaxOptimizedStrategy,
    STRATEGIES,
    MAX_CONVERGENCE_ROUNDS,
    create_strategy,
)
from retirement_sim_uk.simulation import (
    calculate_projection,
    validate_data,
    ProjectionResult,
    YearlyDatapoint,
    UK_STATE_PENSION_2024,
    STATE_PENSION_AGE,
    MAX_AGE,
)
from retirement_sim_uk.scenarios import SCENARIOS, compare_strategies, run_scenarios

__all__ = [
    "AssetType",
    "Asset",
    "IncomeNeed",
    "RetirementIncome",
    "MarketShock",
    "OneOff",
    "GlidePath",
    "Assumptions",
    "TaxSettings",
    "PersonalInfo",
    "RetirementData",
    "PRIMARY",
    "SPOUSE",
    "TaxPosition",
    "initial_tax_position",
    "update_tax_position",
    "calculate_income_tax",
    "apply_growth",
    "apply_market_shock",
    "equity_weight",
    "growth_rate_for",
    "apply_bed_and_isa",
    "TARGET_CRYSTALLISATION",
    "apply_one_offs",
    "DrawdownStrategy",
    "BalancedStrategy",
    "LowestGrowthFirstStrategy",
    "TaxOptimizedStrategy",
    "STRATEGIES",
    "MAX_CONVERGENCE_ROUNDS",
    "create_strategy",
    "calculate_projection",
    "validate_data",
    "ProjectionResult",
    "YearlyDatapoint",
    "UK_STATE_PENSION_2024",
    "STATE_PENSION_AGE",
    "MAX_AGE",
    "SCENARIOS",
    "compare_strategies",
    "run_scenarios",
]
