"""Core projection engine."""

import logging
from dataclasses import dataclass, field, replace
from datetime import date

from retirement_sim_uk.events import apply_one_offs
from retirement_sim_uk.growth import apply_growth, apply_market_shock, find_shock, growth_rates_by_type
from retirement_sim_uk.params import (
    AssetPool,
    AssetType,
    IncomeNeed,
    RetirementData,
    RetirementIncome,
    build_pools,
    combine_pools,
    pool_total,
)
from retirement_sim_uk.strategies import create_strategy
from retirement_sim_uk.tax import initial_tax_position, update_tax_position
from retirement_sim_uk.transfers import apply_bed_and_isa

logger = logging.getLogger(__name__)

# UK full new state pension, 2024 (£/year, today's money)
UK_STATE_PENSION_2024 = 11_502
STATE_PENSION_AGE = 67
MAX_AGE = 100
# Combined balance at or below this (£) counts as depleted; zero would miss
# balances left as float dust by the proportional withdrawals
DEPLETED_THRESHOLD = 0.01

# Accepted retirement age range for validation
MIN_RETIREMENT_AGE = 40
MAX_RETIREMENT_AGE = MAX_AGE


@dataclass
class YearlyDatapoint:
    year: int
    age: int
    assets: float
    cash: float
    isa: float
    pension: float  # uncrystallised + crystallised
    pension_crystallised: float
    stocks: float
    bonds: float
    property: float
    income: float
    expenditure: float
    state_pension: float
    retirement_income: float
    tax_payable: float
    asset_withdrawals: float
    shortfall: float


@dataclass
class ProjectionResult:
    yearly_data: list[YearlyDatapoint] = field(default_factory=list)
    runs_out_at: int = 0  # calendar year, 0 = never
    total_needed: float = 0.0  # placeholder, always 0
    current_assets: float = 0.0


def validate_data(data: RetirementData) -> list[str]:
    """Check the input record is projectable. Returns list of error messages."""
    errors = []
    personal = data.personal
    if personal.date_of_birth is None:
        errors.append("Date of birth is required")
    if not data.assets:
        errors.append("At least one asset is required")
    if not MIN_RETIREMENT_AGE <= personal.retirement_age <= MAX_RETIREMENT_AGE:
        errors.append(
            f"Retirement age {personal.retirement_age} is outside "
            f"{MIN_RETIREMENT_AGE}-{MAX_RETIREMENT_AGE}"
        )
    for asset in data.assets:
        if asset.value < 0:
            errors.append(f"Asset '{asset.name}' has a negative value ({asset.value:,.0f})")
    if personal.spouse_date_of_birth is None:
        spouse_items = [a.name for a in data.assets if a.belongs_to_spouse]
        spouse_items += [i.description for i in data.retirement_income if i.belongs_to_spouse]
        spouse_items += [o.description for o in data.one_offs if o.belongs_to_spouse]
        if spouse_items:
            errors.append(
                f"Spouse items without a spouse date of birth: {', '.join(spouse_items)}"
            )
    if data.income_tax.higher_rate_threshold < data.income_tax.personal_allowance:
        errors.append("Higher-rate threshold is below the personal allowance")
    return errors


def _state_pension(age: int | None, inflation_multiplier: float) -> float:
    if age is None or age < STATE_PENSION_AGE:
        return 0.0
    return UK_STATE_PENSION_2024 * inflation_multiplier


def _retirement_income(
    incomes: list[RetirementIncome], year: int, inflation_multiplier: float,
) -> tuple[float, float]:
    """Sum active income streams for the year. Returns (primary, spouse)."""
    primary = spouse = 0.0
    for income in incomes:
        if not income.enabled or year < income.start_year:
            continue
        if income.end_year is not None and year > income.end_year:
            continue
        inflation = inflation_multiplier if income.inflation_adjusted else 1.0
        growth = (1 + (income.growth_rate or 0) / 100) ** (year - income.start_year)
        amount = income.annual_amount * inflation * growth
        if income.belongs_to_spouse:
            spouse += amount
        else:
            primary += amount
    return primary, spouse


def _applicable_need(
    income_needs: list[IncomeNeed], retirement_age: int, age: int,
) -> IncomeNeed | None:
    """Need with the latest effective starting age not after ``age``."""
    best = None
    best_start = None
    for need in income_needs:
        start = need.starting_age if need.starting_age is not None else retirement_age
        if start <= age and (best_start is None or start > best_start):
            best, best_start = need, start
    return best


def _calc_expenditure(
    income_needs: list[IncomeNeed], retirement_age: int, age: int, inflation_multiplier: float,
) -> float:
    if age < retirement_age:
        return 0.0
    need = _applicable_need(income_needs, retirement_age, age)
    if need is None:
        return 0.0
    return need.annual_amount * inflation_multiplier


def _resolve_cash_deficit(pools: list[AssetPool]) -> float:
    """Zero any negative cash and return the combined deficit (positive)."""
    deficit = 0.0
    for pool in pools:
        if pool[AssetType.CASH] < 0:
            deficit -= pool[AssetType.CASH]
            pool[AssetType.CASH] = 0.0
    return deficit


def _make_datapoint(
    year: int, age: int, pools: list[AssetPool], **flows: float,
) -> YearlyDatapoint:
    combined = combine_pools(pools)
    pension = combined[AssetType.PENSION] + combined[AssetType.PENSION_CRYSTALLISED]
    return YearlyDatapoint(
        year=year,
        age=age,
        assets=max(0.0, pool_total(combined)),
        cash=max(0.0, combined[AssetType.CASH]),
        isa=max(0.0, combined[AssetType.ISA]),
        pension=max(0.0, pension),
        pension_crystallised=max(0.0, combined[AssetType.PENSION_CRYSTALLISED]),
        stocks=max(0.0, combined[AssetType.STOCKS_AND_SHARES]),
        bonds=max(0.0, combined[AssetType.BONDS]),
        property=max(0.0, combined[AssetType.PROPERTY]),
        **flows,
    )


def calculate_projection(
    data: RetirementData,
    max_years: int | None = None,
    strategy: str = "balanced",
    *,
    current_year: int | None = None,
) -> ProjectionResult:
    """Project the household year by year from today's age to at most age 100.

    Args:
        data: input record; never modified.
        max_years: cap on years projected beyond the current age (None = to 100).
        strategy: "balanced", "lowest_growth_first" or "tax_optimized".
        current_year: calendar year treated as "now" (default: today).

    Returns:
        ProjectionResult with one YearlyDatapoint per age. Missing date of
        birth or no assets gives an empty result.
    """
    personal = data.personal
    if personal.date_of_birth is None or not data.assets:
        return ProjectionResult()

    assumptions = data.assumptions
    drawdown = create_strategy(strategy, growth_rates_by_type(assumptions.category_growth_rates))

    if current_year is None:
        current_year = date.today().year
    birth_year = personal.date_of_birth.year
    spouse_birth_year = (
        personal.spouse_date_of_birth.year if personal.spouse_date_of_birth else None
    )
    current_age = current_year - birth_year
    retirement_age = personal.retirement_age
    if max_years is None:
        max_age = MAX_AGE
    else:
        max_age = min(current_age + max(0, int(max_years)), MAX_AGE)

    pools = list(build_pools(data.assets))
    yearly_data = []
    runs_out_at = 0

    for age in range(current_age, max_age + 1):
        year = birth_year + age
        years_from_now = year - current_year
        inflation = (1 + assumptions.inflation_rate / 100) ** years_from_now
        band_multiplier = (1 + assumptions.band_increase_rate() / 100) ** years_from_now
        spouse_age = year - spouse_birth_year if spouse_birth_year is not None else None
        ages = (age, spouse_age)

        if assumptions.bed_and_isa_enabled:
            apply_bed_and_isa(pools, ages)
        apply_growth(pools, assumptions, age, retirement_age)
        apply_one_offs(pools, data.one_offs, ages, inflation)
        apply_market_shock(pools, find_shock(data.shocks, year))

        state_pension = [_state_pension(age, inflation), _state_pension(spouse_age, inflation)]
        retirement_income = _retirement_income(data.retirement_income, year, inflation)
        base_income = [sp + ri for sp, ri in zip(state_pension, retirement_income)]
        total_base_income = sum(base_income)
        expenditure = _calc_expenditure(data.income_needs, retirement_age, age, inflation)

        # Tax already due on guaranteed income; withdrawals are layered on top
        positions = [
            update_tax_position(income, initial_tax_position(data.income_tax, band_multiplier))
            for income in base_income
        ]

        cash_deficit = _resolve_cash_deficit(pools)
        if age >= retirement_age:
            shortfall = expenditure - total_base_income + cash_deficit
        else:
            shortfall = cash_deficit
            # Tax on guaranteed income is only funded from assets in retirement
            positions = [replace(p, tax=0.0) for p in positions]

        tax_payable = 0.0
        withdrawn = 0.0
        unfunded = 0.0
        if shortfall > 0:
            result = drawdown.execute(pools, shortfall, positions)
            for pool, before, after in zip(pools, positions, result.tax_positions):
                pool[AssetType.CASH] -= after.tax - before.tax
            tax_payable = sum(p.tax for p in result.tax_positions)
            withdrawn = result.total_withdrawn
            unfunded = result.unfunded
            logger.debug(
                "age %d (%d): shortfall %.2f withdrawn %.2f tax %.2f unfunded %.2f",
                age, year, shortfall, withdrawn, tax_payable, unfunded,
            )

        point = _make_datapoint(
            year, age, pools,
            income=total_base_income,
            expenditure=expenditure,
            state_pension=sum(state_pension),
            retirement_income=sum(retirement_income),
            tax_payable=tax_payable,
            asset_withdrawals=withdrawn,
            shortfall=unfunded,
        )
        yearly_data.append(point)

        if runs_out_at == 0 and age >= retirement_age and pool_total(combine_pools(pools)) <= DEPLETED_THRESHOLD:
            runs_out_at = year
            logger.debug("assets depleted in %d (age %d)", year, age)

    return ProjectionResult(
        yearly_data=yearly_data,
        runs_out_at=runs_out_at,
        total_needed=0.0,
        current_assets=sum(a.value for a in data.assets),
    )
