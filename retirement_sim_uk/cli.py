"""CLI entry point: yearly projection report for one strategy or all three."""

import logging
import sys

from retirement_sim_uk.config import parse_args
from retirement_sim_uk.params import RetirementData
from retirement_sim_uk.scenarios import compare_strategies, with_scenario
from retirement_sim_uk.simulation import ProjectionResult, calculate_projection, validate_data
from retirement_sim_uk.strategies import STRATEGIES

logger = logging.getLogger(__name__)


def _print_header(data: RetirementData, strategy: str):
    personal = data.personal
    assumptions = data.assumptions
    print("=" * 100)
    print(f"Retirement projection (strategy: {strategy})")
    spouse = ""
    if personal.spouse_date_of_birth:
        spouse = f" / spouse born {personal.spouse_date_of_birth.isoformat()}"
    print(f"  Born {personal.date_of_birth.isoformat()}{spouse} / retiring at {personal.retirement_age}")
    total = sum(a.value for a in data.assets)
    print(f"  Assets today: £{total:,.0f} across {len(data.assets)} holdings")
    rates = ", ".join(f"{k} {v:.1f}%" for k, v in assumptions.category_growth_rates.items())
    print(f"  Inflation {assumptions.inflation_rate:.1f}% / growth: {rates}")
    if assumptions.bed_and_isa_enabled:
        print("  Bed and ISA: on (from 55, £80,000 crystallised per person per year)")
    glide = assumptions.glide_path
    if glide is not None and glide.enabled:
        print(
            f"  ISA glide path: {glide.initial_equity_pct:.0f}% → {glide.target_equity_pct:.0f}% equity"
            f" over {glide.years_to_target} years after retirement"
        )
    print("=" * 100)
    print()


def _print_yearly_table(result: ProjectionResult, every: int):
    print(
        f"{'Year':<6} {'Age':<5} {'Assets':>12} {'Cash':>11} {'ISA':>11} {'Pension':>11}"
        f" {'Income':>10} {'Spend':>10} {'Withdrawn':>10} {'Tax':>9} {'Unmet':>8}"
    )
    print("-" * 100)
    rows = result.yearly_data
    for i, p in enumerate(rows):
        if i % max(1, every) and i != len(rows) - 1 and p.year != result.runs_out_at:
            continue
        print(
            f"{p.year:<6} {p.age:<5} {p.assets:>12,.0f} {p.cash:>11,.0f} {p.isa:>11,.0f}"
            f" {p.pension:>11,.0f} {p.income:>10,.0f} {p.expenditure:>10,.0f}"
            f" {p.asset_withdrawals:>10,.0f} {p.tax_payable:>9,.0f} {p.shortfall:>8,.0f}"
        )
    print("-" * 100)


def _print_summary(results: dict[str, ProjectionResult]):
    print("\n" + "=" * 100)
    print("Summary")
    print("=" * 100)
    for strategy, r in results.items():
        if not r.yearly_data:
            print(f"\n[{STRATEGIES[strategy].LABEL}] nothing to project")
            continue
        last = r.yearly_data[-1]
        total_tax = sum(p.tax_payable for p in r.yearly_data)
        unmet = sum(p.shortfall for p in r.yearly_data)
        print(f"\n[{STRATEGIES[strategy].LABEL}]")
        print(f"  Assets at {last.age}: £{last.assets:,.0f}")
        print(f"  Lifetime tax: £{total_tax:,.0f} / unmet spending: £{unmet:,.0f}")
        if r.runs_out_at:
            print(f"  ⚠ Money runs out in {r.runs_out_at}")
        else:
            print("  Money lasts for the whole projection")


def main(argv: list[str] | None = None):
    """Run the projection report."""
    r, data, args = parse_args("UK retirement drawdown projection", argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    errors = validate_data(data)
    if errors:
        for e in errors:
            print(f"  {e}", file=sys.stderr)
        raise SystemExit(1)

    if r["scenario"] is not None:
        data = with_scenario(data, r["scenario"])
        logger.info("using %s assumptions", r["scenario"])

    if r["strategy"] == "all":
        results = compare_strategies(data, r["max_years"], current_year=r["current_year"])
    else:
        results = {
            r["strategy"]: calculate_projection(
                data, r["max_years"], r["strategy"], current_year=r["current_year"],
            )
        }

    for strategy, result in results.items():
        _print_header(data, strategy)
        _print_yearly_table(result, r["every"])
    _print_summary(results)

    if r["chart"] is not None:
        from retirement_sim_uk.charts import plot_asset_breakdown, plot_strategy_comparison

        for strategy, result in results.items():
            path = plot_asset_breakdown(result, r["chart"], name=strategy)
            logger.info("chart written: %s", path)
            print(f"Chart: {path}")
        if len(results) > 1:
            path = plot_strategy_comparison(results, r["chart"])
            print(f"Chart: {path}")


if __name__ == "__main__":
    main()
