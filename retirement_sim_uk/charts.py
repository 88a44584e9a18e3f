"""Chart generation for projection results."""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from retirement_sim_uk.simulation import ProjectionResult

# Strategy color mapping
STRATEGY_COLORS = {
    "balanced": "#1f77b4",             # blue
    "lowest_growth_first": "#2ca02c",  # green
    "tax_optimized": "#ff7f0e",        # orange
}

DEFAULT_COLOR = "#7f7f7f"

# (datapoint attribute, legend label, color); pension already includes crystallised
_CATEGORY_SERIES = (
    ("cash", "Cash", "#66c2a5"),
    ("isa", "ISA", "#fc8d62"),
    ("pension", "Pension", "#8da0cb"),
    ("stocks", "Stocks & shares", "#e78ac3"),
    ("bonds", "Bonds", "#a6d854"),
    ("property", "Property", "#ffd92f"),
)


def _format_pounds_axis(ax: plt.Axes):
    ax.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"£{x / 1000:,.0f}k" if x else "0")
    )


def _mark_runs_out(ax: plt.Axes, result: ProjectionResult, color: str = "#d62728"):
    if not result.runs_out_at:
        return
    age = next(p.age for p in result.yearly_data if p.year == result.runs_out_at)
    ax.axvline(age, color=color, linewidth=2, linestyle=":")
    ax.annotate(
        f"Runs out {result.runs_out_at}",
        xy=(age, ax.get_ylim()[1] * 0.85),
        fontsize=11, fontweight="bold", color=color,
        ha="right",
        bbox=dict(boxstyle="round,pad=0.3", fc="white", ec=color, alpha=0.9),
    )


def plot_asset_breakdown(
    result: ProjectionResult, output_path: Path, name: str = "",
) -> Path:
    """Stacked area chart of combined balances by category, per age.

    Args:
        result: calculate_projection() result.
        output_path: directory to save the PNG.
        name: optional suffix for the output filename (e.g. "tax_optimized" → "assets-tax_optimized.png").

    Returns:
        Path to the generated PNG file.
    """
    if not result.yearly_data:
        raise ValueError("No yearly data to plot")

    fig, ax = plt.subplots(figsize=(14, 8))
    ages = [p.age for p in result.yearly_data]
    ax.stackplot(
        ages,
        *[[getattr(p, attr) for p in result.yearly_data] for attr, _, _ in _CATEGORY_SERIES],
        labels=[label for _, label, _ in _CATEGORY_SERIES],
        colors=[color for _, _, color in _CATEGORY_SERIES],
        alpha=0.8,
    )
    ax.plot(ages, [p.expenditure for p in result.yearly_data],
            color="black", linewidth=1.5, linestyle="--", label="Expenditure")

    ax.set_xlabel("Age")
    ax.set_ylabel("Assets (nominal £)")
    ax.set_title("Projected assets by category")
    ax.legend(loc="upper right")
    ax.grid(True, alpha=0.3)
    _format_pounds_axis(ax)
    _mark_runs_out(ax, result)

    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"assets{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath


def plot_strategy_comparison(
    results: dict[str, ProjectionResult], output_path: Path, name: str = "",
) -> Path:
    """Line chart of total assets per age, one line per drawdown strategy."""
    valid = {k: r for k, r in results.items() if r.yearly_data}
    if not valid:
        raise ValueError("No projection results to plot")

    fig, ax = plt.subplots(figsize=(14, 8))
    for strategy, result in valid.items():
        color = STRATEGY_COLORS.get(strategy, DEFAULT_COLOR)
        ax.plot(
            [p.age for p in result.yearly_data],
            [p.assets for p in result.yearly_data],
            label=strategy, color=color, linewidth=2,
        )

    ax.set_xlabel("Age")
    ax.set_ylabel("Total assets (nominal £)")
    ax.set_title("Total assets by drawdown strategy")
    ax.legend(loc="upper right")
    ax.grid(True, alpha=0.3)
    _format_pounds_axis(ax)

    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"strategies{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath
