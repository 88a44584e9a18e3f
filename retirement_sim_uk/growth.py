"""Annual asset growth, ISA glide path and market shocks."""

from retirement_sim_uk.params import AssetPool, AssetType, Assumptions, GlidePath, MarketShock

# Asset category → growth-class key used in Assumptions.category_growth_rates
_GROWTH_CATEGORY: dict[AssetType, str] = {
    AssetType.PENSION: "pension",
    AssetType.PENSION_CRYSTALLISED: "pension",
    AssetType.CASH: "cash",
    AssetType.STOCKS_AND_SHARES: "stocks",
    AssetType.ISA: "stocks",
    AssetType.BONDS: "bonds",
    AssetType.PROPERTY: "property",
}


def growth_category(asset_type: AssetType) -> str:
    return _GROWTH_CATEGORY.get(asset_type, "other")


def growth_rate_for(category_growth_rates: dict[str, float], asset_type: AssetType) -> float:
    """Annual growth as a fraction (5.0% → 0.05). Missing keys grow at 0."""
    return (category_growth_rates.get(growth_category(asset_type)) or 0) / 100


def growth_rates_by_type(category_growth_rates: dict[str, float]) -> dict[AssetType, float]:
    return {t: growth_rate_for(category_growth_rates, t) for t in AssetType}


def equity_weight(glide_path: GlidePath, age: int, retirement_age: int) -> float:
    """Equity share (%) of the ISA blend at a given age.

    Flat at initial_equity_pct up to retirement, then linear toward
    target_equity_pct over years_to_target years, flat afterwards.
    """
    years_since = age - retirement_age
    if years_since <= 0:
        weight = glide_path.initial_equity_pct
    elif glide_path.years_to_target <= 0 or years_since >= glide_path.years_to_target:
        weight = glide_path.target_equity_pct
    else:
        t = years_since / glide_path.years_to_target
        weight = glide_path.initial_equity_pct + t * (
            glide_path.target_equity_pct - glide_path.initial_equity_pct
        )
    return min(100.0, max(0.0, weight))


def _isa_rate(assumptions: Assumptions, age: int, retirement_age: int) -> float:
    rates = assumptions.category_growth_rates
    stock_rate = (rates.get("stocks") or 0) / 100
    glide = assumptions.glide_path
    if glide is None or not glide.enabled:
        return stock_rate
    bond_rate = (rates.get("bonds") or 0) / 100
    w = equity_weight(glide, age, retirement_age) / 100
    return w * stock_rate + (1 - w) * bond_rate


def apply_growth(
    pools: list[AssetPool], assumptions: Assumptions, age: int, retirement_age: int,
) -> None:
    """Grow every balance in every pool by one year (in place)."""
    rates = growth_rates_by_type(assumptions.category_growth_rates)
    rates[AssetType.ISA] = _isa_rate(assumptions, age, retirement_age)
    for pool in pools:
        for t in AssetType:
            pool[t] *= 1 + rates[t]


def find_shock(shocks: list[MarketShock], year: int) -> MarketShock | None:
    for shock in shocks:
        if shock.year == year:
            return shock
    return None


def apply_market_shock(pools: list[AssetPool], shock: MarketShock | None) -> None:
    """Scale growth-linked ("stocks" class) balances by the shock's impact."""
    if shock is None:
        return
    multiplier = (100 + shock.impact_percent) / 100
    for pool in pools:
        for t in AssetType:
            if growth_category(t) == "stocks":
                pool[t] *= multiplier
