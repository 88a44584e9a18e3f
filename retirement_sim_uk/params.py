"""Projection input records and asset pool helpers."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class AssetType(str, Enum):
    PENSION = "pension"
    PENSION_CRYSTALLISED = "pension_crystallised"
    CASH = "cash"
    STOCKS_AND_SHARES = "stocks"
    ISA = "isa"
    BONDS = "bonds"
    PROPERTY = "property"


AssetPool = dict[AssetType, float]

# Pool indices within the (primary, spouse) pair
PRIMARY = 0
SPOUSE = 1

# 2024/25 UK income tax bands (today's money)
DEFAULT_PERSONAL_ALLOWANCE = 12_570
DEFAULT_HIGHER_RATE_THRESHOLD = 50_270
DEFAULT_RETIREMENT_AGE = 65


@dataclass
class PersonalInfo:
    date_of_birth: date | None = None
    spouse_date_of_birth: date | None = None
    retirement_age: int = DEFAULT_RETIREMENT_AGE


@dataclass
class Asset:
    name: str
    value: float
    category: AssetType
    belongs_to_spouse: bool = False


@dataclass
class IncomeNeed:
    """Annual spending requirement in today's money.

    starting_age=None means "from retirement age".
    """

    description: str
    annual_amount: float
    starting_age: int | None = None


@dataclass
class RetirementIncome:
    description: str
    annual_amount: float
    start_year: int
    end_year: int | None = None
    enabled: bool = True
    inflation_adjusted: bool = True
    # Custom annual growth (%) compounded from start_year, on top of inflation adjustment
    growth_rate: float | None = None
    belongs_to_spouse: bool = False


@dataclass
class MarketShock:
    year: int
    impact_percent: float
    description: str = ""


@dataclass
class OneOff:
    """Windfall (positive) or expense (negative) landing in cash at a given age."""

    description: str
    amount: float
    age: int
    enabled: bool = True
    belongs_to_spouse: bool = False


@dataclass
class GlidePath:
    """Equity/bond blend for ISA growth, shifting after retirement."""

    initial_equity_pct: float = 100.0
    target_equity_pct: float = 60.0
    years_to_target: int = 10
    enabled: bool = True


@dataclass
class Assumptions:

    inflation_rate: float = 2.5
    # Real growth (%) keyed by growth class: pension/cash/stocks/bonds/property/other
    category_growth_rates: dict[str, float] = field(
        default_factory=lambda: {
            "pension": 5.0,
            "cash": 1.0,
            "stocks": 5.0,
            "bonds": 2.0,
            "property": 3.0,
            "other": 0.0,
        }
    )
    # None = tax bands rise with inflation
    tax_band_increase_rate: float | None = None
    bed_and_isa_enabled: bool = False
    glide_path: GlidePath | None = None

    def band_increase_rate(self) -> float:
        if self.tax_band_increase_rate is None:
            return self.inflation_rate
        return self.tax_band_increase_rate


@dataclass
class TaxSettings:
    personal_allowance: float = DEFAULT_PERSONAL_ALLOWANCE
    higher_rate_threshold: float = DEFAULT_HIGHER_RATE_THRESHOLD


@dataclass
class RetirementData:
    personal: PersonalInfo = field(default_factory=PersonalInfo)
    assets: list[Asset] = field(default_factory=list)
    income_needs: list[IncomeNeed] = field(default_factory=list)
    retirement_income: list[RetirementIncome] = field(default_factory=list)
    assumptions: Assumptions = field(default_factory=Assumptions)
    income_tax: TaxSettings = field(default_factory=TaxSettings)
    shocks: list[MarketShock] = field(default_factory=list)
    one_offs: list[OneOff] = field(default_factory=list)


def empty_pool() -> AssetPool:
    return {t: 0.0 for t in AssetType}


def build_pools(assets: list[Asset]) -> tuple[AssetPool, AssetPool]:
    """Split the asset list into fresh (primary, spouse) pools."""
    primary = empty_pool()
    spouse = empty_pool()
    for asset in assets:
        pool = spouse if asset.belongs_to_spouse else primary
        pool[AssetType(asset.category)] += asset.value
    return primary, spouse


def pool_total(pool: AssetPool) -> float:
    return sum(pool.values())


def positive_total(pool: AssetPool) -> float:
    """Sum of positive balances only (what can actually be drawn)."""
    return sum(max(0.0, v) for v in pool.values())


def combine_pools(pools) -> AssetPool:
    combined = empty_pool()
    for pool in pools:
        for t in AssetType:
            combined[t] += pool[t]
    return combined
