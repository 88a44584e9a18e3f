"""TOML config loader with CLI > config > default resolution."""

import argparse
import sys
import tomllib
from datetime import date
from pathlib import Path

from retirement_sim_uk.params import (
    DEFAULT_RETIREMENT_AGE,
    Asset,
    AssetType,
    Assumptions,
    GlidePath,
    IncomeNeed,
    MarketShock,
    OneOff,
    PersonalInfo,
    RetirementData,
    RetirementIncome,
    TaxSettings,
)
from retirement_sim_uk.scenarios import SCENARIOS
from retirement_sim_uk.strategies import STRATEGIES

DEFAULT_CONFIG_PATH = Path("config.toml")

# Run options that may come from the CLI or the top level of the config file
DEFAULTS = {
    "strategy": "balanced",
    "max_years": None,
    "every": 5,
    "chart": None,
    "current_year": None,
    "scenario": None,
}

STRATEGY_CHOICES = [*STRATEGIES, "all"]

_OWNERS = {"primary": False, "spouse": True}


def _fail(message: str) -> None:
    print(message, file=sys.stderr)
    raise SystemExit(1)


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        _fail(f"Failed to read config file: {path}: {e}")


def _parse_date(value) -> date | None:
    """TOML date, ISO string or empty → date | None."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        _fail(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def _belongs_to_spouse(item: dict) -> bool:
    owner = str(item.get("owner", "primary")).lower()
    if owner not in _OWNERS:
        _fail(f"Unknown owner {owner!r} (expected primary or spouse)")
    return _OWNERS[owner]


def _required(item: dict, key: str, table: str):
    if key not in item:
        _fail(f"Missing {key!r} in [[{table}]] entry {item.get('description', '')!r}")
    return item[key]


def _parse_category(value) -> AssetType:
    try:
        return AssetType(str(value).lower())
    except ValueError:
        choices = ", ".join(t.value for t in AssetType)
        _fail(f"Unknown asset category {value!r} (expected one of {choices})")


def _build_assumptions(raw: dict) -> Assumptions:
    defaults = Assumptions()
    growth = dict(defaults.category_growth_rates)
    growth.update(raw.get("growth", {}))

    glide_path = None
    if "glide_path" in raw:
        glide_path = GlidePath(**raw["glide_path"])

    return Assumptions(
        inflation_rate=raw.get("inflation_rate", defaults.inflation_rate),
        category_growth_rates=growth,
        tax_band_increase_rate=raw.get("tax_band_increase_rate"),
        bed_and_isa_enabled=raw.get("bed_and_isa", defaults.bed_and_isa_enabled),
        glide_path=glide_path,
    )


def build_retirement_data(raw: dict) -> RetirementData:
    """Build RetirementData from a loaded config dict."""
    personal_raw = raw.get("personal", {})
    personal = PersonalInfo(
        date_of_birth=_parse_date(personal_raw.get("date_of_birth")),
        spouse_date_of_birth=_parse_date(personal_raw.get("spouse_date_of_birth")),
        retirement_age=personal_raw.get("retirement_age", DEFAULT_RETIREMENT_AGE),
    )

    assets = [
        Asset(
            name=a.get("name", a.get("category", "")),
            value=float(a.get("value", 0)),
            category=_parse_category(a.get("category")),
            belongs_to_spouse=_belongs_to_spouse(a),
        )
        for a in raw.get("assets", [])
    ]
    income_needs = [
        IncomeNeed(
            description=n.get("description", ""),
            annual_amount=float(_required(n, "annual_amount", "income_needs")),
            starting_age=n.get("starting_age"),
        )
        for n in raw.get("income_needs", [])
    ]
    retirement_income = [
        RetirementIncome(
            description=i.get("description", ""),
            annual_amount=float(_required(i, "annual_amount", "retirement_income")),
            start_year=_required(i, "start_year", "retirement_income"),
            end_year=i.get("end_year"),
            enabled=i.get("enabled", True),
            inflation_adjusted=i.get("inflation_adjusted", True),
            growth_rate=i.get("growth_rate"),
            belongs_to_spouse=_belongs_to_spouse(i),
        )
        for i in raw.get("retirement_income", [])
    ]
    shocks = [
        MarketShock(
            year=_required(s, "year", "shocks"),
            impact_percent=float(_required(s, "impact_percent", "shocks")),
            description=s.get("description", ""),
        )
        for s in raw.get("shocks", [])
    ]
    one_offs = [
        OneOff(
            description=o.get("description", ""),
            amount=float(_required(o, "amount", "one_offs")),
            age=_required(o, "age", "one_offs"),
            enabled=o.get("enabled", True),
            belongs_to_spouse=_belongs_to_spouse(o),
        )
        for o in raw.get("one_offs", [])
    ]

    tax_defaults = TaxSettings()
    tax_raw = raw.get("income_tax", {})
    income_tax = TaxSettings(
        personal_allowance=tax_raw.get("personal_allowance", tax_defaults.personal_allowance),
        higher_rate_threshold=tax_raw.get("higher_rate_threshold", tax_defaults.higher_rate_threshold),
    )

    return RetirementData(
        personal=personal,
        assets=assets,
        income_needs=income_needs,
        retirement_income=retirement_income,
        assumptions=_build_assumptions(raw.get("assumptions", {})),
        income_tax=income_tax,
        shocks=shocks,
        one_offs=one_offs,
    )


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared projection flags."""
    d = DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help="Config file path (default: config.toml)")
    parser.add_argument("--strategy", choices=STRATEGY_CHOICES, default=None, help=f"Drawdown strategy, or 'all' to compare (default: {d['strategy']})")
    parser.add_argument("--max-years", type=int, default=None, help="Years to project from today (default: to age 100)")
    parser.add_argument("--every", type=int, default=None, help=f"Print every Nth year in the yearly table (default: {d['every']})")
    parser.add_argument("--chart", type=Path, default=None, help="Write a trajectory chart PNG into this directory")
    parser.add_argument("--scenario", choices=list(SCENARIOS), default=None, help="Swap in a preset inflation/growth assumption set (default: the file's own)")
    parser.add_argument("--current-year", type=int, default=None, help="Calendar year treated as today (default: this year)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log per-year drawdown detail")
    return parser


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > config.toml > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    if resolved["strategy"] not in STRATEGY_CHOICES:
        _fail(f"Unknown strategy {resolved['strategy']!r} (expected one of {', '.join(STRATEGY_CHOICES)})")
    if resolved["scenario"] is not None and resolved["scenario"] not in SCENARIOS:
        _fail(f"Unknown scenario {resolved['scenario']!r} (expected one of {', '.join(SCENARIOS)})")
    if resolved["chart"] is not None:
        resolved["chart"] = Path(resolved["chart"])
    return resolved


def parse_args(
    description: str, argv: list[str] | None = None,
) -> tuple[dict, RetirementData, argparse.Namespace]:
    """Parse CLI args, load config, resolve values.

    Returns (resolved_options, retirement_data, namespace).
    """
    parser = create_parser(description)
    args = parser.parse_args(argv)
    config = load_config(args.config)
    return resolve(args, config), build_retirement_data(config), args
