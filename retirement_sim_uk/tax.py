"""Income tax band tracking (UK personal allowance / basic / higher rate)."""

from dataclasses import dataclass, replace

from retirement_sim_uk.params import TaxSettings

BASIC_RATE = 0.20
HIGHER_RATE = 0.40


@dataclass(frozen=True)
class TaxPosition:
    """Running view of one person's bands within a tax year."""

    personal_allowance_remaining: float
    basic_rate_remaining: float
    tax: float = 0.0

    @property
    def room_before_higher_rate(self) -> float:
        return self.personal_allowance_remaining + self.basic_rate_remaining


def initial_tax_position(settings: TaxSettings, inflation_multiplier: float = 1.0) -> TaxPosition:
    """Seed a position from today's bands scaled by the band multiplier."""
    allowance = settings.personal_allowance * inflation_multiplier
    return TaxPosition(
        personal_allowance_remaining=allowance,
        basic_rate_remaining=settings.higher_rate_threshold * inflation_multiplier - allowance,
        tax=0.0,
    )


def update_tax_position(taxable_income: float, position: TaxPosition) -> TaxPosition:
    """Layer a slice of taxable income on top of what the position already absorbed.

    Allowance is consumed first, then the basic-rate band, and anything beyond
    both is taxed at the higher rate. ``tax`` grows by exactly the tax on this
    slice, so ``new.tax - position.tax`` is the marginal tax of the increment.
    Always returns a new object; ``position`` is never modified.
    """
    if taxable_income < position.personal_allowance_remaining:
        return replace(
            position,
            personal_allowance_remaining=position.personal_allowance_remaining - taxable_income,
        )

    basic_slice = taxable_income - position.personal_allowance_remaining
    if basic_slice < position.basic_rate_remaining:
        return TaxPosition(
            personal_allowance_remaining=0.0,
            basic_rate_remaining=position.basic_rate_remaining - basic_slice,
            tax=position.tax + basic_slice * BASIC_RATE,
        )

    higher_slice = basic_slice - position.basic_rate_remaining
    return TaxPosition(
        personal_allowance_remaining=0.0,
        basic_rate_remaining=0.0,
        tax=position.tax + position.basic_rate_remaining * BASIC_RATE + higher_slice * HIGHER_RATE,
    )


def calculate_income_tax(
    taxable_income: float, personal_allowance: float, higher_rate_threshold: float,
) -> float:
    """Tax due on a whole year's income in one go."""
    if taxable_income <= personal_allowance:
        return 0.0
    above_allowance = taxable_income - personal_allowance
    basic_band = higher_rate_threshold - personal_allowance
    if above_allowance <= basic_band:
        return above_allowance * BASIC_RATE
    return basic_band * BASIC_RATE + (above_allowance - basic_band) * HIGHER_RATE
