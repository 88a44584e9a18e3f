"""Bed and ISA: annual pension crystallisation into ISA + crystallised pension."""

import math

from retirement_sim_uk.params import AssetPool, AssetType

BED_AND_ISA_MIN_AGE = 55
ANNUAL_ISA_ALLOWANCE = 20_000
TAX_FREE_LUMP_SUM_RATIO = 0.25
# Crystallising £80,000 yields a £20,000 tax-free lump sum
TARGET_CRYSTALLISATION = ANNUAL_ISA_ALLOWANCE / TAX_FREE_LUMP_SUM_RATIO


def _is_eligible(age: float | None) -> bool:
    if age is None or math.isnan(age):
        return False
    return age >= BED_AND_ISA_MIN_AGE


def apply_bed_and_isa(pools: list[AssetPool], ages: tuple[float | None, float | None]) -> None:
    """Crystallise up to £80,000 of pension per eligible person (in place).

    Own pension is used first; any gap is taken from the other pool's pension
    regardless of that person's eligibility. 25% of the crystallised total goes
    to the person's own ISA and 75% to their own crystallised pension. People
    are processed primary then spouse, each seeing the balances left by the
    previous step.
    """
    for i, age in enumerate(ages):
        if not _is_eligible(age):
            continue
        own = pools[i]
        other = pools[1 - i]

        from_own = min(max(0.0, own[AssetType.PENSION]), TARGET_CRYSTALLISATION)
        gap = TARGET_CRYSTALLISATION - from_own
        from_other = 0.0
        if gap > 0 and other[AssetType.PENSION] > 0:
            from_other = min(other[AssetType.PENSION], gap)

        crystallised = from_own + from_other
        if crystallised == 0:
            continue

        own[AssetType.PENSION] -= from_own
        other[AssetType.PENSION] -= from_other
        own[AssetType.ISA] += crystallised * TAX_FREE_LUMP_SUM_RATIO
        own[AssetType.PENSION_CRYSTALLISED] += crystallised * (1 - TAX_FREE_LUMP_SUM_RATIO)
