"""One-off windfalls and expenses."""

from retirement_sim_uk.params import PRIMARY, SPOUSE, AssetPool, AssetType, OneOff


def apply_one_offs(
    pools: list[AssetPool],
    one_offs: list[OneOff],
    ages: tuple[float | None, float | None],
    inflation_multiplier: float,
) -> None:
    """Add each enabled one-off, inflated to this year, to its owner's cash.

    Spouse one-offs match on the spouse's age and are skipped without a spouse.
    Negative amounts can push cash below zero; the projection loop funds that
    deficit from other assets.
    """
    primary_age, spouse_age = ages
    for one_off in one_offs:
        if not one_off.enabled:
            continue
        amount = one_off.amount * inflation_multiplier
        if one_off.belongs_to_spouse:
            if spouse_age is not None and spouse_age == one_off.age:
                pools[SPOUSE][AssetType.CASH] += amount
        elif primary_age == one_off.age:
            pools[PRIMARY][AssetType.CASH] += amount
