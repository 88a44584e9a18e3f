"""Drawdown strategy classes."""

import logging
from dataclasses import dataclass, field
from typing import ClassVar

from retirement_sim_uk.params import AssetPool, AssetType, positive_total
from retirement_sim_uk.tax import TaxPosition, update_tax_position

logger = logging.getLogger(__name__)

MAX_CONVERGENCE_ROUNDS = 10
# Balanced strategy sweeps leftovers above this after the proportional pass
RESIDUE_SWEEP_THRESHOLD = 0.01
# Need below this (£) counts as met; absorbs float dust between rounds
_NEED_TOLERANCE = 1e-6

# Income-taxable categories for the balanced / lowest-growth strategies
TAXABLE_TYPES = frozenset({AssetType.PENSION, AssetType.PENSION_CRYSTALLISED})

# Tax-optimized draw order for everything except ISA (most to least liquid)
TAXABLE_ORDER: tuple[AssetType, ...] = (
    AssetType.CASH,
    AssetType.BONDS,
    AssetType.STOCKS_AND_SHARES,
    AssetType.PENSION,
    AssetType.PENSION_CRYSTALLISED,
    AssetType.PROPERTY,
)


def is_taxable(asset_type: AssetType) -> bool:
    return asset_type in TAXABLE_TYPES


@dataclass
class WithdrawalResult:
    remaining: float
    taxable_withdrawn: float


@dataclass
class DrawdownResult:
    withdrawn: list[float]
    tax_positions: list[TaxPosition]
    unfunded: float = 0.0
    rounds: int = 0

    @property
    def total_withdrawn(self) -> float:
        return sum(self.withdrawn)


@dataclass
class DrawdownStrategy:
    """Base class for drawdown strategies.

    growth_rates: annual growth fraction per asset category.
    """

    growth_rates: dict[AssetType, float] = field(default_factory=dict)

    NAME: ClassVar[str] = ""
    LABEL: ClassVar[str] = ""

    def withdraw_from_assets(
        self, pool: AssetPool, amount: float, tax_position: TaxPosition,
    ) -> WithdrawalResult:
        """Take up to ``amount`` from one pool in place. Returns what could not be found."""
        raise NotImplementedError

    def execute(
        self,
        pools: list[AssetPool],
        shortfall: float,
        tax_positions: list[TaxPosition],
    ) -> DrawdownResult:
        """Fund ``shortfall`` plus tax already due from the pools, split equally.

        Each round divides the outstanding need equally across pools that still
        hold assets; a pool that cannot cover its share leaves the gap for the
        next round. Stops after MAX_CONVERGENCE_ROUNDS and leaves any remainder
        unfunded.
        """
        positions = list(tax_positions)
        withdrawn = [0.0] * len(pools)
        needed = shortfall + sum(p.tax for p in positions)

        rounds = 0
        while rounds < MAX_CONVERGENCE_ROUNDS:
            if needed <= _NEED_TOLERANCE:
                break
            funded = [i for i, pool in enumerate(pools) if positive_total(pool) > 0]
            if not funded:
                break
            rounds += 1
            share = needed / len(funded)
            for i in funded:
                result = self.withdraw_from_assets(pools[i], share, positions[i])
                taken = share - result.remaining
                positions[i] = update_tax_position(result.taxable_withdrawn, positions[i])
                withdrawn[i] += taken
                needed -= taken
        else:
            if needed > _NEED_TOLERANCE:
                logger.warning(
                    "%s drawdown did not converge after %d rounds; %.2f left unfunded",
                    self.NAME, MAX_CONVERGENCE_ROUNDS, needed,
                )

        return DrawdownResult(
            withdrawn=withdrawn,
            tax_positions=positions,
            unfunded=max(0.0, needed),
            rounds=rounds,
        )


class BalancedStrategy(DrawdownStrategy):
    """Draw from every category in proportion to its balance."""

    NAME = "balanced"
    LABEL = "Balanced"

    def withdraw_from_assets(
        self, pool: AssetPool, amount: float, tax_position: TaxPosition,
    ) -> WithdrawalResult:
        if amount <= 0:
            return WithdrawalResult(0.0, 0.0)
        total = positive_total(pool)
        if total <= 0:
            return WithdrawalResult(amount, 0.0)

        withdrawals = {}
        for t in AssetType:
            balance = max(0.0, pool[t])
            if balance > 0:
                withdrawals[t] = min(amount * balance / total, balance)

        remaining = amount
        taxable = 0.0
        for t, w in withdrawals.items():
            pool[t] -= w
            remaining -= w
            if is_taxable(t):
                taxable += w

        # Float residue from the proportional pass
        if remaining > RESIDUE_SWEEP_THRESHOLD:
            for t in AssetType:
                if remaining <= 0:
                    break
                w = min(remaining, max(0.0, pool[t]))
                pool[t] -= w
                remaining -= w
                if is_taxable(t):
                    taxable += w

        return WithdrawalResult(max(0.0, remaining), taxable)


class LowestGrowthFirstStrategy(DrawdownStrategy):
    """Drain categories one at a time, slowest-growing first."""

    NAME = "lowest_growth_first"
    LABEL = "Lowest growth first"

    def withdraw_from_assets(
        self, pool: AssetPool, amount: float, tax_position: TaxPosition,
    ) -> WithdrawalResult:
        if amount <= 0:
            return WithdrawalResult(0.0, 0.0)

        # sorted() is stable: equal rates keep category order
        ordered = sorted(
            (t for t in AssetType if pool[t] > 0),
            key=lambda t: self.growth_rates.get(t, 0.0),
        )
        remaining = amount
        taxable = 0.0
        for t in ordered:
            if remaining <= 0:
                break
            w = min(remaining, max(0.0, pool[t]))
            pool[t] -= w
            remaining -= w
            if is_taxable(t):
                taxable += w
        return WithdrawalResult(max(0.0, remaining), taxable)


class TaxOptimizedStrategy(DrawdownStrategy):
    """Fill the allowance and basic-rate band, then ISA, then higher-rate."""

    NAME = "tax_optimized"
    LABEL = "Tax optimized"

    def withdraw_from_assets(
        self, pool: AssetPool, amount: float, tax_position: TaxPosition,
    ) -> WithdrawalResult:
        if amount <= 0:
            return WithdrawalResult(0.0, 0.0)

        room = tax_position.room_before_higher_rate
        remaining = amount
        taxable = 0.0

        # Step 1: taxable categories within the room before higher rate
        for t in TAXABLE_ORDER:
            if remaining <= 0:
                break
            cap = max(0.0, room - taxable)
            if cap <= 0:
                break
            w = min(remaining, max(0.0, pool[t]), cap)
            pool[t] -= w
            remaining -= w
            taxable += w

        # Step 2: ISA is tax-free and unlimited
        if remaining > 0:
            w = min(remaining, max(0.0, pool[AssetType.ISA]))
            pool[AssetType.ISA] -= w
            remaining -= w

        # Step 3: ISA exhausted, accept higher-rate tax
        for t in TAXABLE_ORDER:
            if remaining <= 0:
                break
            w = min(remaining, max(0.0, pool[t]))
            pool[t] -= w
            remaining -= w
            taxable += w

        return WithdrawalResult(max(0.0, remaining), taxable)


STRATEGIES: dict[str, type[DrawdownStrategy]] = {
    cls.NAME: cls
    for cls in (BalancedStrategy, LowestGrowthFirstStrategy, TaxOptimizedStrategy)
}


def create_strategy(name: str, growth_rates: dict[AssetType, float]) -> DrawdownStrategy:
    """Build the strategy registered under ``name``. Raises ValueError if unknown."""
    try:
        cls = STRATEGIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown drawdown strategy: {name!r} (expected one of {', '.join(STRATEGIES)})"
        ) from None
    return cls(growth_rates=growth_rates)
