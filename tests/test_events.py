"""Tests for one-off windfalls and expenses."""

import pytest
from retirement_sim_uk import AssetType, OneOff, apply_one_offs
from retirement_sim_uk.params import empty_pool


class TestApplyOneOffs:
    def setup_method(self):
        self.pools = [empty_pool(), empty_pool()]

    def test_matching_age_lands_in_cash(self):
        apply_one_offs(self.pools, [OneOff("inheritance", 10000, age=70)], (70, 68), 1.0)
        assert self.pools[0][AssetType.CASH] == 10000
        assert self.pools[1][AssetType.CASH] == 0

    def test_other_age_ignored(self):
        apply_one_offs(self.pools, [OneOff("inheritance", 10000, age=70)], (69, 70), 1.0)
        assert self.pools[0][AssetType.CASH] == 0

    def test_inflated(self):
        apply_one_offs(self.pools, [OneOff("gift", 1000, age=66)], (66, None), 1.5)
        assert self.pools[0][AssetType.CASH] == pytest.approx(1500)

    def test_expense_can_go_negative(self):
        self.pools[0][AssetType.CASH] = 2000
        apply_one_offs(self.pools, [OneOff("roof", -5000, age=66)], (66, None), 1.0)
        assert self.pools[0][AssetType.CASH] == -3000

    def test_disabled(self):
        apply_one_offs(self.pools, [OneOff("car", -20000, age=66, enabled=False)], (66, None), 1.0)
        assert self.pools[0][AssetType.CASH] == 0

    def test_spouse_matches_spouse_age(self):
        one_off = OneOff("their bonus", 3000, age=60, belongs_to_spouse=True)
        apply_one_offs(self.pools, [one_off], (62, 60), 1.0)
        assert self.pools[1][AssetType.CASH] == 3000
        assert self.pools[0][AssetType.CASH] == 0

    def test_spouse_one_off_skipped_without_spouse(self):
        one_off = OneOff("their bonus", 3000, age=60, belongs_to_spouse=True)
        apply_one_offs(self.pools, [one_off], (60, None), 1.0)
        assert self.pools[0][AssetType.CASH] == 0
        assert self.pools[1][AssetType.CASH] == 0

    def test_several_same_year(self):
        one_offs = [OneOff("a", 100, age=70), OneOff("b", -40, age=70), OneOff("c", 7, age=71)]
        apply_one_offs(self.pools, one_offs, (70, None), 1.0)
        assert self.pools[0][AssetType.CASH] == 60
