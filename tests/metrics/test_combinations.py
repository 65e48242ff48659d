"""Tests for the breakout combination generator."""
import pytest

from manifold.metrics.combinations import combination_name, generate_combinations


class TestCombinationName:
    def test_first_verbatim_rest_capitalized(self):
        assert combination_name(("paid", "us")) == "paidUs"

    def test_only_first_character_is_upper_cased(self):
        assert combination_name(("mobile", "usWest")) == "mobileUsWest"

    def test_three_way(self):
        assert combination_name(("paid", "mobile", "us")) == "paidMobileUs"


class TestGenerateCombinations:
    def test_two_groups(self):
        combos = generate_combinations({
            "device": ["mobile", "desktop"],
            "region": ["us", "global"],
        })
        assert [c.name for c in combos] == [
            "mobileUs", "mobileGlobal", "desktopUs", "desktopGlobal",
        ]
        assert combos[0].conditions == ("mobile", "us")

    def test_single_group_has_no_combinations(self):
        assert generate_combinations({"device": ["mobile", "desktop"]}) == []

    def test_no_groups(self):
        assert generate_combinations({}) == []

    @pytest.mark.parametrize("a,b", [(1, 1), (2, 3), (4, 2)])
    def test_pair_count_is_product_of_sizes(self, a, b):
        combos = generate_combinations({
            "left": [f"l{i}" for i in range(a)],
            "right": [f"r{i}" for i in range(b)],
        })
        assert len(combos) == a * b

    def test_never_combines_within_a_group(self):
        breakouts = {
            "device": ["mobile", "desktop", "tablet"],
            "region": ["us", "eu"],
            "plan": ["free", "paid"],
        }
        owner = {c: g for g, conds in breakouts.items() for c in conds}
        for combo in generate_combinations(breakouts):
            groups = [owner[c] for c in combo.conditions]
            assert len(groups) == len(set(groups))

    def test_order_by_subset_size_then_subset_then_product(self):
        combos = generate_combinations({
            "a": ["a1"],
            "b": ["b1", "b2"],
            "c": ["c1"],
        })
        assert [c.conditions for c in combos] == [
            ("a1", "b1"), ("a1", "b2"),
            ("a1", "c1"),
            ("b1", "c1"), ("b2", "c1"),
            ("a1", "b1", "c1"), ("a1", "b2", "c1"),
        ]

    def test_follows_mapping_order_not_sorted(self):
        combos = generate_combinations({"zeta": ["z"], "alpha": ["a"]})
        assert [c.name for c in combos] == ["zA"]

    def test_empty_group_empties_its_products(self):
        combos = generate_combinations({
            "device": ["mobile", "desktop"],
            "region": [],
            "plan": ["paid"],
        })
        # Only device x plan survives; every subset containing region is empty.
        assert [c.name for c in combos] == ["mobilePaid", "desktopPaid"]

    def test_names_are_not_deduplicated(self):
        combos = generate_combinations({"x": ["aB"], "y": ["c"], "z": ["a"], "w": ["bC"]})
        names = [c.name for c in combos]
        assert names.count("aBC") == 2
