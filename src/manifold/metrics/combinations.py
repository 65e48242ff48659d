"""
Breakout combination generator.

Crosses the conditions of different breakout groups: for every subset of two
or more groups, every way of picking one condition per group becomes a
combination field. Conditions of one group are never combined with each other.
"""
from itertools import combinations, product
from typing import Iterable, Mapping, Sequence

from manifold.metrics.models import CombinationField
from manifold.utils import capitalize_first


def combination_name(conditions: Sequence[str]) -> str:
    """
    Lower camel case join: the first name verbatim, later ones capitalized.
    E.g. (paid, us) -> paidUs
    """
    first, *rest = conditions
    return first + "".join(capitalize_first(c) for c in rest)


def generate_combinations(
    breakouts: Mapping[str, Iterable[str]],
) -> list[CombinationField]:
    """
    Enumerate every cross-group combination of breakout conditions.

    Ordered by subset size, then subset order (following the mapping order of
    ``breakouts``), then product order with the last group varying fastest.
    A group without conditions empties every product it takes part in.

    Names are not deduplicated here; see ``resolve_group_fields``.
    """
    groups = {name: list(conds) for name, conds in breakouts.items()}
    if len(groups) < 2:
        return []

    fields: list[CombinationField] = []
    for size in range(2, len(groups) + 1):
        for subset in combinations(groups, size):
            for picked in product(*(groups[g] for g in subset)):
                fields.append(
                    CombinationField(conditions=picked, name=combination_name(picked))
                )
    return fields
