"""
Group field resolution.

A metrics group expands into one field per declared condition followed by one
field per breakout combination. The resolved list is computed once per run and
shared by the schema and SQL builders, which keeps schema RECORD names and SQL
STRUCT names identical.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from manifold.exceptions import FieldNameCollisionError
from manifold.metrics.combinations import generate_combinations
from manifold.metrics.conditions import ConditionCompiler
from manifold.metrics.models import GroupField, MetricsGroup

logger = logging.getLogger(__name__)


def _describe(field: GroupField) -> str:
    if field.is_combination:
        return f"combination of {' x '.join(field.conditions)}"
    return f"condition '{field.name}'"


def resolve_group_fields(
    group: MetricsGroup,
    compiler: Optional[ConditionCompiler] = None,
) -> list[GroupField]:
    """
    Compile every condition and breakout combination of ``group``.

    Raises:
        FieldNameCollisionError: If two fields end up with the same name.
    """
    compiler = compiler or ConditionCompiler(group.conditions)

    fields = [
        GroupField(name=name, expression=compiler.compile(name), conditions=(name,))
        for name in group.conditions
    ]
    for combo in generate_combinations(group.breakout_conditions()):
        fields.append(
            GroupField(
                name=combo.name,
                expression=compiler.conjunction(list(combo.conditions)),
                conditions=combo.conditions,
            )
        )

    seen: dict[str, GroupField] = {}
    for field in fields:
        if field.name in seen:
            raise FieldNameCollisionError(
                f"Metrics group '{group.name}': field '{field.name}' is generated by both "
                f"{_describe(seen[field.name])} and {_describe(field)}"
            )
        seen[field.name] = field
    return fields


@dataclass(frozen=True)
class GroupPlan:
    """A metrics group together with its resolved fields."""
    group: MetricsGroup
    fields: tuple[GroupField, ...]

    @property
    def name(self) -> str:
        return self.group.name

    def is_empty(self) -> bool:
        return not self.fields or self.group.aggregations.is_empty()


class MetricsPlan:
    """
    Resolved fields for every metrics group of a workspace.

    Groups without leaf fields (no aggregations, or nothing to aggregate over)
    are left out of every generated artifact.
    """

    def __init__(self, groups: Iterable[MetricsGroup], dataset: Optional[str] = None):
        self.dataset = dataset
        self._groups: dict[str, GroupPlan] = {}
        self.omitted: list[str] = []

        for group in groups:
            compiler = ConditionCompiler(group.conditions, dataset=dataset)
            plan = GroupPlan(group=group, fields=tuple(resolve_group_fields(group, compiler)))
            if plan.is_empty():
                logger.warning(
                    f"Metrics group '{group.name}' has no aggregations or no conditions; "
                    "it is left out of the generated tables and routines."
                )
                self.omitted.append(group.name)
                continue
            self._groups[group.name] = plan

    @property
    def groups(self) -> list[GroupPlan]:
        return list(self._groups.values())

    def get(self, name: str) -> Optional[GroupPlan]:
        return self._groups.get(name)

    def __bool__(self) -> bool:
        return bool(self._groups)
