"""
Metrics data models.

Canonical, immutable representation of the metrics section of a workspace
configuration: conditions (raw, composite, function), breakouts, aggregations
and metrics groups. Every configuration dialect is translated into these
dataclasses by ``manifold.config.loader`` before anything is compiled.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from manifold.utils import to_routine_id


# ── Conditions ──────────────────────────────────────────────────────────────

class Operator(Enum):
    """Boolean operators available to composite conditions."""
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    NAND = "NAND"
    NOR = "NOR"
    XOR = "XOR"
    XNOR = "XNOR"

    @classmethod
    def names(cls) -> list[str]:
        return [op.value for op in cls]


@dataclass(frozen=True, slots=True)
class RawCondition:
    """A named SQL predicate used verbatim."""
    name: str
    expression: str


@dataclass(frozen=True, slots=True)
class CompositeCondition:
    """A condition folded from other named conditions with a boolean operator."""
    name: str
    operator: Operator
    operands: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class FunctionCondition:
    """
    A parameterized predicate deployed as a SQL scalar function.

    ``args`` maps argument names to BigQuery type kinds, in call order.
    """
    name: str
    body: str
    args: dict[str, str] = field(default_factory=dict)

    @property
    def routine_id(self) -> str:
        return to_routine_id(self.name)


Condition = Union[RawCondition, CompositeCondition, FunctionCondition]


# ── Breakouts & Aggregations ────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class Breakout:
    """One dimension of analysis: an ordered list of condition names."""
    name: str
    conditions: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class SumIf:
    metric: str
    field: str


@dataclass(frozen=True, slots=True)
class Aggregations:
    """Aggregates computed for every condition and combination of a group."""
    countif: Optional[str] = None
    sumif: tuple[SumIf, ...] = ()

    @property
    def metric_names(self) -> list[str]:
        names = [self.countif] if self.countif else []
        names.extend(s.metric for s in self.sumif)
        return names

    def is_empty(self) -> bool:
        return not self.countif and not self.sumif


# ── Metrics Group ───────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class TimestampConfig:
    field: Optional[str] = None
    interval: str = "DAY"


@dataclass(frozen=True, slots=True)
class MetricsGroup:
    """
    A bundle of conditions, breakouts and aggregations sharing one source
    table. Materialized as ``<Group>Metrics`` and folded into the manifold.
    """
    name: str
    source: Optional[str] = None
    filter: Optional[str] = None
    timestamp: Optional[TimestampConfig] = None
    conditions: dict[str, Condition] = field(default_factory=dict)
    breakouts: dict[str, Breakout] = field(default_factory=dict)
    aggregations: Aggregations = field(default_factory=Aggregations)

    def function_conditions(self) -> list[FunctionCondition]:
        """Conditions that need a scalar function routine deployed."""
        return [
            c for c in self.conditions.values()
            if isinstance(c, FunctionCondition) and c.args
        ]

    def breakout_conditions(self) -> dict[str, list[str]]:
        """Breakout group name -> ordered condition names."""
        return {name: list(b.conditions) for name, b in self.breakouts.items()}


# ── Generated fields ────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class CombinationField:
    """Conjunction of one condition from each of several breakout groups."""
    conditions: tuple[str, ...]
    name: str


@dataclass(frozen=True, slots=True)
class GroupField:
    """
    A metric slice of a group: the RECORD name in the schema and the STRUCT
    name in the merge SQL, plus the predicate its aggregates are filtered by.
    """
    name: str
    expression: str
    conditions: tuple[str, ...]

    @property
    def is_combination(self) -> bool:
        return len(self.conditions) > 1
