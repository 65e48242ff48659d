"""
BigQuery table schemas for a workspace.

Builds the column trees of the Dimensions table, the consolidated Manifold
table and each per-group metrics table.
"""
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from manifold.metrics.plan import GroupPlan, MetricsPlan


class FieldType(str, Enum):
    STRING = "STRING"
    TIMESTAMP = "TIMESTAMP"
    RECORD = "RECORD"
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"


class FieldMode(str, Enum):
    REQUIRED = "REQUIRED"
    NULLABLE = "NULLABLE"
    REPEATED = "REPEATED"


@dataclass(slots=True)
class SchemaField:
    """A BigQuery column. RECORD columns carry nested ``fields``."""
    name: str
    type: str
    mode: Optional[str] = FieldMode.NULLABLE.value
    fields: Optional[list["SchemaField"]] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "type": self.type}
        if self.mode:
            data["mode"] = self.mode
        if self.fields is not None:
            data["fields"] = [f.to_dict() for f in self.fields]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SchemaField":
        nested = data.get("fields")
        return cls(
            name=data["name"],
            type=data["type"],
            mode=data.get("mode"),
            fields=[cls.from_dict(f) for f in nested] if nested is not None else None,
        )

    def get_field(self, name: str) -> Optional["SchemaField"]:
        """Find a direct child by name."""
        for f in self.fields or []:
            if f.name == name:
                return f
        return None


def _record(name: str, fields: list[SchemaField], mode: FieldMode) -> SchemaField:
    return SchemaField(name=name, type=FieldType.RECORD.value, mode=mode.value, fields=fields)


def _id_field() -> SchemaField:
    return SchemaField(name="id", type=FieldType.STRING.value, mode=FieldMode.REQUIRED.value)


def _timestamp_field() -> SchemaField:
    return SchemaField(
        name="timestamp", type=FieldType.TIMESTAMP.value, mode=FieldMode.REQUIRED.value
    )


def aggregation_fields(plan: GroupPlan) -> list[SchemaField]:
    """Leaf columns shared by every condition and combination RECORD of a group."""
    return [
        SchemaField(name=metric, type=FieldType.INTEGER.value, mode=FieldMode.NULLABLE.value)
        for metric in plan.group.aggregations.metric_names
    ]


def group_field(plan: GroupPlan) -> SchemaField:
    """The RECORD holding one metrics group: one child RECORD per resolved field."""
    return _record(
        plan.name,
        [_record(f.name, aggregation_fields(plan), FieldMode.NULLABLE) for f in plan.fields],
        FieldMode.NULLABLE,
    )


class SchemaBuilder:
    """
    Builds table schemas from flattened dimension fields and a metrics plan.
    """

    def __init__(
        self,
        dimension_fields: Iterable[SchemaField],
        plan: Optional[MetricsPlan] = None,
    ):
        self.dimension_fields = list(dimension_fields)
        self.plan = plan if plan is not None else MetricsPlan([])

    def dimensions_schema(self) -> list[SchemaField]:
        return [
            _id_field(),
            _record("dimensions", self.dimension_fields, FieldMode.REQUIRED),
        ]

    def manifold_schema(self) -> list[SchemaField]:
        return [
            _id_field(),
            _timestamp_field(),
            _record("dimensions", self.dimension_fields, FieldMode.REQUIRED),
            _record("metrics", self.metrics_fields(), FieldMode.REQUIRED),
        ]

    def metrics_fields(self) -> list[SchemaField]:
        return [group_field(p) for p in self.plan.groups]

    def group_table_schema(self, plan: GroupPlan) -> list[SchemaField]:
        """Schema of the physical table of one metrics group."""
        return [
            _id_field(),
            _timestamp_field(),
            _record("metrics", [group_field(plan)], FieldMode.REQUIRED),
        ]


def to_json(schema: list[SchemaField]) -> str:
    """Pretty-printed schema file contents, with a trailing newline."""
    return json.dumps([f.to_dict() for f in schema], indent=2) + "\n"
