"""
Merge SQL for a workspace.

Generates the MERGE statements deployed as BigQuery procedures:
- merge_dimensions: upserts entity dimensions from a user supplied SELECT
- merge_<group>: aggregates one metrics group from its source table
- merge_manifold: joins every metrics table with the dimensions into the
  consolidated Manifold table
"""
import logging
import re
from typing import Optional

from manifold.exceptions import ConfigurationError
from manifold.metrics.models import TimestampConfig
from manifold.metrics.plan import GroupPlan, MetricsPlan
from manifold.utils import metrics_table_name

logger = logging.getLogger(__name__)

_TABLE_PATH_RE = re.compile(r"^[\w.-]+$")

MERGE_KEYS = "ON source.id = target.id AND source.timestamp = target.timestamp"


def quote_table(ref: str) -> str:
    """Backtick a plain table path (project ids may contain dashes)."""
    ref = ref.strip()
    if _TABLE_PATH_RE.match(ref):
        return f"`{ref}`"
    return ref


def lookback_predicate(column: str, days: Optional[int]) -> Optional[str]:
    if not days:
        return None
    return f"{column} >= TIMESTAMP_SUB(CURRENT_TIMESTAMP(), INTERVAL {int(days)} DAY)"


def where_clause(*predicates: Optional[str]) -> str:
    present = [p for p in predicates if p]
    if not present:
        return ""
    if len(present) == 1:
        return f" WHERE {present[0]}"
    return " WHERE " + " AND ".join(f"({p})" for p in present)


def aggregate_struct(plan: GroupPlan) -> str:
    """
    One STRUCT per resolved field of the group, each holding the group's
    aggregates filtered by the field's predicate.
    """
    aggregations = plan.group.aggregations
    parts = []
    for field in plan.fields:
        expr = field.expression
        aggregates = []
        if aggregations.countif:
            aggregates.append(f"COUNTIF({expr}) AS {aggregations.countif}")
        for sumif in aggregations.sumif:
            aggregates.append(f"SUM(IF({expr}, {sumif.field}, 0)) AS {sumif.metric}")
        parts.append(f"STRUCT({', '.join(aggregates)}) AS {field.name}")
    return ",\n        ".join(parts)


class SQLBuilder:
    """
    Builds merge SQL for one workspace.

    ``timestamp`` is the workspace level timestamp configuration; without a
    timestamp field the manifold merge is skipped.
    """

    def __init__(
        self,
        name: str,
        plan: Optional[MetricsPlan] = None,
        timestamp: Optional[TimestampConfig] = None,
        lookback_days: Optional[int] = None,
    ):
        self.name = name
        self.plan = plan if plan is not None else MetricsPlan([])
        self.timestamp = timestamp
        self.lookback_days = lookback_days

    def dimensions_merge_sql(self, source_sql: str) -> str:
        return (
            f"MERGE {self.name}.Dimensions AS TARGET\n"
            f"USING (\n"
            f"{source_sql}\n"
            f") AS source\n"
            f"ON source.id = target.id\n"
            f"WHEN MATCHED THEN UPDATE SET target.dimensions = source.dimensions\n"
            f"WHEN NOT MATCHED THEN INSERT ROW;\n"
        )

    def group_merge_sql(self, plan: GroupPlan) -> str:
        """
        Aggregate one metrics group by (id, truncated timestamp) and merge it
        into the group's table.

        Raises:
            ConfigurationError: If the group has no source or timestamp field.
        """
        group = plan.group
        if not group.source:
            raise ConfigurationError(f"Metrics group '{group.name}' has no 'source' table")
        if not group.timestamp or not group.timestamp.field:
            raise ConfigurationError(
                f"Metrics group '{group.name}' has no timestamp field; set 'timestamp.field' "
                "on the group or the workspace"
            )

        ts_field = group.timestamp.field
        where = where_clause(group.filter, lookback_predicate(ts_field, self.lookback_days))
        return (
            f"MERGE {self.name}.{metrics_table_name(group.name)} AS target\n"
            f"USING (\n"
            f"  SELECT\n"
            f"    id,\n"
            f"    TIMESTAMP_TRUNC({ts_field}, {group.timestamp.interval}) AS timestamp,\n"
            f"    STRUCT(\n"
            f"      STRUCT(\n"
            f"        {aggregate_struct(plan)}\n"
            f"      ) AS {group.name}\n"
            f"    ) AS metrics\n"
            f"  FROM {quote_table(group.source)}{where}\n"
            f"  GROUP BY id, timestamp\n"
            f") AS source\n"
            f"{MERGE_KEYS}\n"
            f"WHEN MATCHED THEN UPDATE SET metrics = source.metrics\n"
            f"WHEN NOT MATCHED THEN INSERT ROW;\n"
        )

    def manifold_merge_sql(self) -> str:
        """
        Merge every metrics table, joined with the dimensions, into the
        Manifold table. Returns "" when there is no timestamp field or no
        metrics group to merge.
        """
        if not self.timestamp or not self.timestamp.field or not self.plan:
            logger.debug(f"Skipping manifold merge for workspace '{self.name}'")
            return ""

        groups = [p.name for p in self.plan.groups]
        metrics_columns = ",\n      ".join(f"{g}.metrics.{g} AS {g}" for g in groups)
        struct_columns = ", ".join(f"Metrics.{g} AS {g}" for g in groups)
        return (
            f"MERGE {self.name}.Manifold AS target\n"
            f"USING (\n"
            f"  WITH Metrics AS (\n"
            f"    SELECT\n"
            f"      id,\n"
            f"      timestamp,\n"
            f"      {metrics_columns}\n"
            f"    FROM {self._metrics_joins(groups)}\n"
            f"  )\n"
            f"\n"
            f"  SELECT\n"
            f"    id,\n"
            f"    timestamp,\n"
            f"    Dimensions.dimensions,\n"
            f"    STRUCT({struct_columns}) AS metrics\n"
            f"  FROM Metrics\n"
            f"  LEFT JOIN {self.name}.Dimensions AS Dimensions USING (id)\n"
            f") AS source\n"
            f"{MERGE_KEYS}\n"
            f"WHEN MATCHED THEN UPDATE SET metrics = source.metrics, dimensions = source.dimensions\n"
            f"WHEN NOT MATCHED THEN INSERT ROW;\n"
        )

    def _metrics_joins(self, groups: list[str]) -> str:
        where = where_clause(lookback_predicate("timestamp", self.lookback_days))
        tables = [
            f"(SELECT * FROM {self.name}.{metrics_table_name(g)}{where}) AS {g}"
            for g in groups
        ]
        first, rest = tables[0], tables[1:]
        return "\n".join(
            [first] + [f"    FULL OUTER JOIN {t} USING (id, timestamp)" for t in rest]
        )
