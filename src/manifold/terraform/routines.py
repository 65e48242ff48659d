"""
google_bigquery_routine resources of a workspace.

Merge procedures read their SQL from the generated routines directory;
function conditions become BOOL scalar functions named ``is<Name>``.
"""
import logging
from typing import Any, Optional

from manifold.metrics.models import FunctionCondition
from manifold.metrics.plan import MetricsPlan
from manifold.terraform._blocks import PROJECT_ID, dataset_dependency, module_file

logger = logging.getLogger(__name__)

BOOL_RETURN_TYPE = [{"data_type": [{"type_kind": "BOOL"}]}]


class RoutineConfigBuilder:
    def __init__(
        self,
        name: str,
        plan: Optional[MetricsPlan] = None,
        merge_dimensions: bool = False,
        merge_manifold: bool = False,
    ):
        self.name = name
        self.plan = plan if plan is not None else MetricsPlan([])
        self.merge_dimensions = merge_dimensions
        self.merge_manifold = merge_manifold

    def build_routine_configs(self) -> dict[str, dict[str, Any]]:
        routines: dict[str, dict[str, Any]] = {}
        if self.merge_dimensions:
            routines["merge_dimensions"] = self._procedure("merge_dimensions")
        if self.merge_manifold:
            routines["merge_manifold"] = self._procedure("merge_manifold")
        for group in self.plan.groups:
            routine_id = f"merge_{group.name}"
            routines[routine_id] = self._procedure(routine_id)

        for condition in self.function_conditions():
            if condition.routine_id in routines:
                logger.debug(f"Scalar function '{condition.routine_id}' already declared")
                continue
            routines[condition.routine_id] = self._scalar_function(condition)
        return routines

    def function_conditions(self) -> list[FunctionCondition]:
        conditions = []
        for group in self.plan.groups:
            conditions.extend(group.group.function_conditions())
        return conditions

    def _procedure(self, routine_id: str) -> dict[str, Any]:
        return {
            "dataset_id": self.name,
            "project": PROJECT_ID,
            "routine_id": routine_id,
            "routine_type": "PROCEDURE",
            "language": "SQL",
            "definition_body": module_file(f"routines/{routine_id}.sql"),
            "depends_on": dataset_dependency(self.name),
        }

    def _scalar_function(self, condition: FunctionCondition) -> dict[str, Any]:
        return {
            "dataset_id": self.name,
            "project": PROJECT_ID,
            "routine_id": condition.routine_id,
            "routine_type": "SCALAR_FUNCTION",
            "language": "SQL",
            "definition_body": condition.body,
            "depends_on": dataset_dependency(self.name),
            "arguments": [
                {"name": arg, "data_type": [{"type_kind": kind}]}
                for arg, kind in condition.args.items()
            ],
            "return_type": BOOL_RETURN_TYPE,
        }
