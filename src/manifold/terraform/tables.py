"""google_bigquery_table resources of a workspace."""
from typing import Any, Optional

from manifold.metrics.plan import MetricsPlan
from manifold.terraform._blocks import PROJECT_ID, dataset_dependency, module_file
from manifold.utils import metrics_table_name


class TableConfigBuilder:
    """
    Builds one table resource per generated schema file: Dimensions,
    Manifold and one metrics table per (non-empty) metrics group.
    """

    def __init__(
        self,
        name: str,
        plan: Optional[MetricsPlan] = None,
        partitioning_interval: Optional[str] = None,
    ):
        self.name = name
        self.plan = plan if plan is not None else MetricsPlan([])
        self.partitioning_interval = partitioning_interval

    def build_table_configs(self) -> dict[str, dict[str, Any]]:
        configs = {
            "dimensions": self._table_config("Dimensions", "dimensions.json", partitioned=False),
            "manifold": self._table_config("Manifold", "manifold.json"),
        }
        for group in self.plan.groups:
            table_id = metrics_table_name(group.name)
            configs[table_id.lower()] = self._table_config(
                table_id, f"metrics/{group.name}.json"
            )
        return configs

    def _table_config(
        self, table_id: str, schema_path: str, partitioned: bool = True
    ) -> dict[str, Any]:
        config: dict[str, Any] = {
            "dataset_id": self.name,
            "project": PROJECT_ID,
            "table_id": table_id,
            "schema": module_file(f"tables/{schema_path}"),
            "depends_on": dataset_dependency(self.name),
        }
        if partitioned and self.partitioning_interval:
            config["time_partitioning"] = {
                "type": self.partitioning_interval,
                "field": "timestamp",
            }
        return config
