"""
Terraform JSON configurations.

A workspace configuration declares the dataset, tables and routines of one
workspace; the project configuration wires every workspace in as a module.
"""
import json
from pathlib import Path
from typing import Any, Iterable, Optional

from manifold.context import Settings, settings as default_settings
from manifold.metrics.plan import MetricsPlan
from manifold.terraform._blocks import PROJECT_ID, variables_block
from manifold.terraform.routines import RoutineConfigBuilder
from manifold.terraform.tables import TableConfigBuilder


class Configuration:
    """Base class of the generated ``main.tf.json`` files."""

    def as_json(self) -> dict[str, Any]:
        raise NotImplementedError(f"{type(self).__name__} must implement as_json()")

    def render(self) -> str:
        return json.dumps(self.as_json(), indent=2) + "\n"

    def write(self, path: Path) -> None:
        Path(path).write_text(self.render(), encoding="utf-8")


class ProjectConfiguration(Configuration):
    """
    Project entrypoint: one module per workspace. Submodule configurations
    leave the terraform and provider blocks to the including configuration.
    """

    def __init__(
        self,
        workspaces: Iterable[str],
        is_submodule: bool = False,
        settings: Settings = default_settings,
    ):
        self.workspaces = list(workspaces)
        self.is_submodule = is_submodule
        self.settings = settings

    def as_json(self) -> dict[str, Any]:
        config: dict[str, Any] = {}
        if not self.is_submodule:
            config["terraform"] = {
                "required_providers": {
                    "google": {
                        "source": "hashicorp/google",
                        "version": self.settings.google_provider_version,
                    }
                }
            }
            config["provider"] = {"google": {"project": PROJECT_ID}}
        config["variable"] = variables_block()
        if self.workspaces:
            config["module"] = {
                name: {"source": f"./workspaces/{name}", "project_id": PROJECT_ID}
                for name in self.workspaces
            }
        return config


class WorkspaceConfiguration(Configuration):
    """
    Resources of one workspace.

    Args:
        name: Workspace name, used as the dataset id.
        plan: Resolved metrics groups of the workspace.
        partitioning_interval: Time partitioning of non-dimension tables.
        merge_dimensions: Whether a merge_dimensions procedure was generated.
        merge_manifold: Whether a merge_manifold procedure was generated.
    """

    def __init__(
        self,
        name: str,
        plan: Optional[MetricsPlan] = None,
        partitioning_interval: Optional[str] = None,
        merge_dimensions: bool = False,
        merge_manifold: bool = False,
        settings: Settings = default_settings,
    ):
        self.name = name
        self.plan = plan if plan is not None else MetricsPlan([])
        self.partitioning_interval = partitioning_interval
        self.merge_dimensions = merge_dimensions
        self.merge_manifold = merge_manifold
        self.settings = settings

    def as_json(self) -> dict[str, Any]:
        resources = {
            "google_bigquery_dataset": self._dataset_config(),
            "google_bigquery_table": TableConfigBuilder(
                self.name, self.plan, self.partitioning_interval
            ).build_table_configs(),
            "google_bigquery_routine": RoutineConfigBuilder(
                self.name,
                self.plan,
                merge_dimensions=self.merge_dimensions,
                merge_manifold=self.merge_manifold,
            ).build_routine_configs(),
        }
        return {
            "variable": variables_block(),
            "resource": {kind: block for kind, block in resources.items() if block},
        }

    def _dataset_config(self) -> dict[str, Any]:
        return {
            self.name: {
                "dataset_id": self.name,
                "project": PROJECT_ID,
                "location": self.settings.dataset_location,
            }
        }
