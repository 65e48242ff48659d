"""
Project scaffolding and generation.

A project is a directory holding ``project.yml``, a ``vectors/`` directory of
vector configurations and a ``workspaces/`` directory with one subdirectory
(one BigQuery dataset) per workspace.
"""
import logging
import shutil
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from manifold.config import WorkspaceManifest, load_manifest
from manifold.context import Settings, settings as default_settings
from manifold.exceptions import (
    ConfigurationError,
    ProjectNotFoundError,
    WorkspaceNotFoundError,
)
from manifold.metrics.plan import MetricsPlan
from manifold.metrics.schema import SchemaBuilder, to_json
from manifold.metrics.sql import SQLBuilder
from manifold.terraform import ProjectConfiguration, WorkspaceConfiguration
from manifold.validation import validate_dataset_name
from manifold.vectors import VectorService

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
PROJECT_CONFIG_FILE = "project.yml"
TERRAFORM_FILE = "main.tf.json"


class Vector:
    """Describes the entity metrics are calculated for."""

    def __init__(
        self,
        name: str,
        vectors_directory: Path,
        template_path: Path = TEMPLATE_DIR / "vector_template.yml",
    ):
        self.name = name
        self.vectors_directory = Path(vectors_directory)
        self.template_path = Path(template_path)

    @property
    def config_path(self) -> Path:
        return self.vectors_directory / f"{self.name.lower()}.yml"

    def add(self) -> Path:
        self.vectors_directory.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.template_path, self.config_path)
        return self.config_path


class Workspace:
    """
    A single manifold: one dataset with its tables, routines and Terraform.

    Args:
        name: Workspace name, used as the BigQuery dataset id.
        project: Project the workspace belongs to.
        template_path: Template copied to ``manifold.yml`` by ``add``.
    """

    def __init__(
        self,
        name: str,
        project: "Project",
        template_path: Path = TEMPLATE_DIR / "workspace_template.yml",
    ):
        self.name = validate_dataset_name(name)
        self.project = project
        self.template_path = Path(template_path)

    @property
    def directory(self) -> Path:
        return self.project.workspaces_directory / self.name

    @property
    def tables_directory(self) -> Path:
        return self.directory / "tables"

    @property
    def routines_directory(self) -> Path:
        return self.directory / "routines"

    @property
    def manifold_path(self) -> Path:
        return self.directory / "manifold.yml"

    @property
    def terraform_path(self) -> Path:
        return self.directory / TERRAFORM_FILE

    def manifold_exists(self) -> bool:
        return self.manifold_path.is_file()

    def add(self) -> None:
        for directory in (self.tables_directory, self.routines_directory):
            directory.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.template_path, self.manifold_path)

    def load_manifest(self) -> WorkspaceManifest:
        return load_manifest(self.manifold_path, self.name, self.project.settings)

    def plan(self, manifest: Optional[WorkspaceManifest] = None) -> MetricsPlan:
        manifest = manifest or self.load_manifest()
        return MetricsPlan(manifest.metrics.values(), dataset=self.name)

    def build(self, with_terraform: bool = True) -> Dict[Path, str]:
        """
        Generate every artifact of the workspace without touching the disk.

        Returns:
            File contents keyed by their absolute path.

        Raises:
            ManifoldError: If the configuration cannot be generated.
            OSError: If the dimensions merge source cannot be read.
        """
        manifest = self.load_manifest()
        plan = self.plan(manifest)
        dimension_fields = self.project.vector_service.load_dimension_fields(
            list(manifest.vectors)
        )

        artifacts: Dict[Path, str] = {}

        schemas = SchemaBuilder(dimension_fields, plan)
        artifacts[self.tables_directory / "dimensions.json"] = to_json(schemas.dimensions_schema())
        artifacts[self.tables_directory / "manifold.json"] = to_json(schemas.manifold_schema())
        for group in plan.groups:
            path = self.tables_directory / "metrics" / f"{group.name}.json"
            artifacts[path] = to_json(schemas.group_table_schema(group))
            logger.info(f"Generated metrics table schema for '{group.name}'.")

        sql = SQLBuilder(
            self.name, plan, timestamp=manifest.timestamp, lookback_days=manifest.lookback_days
        )
        merge_dimensions = bool(manifest.vectors and manifest.dimensions_source)
        if merge_dimensions:
            source_sql = (self.directory / manifest.dimensions_source).read_text(encoding="utf-8")
            artifacts[self.routines_directory / "merge_dimensions.sql"] = (
                sql.dimensions_merge_sql(source_sql.strip())
            )

        manifold_sql = sql.manifold_merge_sql()
        if manifold_sql:
            artifacts[self.routines_directory / "merge_manifold.sql"] = manifold_sql

        for group in plan.groups:
            path = self.routines_directory / f"merge_{group.name}.sql"
            artifacts[path] = sql.group_merge_sql(group)

        if with_terraform:
            configuration = WorkspaceConfiguration(
                self.name,
                plan,
                partitioning_interval=manifest.partitioning_interval,
                merge_dimensions=merge_dimensions,
                merge_manifold=bool(manifold_sql),
                settings=self.project.settings,
            )
            artifacts[self.terraform_path] = configuration.render()

        return artifacts

    def generate(self, with_terraform: bool = True) -> Optional[Dict[Path, str]]:
        """
        Generate and write the workspace artifacts. Nothing is written unless
        the whole workspace generated successfully.

        Returns:
            The written artifacts, or None when the workspace has no manifold.yml.
        """
        if not self.manifold_exists():
            logger.warning(f"Workspace '{self.name}' has no manifold.yml; skipping.")
            return None

        artifacts = self.build(with_terraform=with_terraform)
        for path, content in artifacts.items():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        logger.info(f"Generated {len(artifacts)} files for workspace '{self.name}'.")
        return artifacts


class Project:
    """
    A manifold project.

    Example:
        project = Project.create("analytics", Path.cwd())
        project.add_workspace("Core")
        project.generate()
    """

    def __init__(
        self,
        name: str,
        directory: Optional[Path] = None,
        settings: Settings = default_settings,
    ):
        self.name = name
        self.directory = Path(directory) if directory is not None else Path.cwd() / name
        self.settings = settings

    @classmethod
    def create(
        cls,
        name: str,
        directory: Optional[Path] = None,
        settings: Settings = default_settings,
    ) -> "Project":
        """Create the project directory, its project.yml and subdirectories."""
        project = cls(name, directory, settings)
        for path in (project.workspaces_directory, project.vectors_directory):
            path.mkdir(parents=True, exist_ok=True)
        project.config_path.write_text(yaml.safe_dump({"name": name}), encoding="utf-8")
        return project

    @classmethod
    def load(
        cls,
        directory: Optional[Path] = None,
        settings: Settings = default_settings,
    ) -> "Project":
        """
        Load the project in ``directory`` (the working directory by default).

        Raises:
            ProjectNotFoundError: If there is no project.yml in the directory.
        """
        directory = Path(directory) if directory is not None else Path.cwd()
        config_path = directory / PROJECT_CONFIG_FILE
        if not config_path.is_file():
            raise ProjectNotFoundError(f"No {PROJECT_CONFIG_FILE} found in {directory}")
        try:
            config = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
        name = config.get("name") if isinstance(config, dict) else None
        return cls(name or directory.name, directory, settings)

    @property
    def config_path(self) -> Path:
        return self.directory / PROJECT_CONFIG_FILE

    @property
    def workspaces_directory(self) -> Path:
        return self.directory / "workspaces"

    @property
    def vectors_directory(self) -> Path:
        return self.directory / "vectors"

    @property
    def terraform_path(self) -> Path:
        return self.directory / TERRAFORM_FILE

    @property
    def vector_service(self) -> VectorService:
        return VectorService(self.vectors_directory)

    @property
    def workspaces(self) -> List[Workspace]:
        if not self.workspaces_directory.is_dir():
            return []
        return [
            Workspace(path.name, self)
            for path in sorted(self.workspaces_directory.iterdir())
            if path.is_dir() and not path.name.startswith(".")
        ]

    def get_workspace(self, name: str) -> Workspace:
        workspace = Workspace(name, self)
        if not workspace.directory.is_dir():
            raise WorkspaceNotFoundError(f"Workspace '{name}' not found in {self.directory}")
        return workspace

    def add_workspace(self, name: str) -> Workspace:
        workspace = Workspace(name, self)
        workspace.add()
        return workspace

    def add_vector(self, name: str) -> Vector:
        vector = Vector(name, self.vectors_directory)
        vector.add()
        return vector

    def generate(self, with_terraform: bool = True, is_submodule: bool = False) -> List[str]:
        """
        Generate every workspace, then the project Terraform entrypoint.

        Returns:
            Names of the workspaces that were generated.
        """
        generated = [
            workspace.name
            for workspace in self.workspaces
            if workspace.generate(with_terraform=with_terraform) is not None
        ]
        if with_terraform:
            ProjectConfiguration(
                generated, is_submodule=is_submodule, settings=self.settings
            ).write(self.terraform_path)
        logger.info(f"Generated {len(generated)} workspace(s) for project '{self.name}'.")
        return generated
