"""Tests for Manifold CLI commands."""
import json
from unittest import mock

import pytest
from typer.testing import CliRunner

from manifold.cli.main import app
from manifold.exceptions import ConfigurationError

runner = CliRunner()


@pytest.fixture
def in_project(project, monkeypatch):
    monkeypatch.chdir(project.directory)
    return project


class TestVersionCommand:
    def test_version_displays_manifold_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "Manifold version: 0.1.0" in result.stdout
        assert "Python version:" in result.stdout


class TestInitCommand:
    def test_init_creates_project(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["init", "analytics"])
        assert result.exit_code == 0
        assert "Created umbrella project 'analytics'" in result.stdout
        assert (tmp_path / "analytics" / "project.yml").is_file()
        assert (tmp_path / "analytics" / "workspaces").is_dir()
        assert (tmp_path / "analytics" / "vectors").is_dir()

    def test_init_with_path(self, tmp_path):
        result = runner.invoke(app, ["init", "analytics", "--path", str(tmp_path)])
        assert result.exit_code == 0
        assert (tmp_path / "analytics" / "project.yml").is_file()

    def test_init_delegates_to_project(self, tmp_path):
        with mock.patch("manifold.project.Project.create") as create:
            create.return_value.directory = tmp_path / "analytics"
            result = runner.invoke(app, ["init", "analytics", "--path", str(tmp_path)])
        assert result.exit_code == 0
        create.assert_called_once_with("analytics", tmp_path / "analytics")


class TestAddCommand:
    def test_add_workspace(self, in_project):
        result = runner.invoke(app, ["add", "Ads"])
        assert result.exit_code == 0
        assert "Added workspace 'Ads'" in result.stdout
        assert (in_project.workspaces_directory / "Ads" / "manifold.yml").is_file()

    def test_add_outside_a_project(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["add", "Ads"])
        assert result.exit_code == 1
        assert "No project.yml found" in result.stdout

    def test_add_invalid_name(self, in_project):
        result = runner.invoke(app, ["add", "my-workspace"])
        assert result.exit_code == 1
        assert "Invalid dataset name" in result.stdout


class TestVectorsCommand:
    def test_add_vector(self, in_project):
        result = runner.invoke(app, ["vectors", "add", "Page"])
        assert result.exit_code == 0
        assert "Created vector configuration for 'Page'." in result.stdout
        assert (in_project.vectors_directory / "page.yml").is_file()


class TestGenerateCommand:
    def test_generate(self, in_project):
        result = runner.invoke(app, ["generate"])
        assert result.exit_code == 0
        assert "Generated workspace 'Core'" in result.stdout
        config = json.loads(in_project.terraform_path.read_text())
        assert "provider" in config

    def test_generate_submodule(self, in_project):
        result = runner.invoke(app, ["generate", "--submodule"])
        assert result.exit_code == 0
        config = json.loads(in_project.terraform_path.read_text())
        assert "provider" not in config

    def test_generate_passes_flags(self, in_project):
        with mock.patch("manifold.project.Project.generate", return_value=["Core"]) as generate:
            result = runner.invoke(app, ["generate", "--no-terraform", "--submodule"])
        assert result.exit_code == 0
        generate.assert_called_once_with(with_terraform=False, is_submodule=True)

    def test_generate_failure(self, in_project):
        error = ConfigurationError("Metrics group 'renders' has no 'source' table")
        with mock.patch("manifold.project.Project.generate", side_effect=error):
            result = runner.invoke(app, ["generate"])
        assert result.exit_code == 1
        assert "Generation failed: Metrics group 'renders' has no 'source' table" in result.stdout

    def test_generate_without_workspaces(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner.invoke(app, ["init", "analytics", "--path", str(tmp_path)])
        monkeypatch.chdir(tmp_path / "analytics")
        result = runner.invoke(app, ["generate"])
        assert result.exit_code == 0
        assert "No workspace with a manifold.yml found." in result.stdout


class TestDescribeCommand:
    def test_describe(self, in_project):
        result = runner.invoke(app, ["describe", "Core"])
        assert result.exit_code == 0
        assert "Group" in result.stdout
        assert "renders" in result.stdout
        assert "renderCount, renderDuration" in result.stdout

    def test_describe_unknown_workspace(self, in_project):
        result = runner.invoke(app, ["describe", "Ads"])
        assert result.exit_code == 1
        assert "Workspace 'Ads' not found" in result.stdout

    def test_describe_omitted_group(self, in_project):
        path = in_project.workspaces_directory / "Core" / "manifold.yml"
        path.write_text(path.read_text().replace("countif: renderCount", "countif:").replace(
            "        renderDuration:\n          field: duration\n", ""
        ).replace("      sumif:\n", ""))
        result = runner.invoke(app, ["describe", "Core"])
        assert result.exit_code == 0
        assert "No metrics groups found." in result.stdout
        assert "Metrics group 'renders' is omitted" in result.stdout
