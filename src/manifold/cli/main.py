"""
Manifold CLI - Main entry point

Generates BigQuery schemas, merge routines and Terraform for dimensioned metrics.

Usage:
    manifold init <name>              Create a new project
    manifold add <workspace>          Add a workspace to the current project
    manifold vectors add <name>       Add a vector configuration
    manifold generate                 Generate every workspace of the project
    manifold describe <workspace>     Show the resolved metrics groups
    manifold version                  Show version information
"""

import sys
from pathlib import Path

import typer

from manifold.cli._echo import echo_error, echo_info, echo_success, echo_warning
from manifold.cli.vectors import vectors_app
from manifold.exceptions import ManifoldError

app = typer.Typer(
    name="manifold",
    help="Generate BigQuery schemas, merge routines and Terraform for dimensioned metrics",
    add_completion=False,
)
app.add_typer(vectors_app, name="vectors")


def _get_version() -> str:
    """Get package version."""
    from manifold import __version__
    return __version__


@app.command()
def version():
    """Show version information."""
    typer.echo(f"Manifold version: {_get_version()}")
    typer.echo(f"Python version: {sys.version.split()[0]}")


@app.command()
def init(
    name: str = typer.Argument(..., help="Name of the project"),
    path: Path = typer.Option(
        Path("."), "--path", "-p",
        help="Directory to create the project in"
    ),
):
    """Create a new project with workspaces and vectors directories."""
    from manifold.project import Project

    try:
        project = Project.create(name, path / name)
    except (ManifoldError, OSError) as e:
        echo_error(f"Failed to create project: {e}")
        raise typer.Exit(1)

    echo_success(f"Created umbrella project '{name}' with workspaces and vectors directories.")
    typer.echo(f"  Project directory: {project.directory}")


@app.command()
def add(
    name: str = typer.Argument(..., help="Name of the workspace to add"),
):
    """Add a new workspace to the current project."""
    from manifold.project import Project

    try:
        workspace = Project.load().add_workspace(name)
    except ManifoldError as e:
        echo_error(str(e))
        raise typer.Exit(1)

    echo_success(f"Added workspace '{name}' with tables and routines directories.")
    typer.echo(f"  Edit {workspace.manifold_path}")


@app.command()
def generate(
    submodule: bool = typer.Option(
        False, "--submodule/--no-submodule",
        help="Generate the project Terraform as a module of a larger configuration"
    ),
    terraform: bool = typer.Option(
        True, "--terraform/--no-terraform",
        help="Generate Terraform configurations"
    ),
):
    """Generate schemas, routines and Terraform for every workspace."""
    from manifold.project import Project

    try:
        project = Project.load()
        workspaces = project.generate(with_terraform=terraform, is_submodule=submodule)
    except ManifoldError as e:
        echo_error(f"Generation failed: {e}")
        raise typer.Exit(1)

    if not workspaces:
        echo_warning("No workspace with a manifold.yml found.")
        return
    for name in workspaces:
        echo_info(f"Generated workspace '{name}'")
    echo_success(f"Generated {len(workspaces)} workspace(s) for project '{project.name}'.")


@app.command()
def describe(
    name: str = typer.Argument(..., help="Name of the workspace"),
):
    """Show the fields each metrics group of a workspace resolves to."""
    from tabulate import tabulate

    from manifold.project import Project

    try:
        workspace = Project.load().get_workspace(name)
        if not workspace.manifold_exists():
            echo_error(f"Workspace '{name}' has no manifold.yml")
            raise typer.Exit(1)
        plan = workspace.plan()
    except ManifoldError as e:
        echo_error(str(e))
        raise typer.Exit(1)

    rows = []
    for group in plan.groups:
        combinations = [f for f in group.fields if f.is_combination]
        rows.append({
            "Group": group.name,
            "Conditions": len(group.fields) - len(combinations),
            "Combinations": len(combinations),
            "Aggregations": ", ".join(group.group.aggregations.metric_names),
        })

    if not rows:
        typer.echo("No metrics groups found.")
    else:
        typer.echo(tabulate(rows, headers="keys", tablefmt="simple"))
    for omitted in plan.omitted:
        echo_warning(f"Metrics group '{omitted}' is omitted: it has no aggregations or no conditions")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
