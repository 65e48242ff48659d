"""manifold vectors - manage vector configurations."""

import typer

from manifold.cli._echo import echo_error, echo_success
from manifold.exceptions import ManifoldError

vectors_app = typer.Typer(
    name="vectors",
    help="Manage vectors",
    add_completion=False,
)


@vectors_app.command("add")
def add(
    name: str = typer.Argument(..., help="Name of the vector to add"),
):
    """Add a new vector configuration."""
    from manifold.project import Project

    try:
        vector = Project.load().add_vector(name)
    except ManifoldError as e:
        echo_error(str(e))
        raise typer.Exit(1)

    echo_success(f"Created vector configuration for '{name}'.")
    typer.echo(f"  Edit {vector.config_path}")
