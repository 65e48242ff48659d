__version__ = "0.1.0"

# Export the generation engine
from .metrics import (
    ConditionCompiler,
    MetricsPlan,
    SchemaBuilder,
    SchemaField,
    SQLBuilder,
    generate_combinations,
)

# Export the project API
from .project import Project, Vector, Workspace

# Export exceptions
from .exceptions import (
    ConfigurationError,
    GenerationError,
    ManifoldError,
)

__all__ = [
    "__version__",
    # Generation engine
    "ConditionCompiler",
    "MetricsPlan",
    "SchemaBuilder",
    "SchemaField",
    "SQLBuilder",
    "generate_combinations",
    # Project API
    "Project",
    "Vector",
    "Workspace",
    # Exceptions
    "ConfigurationError",
    "GenerationError",
    "ManifoldError",
]
