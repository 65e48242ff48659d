from ._base_exceptions import ManifoldError


class ConfigurationError(ManifoldError):
    """
    Exception raised when a manifold, project or vector configuration is
    missing required keys or is structurally invalid.
    """

    pass


class InvalidIdentifierError(ConfigurationError):
    """
    Exception raised when a configured name (workspace, metrics group, condition,
    aggregation) cannot be used as a BigQuery identifier.
    """

    pass


class InvalidOperatorError(ConfigurationError):
    """Raised when a composite condition names an unsupported boolean operator."""

    pass


class VectorNotFoundError(ConfigurationError):
    """Raised when a workspace references a vector without a configuration file."""

    pass
