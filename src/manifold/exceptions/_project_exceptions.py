from ._base_exceptions import ManifoldError


class ProjectNotFoundError(ManifoldError):
    """
    Exception raised when a directory holds no manifold project.
    """

    pass


class WorkspaceNotFoundError(ManifoldError):
    """
    Exception raised when a workspace is not found in the project.
    """

    pass
