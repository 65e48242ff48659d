from .configuration import Configuration, ProjectConfiguration, WorkspaceConfiguration
from .routines import RoutineConfigBuilder
from .tables import TableConfigBuilder

__all__ = [
    "Configuration",
    "ProjectConfiguration",
    "WorkspaceConfiguration",
    "RoutineConfigBuilder",
    "TableConfigBuilder",
]
