from ._base_exceptions import ManifoldError
from ._config_exceptions import (
    ConfigurationError,
    InvalidIdentifierError,
    InvalidOperatorError,
    VectorNotFoundError,
)
from ._generation_exceptions import (
    ConditionCycleError,
    FieldNameCollisionError,
    GenerationError,
    OperandCountError,
    UnknownConditionError,
)
from ._project_exceptions import ProjectNotFoundError, WorkspaceNotFoundError
