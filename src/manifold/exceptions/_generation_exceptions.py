from ._base_exceptions import ManifoldError


class GenerationError(ManifoldError):
    """
    Exception raised when a loaded configuration cannot be compiled into
    schemas or SQL.
    """

    pass


class OperandCountError(GenerationError):
    """Raised when a boolean operator receives the wrong number of operands."""

    pass


class UnknownConditionError(GenerationError):
    """Raised when a composite condition references an undefined condition."""

    pass


class ConditionCycleError(GenerationError):
    """Raised when composite conditions reference each other in a cycle."""

    pass


class FieldNameCollisionError(GenerationError):
    """
    Raised when two generated metric fields of one metrics group end up with
    the same name.
    """

    pass
