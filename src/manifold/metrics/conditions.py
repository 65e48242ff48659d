"""
Condition expression compiler.

Resolves a named condition of a metrics group into a SQL boolean expression.
Composite conditions are resolved depth-first through their operands, so any
operand is compiled before the condition that uses it.
"""
import logging
from typing import Mapping, Optional

from manifold.exceptions import (
    ConditionCycleError,
    OperandCountError,
    UnknownConditionError,
)
from manifold.metrics.models import (
    CompositeCondition,
    Condition,
    FunctionCondition,
    Operator,
    RawCondition,
)

logger = logging.getLogger(__name__)


def _check_operand_count(condition: CompositeCondition) -> None:
    count = len(condition.operands)
    op = condition.operator
    if op == Operator.NOT and count != 1:
        raise OperandCountError(
            f"Condition '{condition.name}': NOT takes exactly one operand, got {count}"
        )
    if op in (Operator.XOR, Operator.XNOR) and count != 2:
        raise OperandCountError(
            f"Condition '{condition.name}': {op.value} takes exactly two operands, got {count}"
        )
    if count == 0:
        raise OperandCountError(
            f"Condition '{condition.name}': {op.value} needs at least one operand"
        )


def group(expr: str) -> str:
    """Bracket an expression so operator precedence cannot rebind it."""
    return f"({expr})"


def fold(operator: Operator, operands: list[str]) -> str:
    """
    Combine compiled operand expressions with a boolean operator. Operands
    are expected to be parenthesized already, see ``group``.
    """
    match operator:
        case Operator.AND | Operator.OR:
            return f" {operator.value} ".join(operands)
        case Operator.NOT:
            return f"NOT {operands[0]}"
        case Operator.NAND:
            return f"NOT ({' AND '.join(operands)})"
        case Operator.NOR:
            return f"NOT ({' OR '.join(operands)})"
        case Operator.XOR:
            e1, e2 = operands
            return f"({e1} AND NOT {e2}) OR (NOT {e1} AND {e2})"
        case Operator.XNOR:
            e1, e2 = operands
            return f"({e1} AND {e2}) OR (NOT {e1} AND NOT {e2})"


class ConditionCompiler:
    """
    Compiles the conditions of one metrics group to SQL.

    Function conditions with arguments compile to a call of their deployed
    scalar function, qualified with ``dataset`` when one is given.
    """

    def __init__(
        self,
        conditions: Mapping[str, Condition],
        dataset: Optional[str] = None,
    ):
        self.conditions = conditions
        self.dataset = dataset
        self._compiled: dict[str, str] = {}

    def compile(self, name: str) -> str:
        """
        Compile the named condition.

        Raises:
            UnknownConditionError: If the name, or an operand, is not defined.
            ConditionCycleError: If composite conditions reference each other.
            OperandCountError: If an operator gets the wrong number of operands.
        """
        return self._compile(name, [])

    def compile_operand(self, name: str) -> str:
        """Compile a condition for use inside a larger boolean expression."""
        return group(self.compile(name))

    def conjunction(self, names: list[str]) -> str:
        """AND together several conditions, e.g. for a breakout combination."""
        return " AND ".join(self.compile_operand(n) for n in names)

    def _compile(self, name: str, path: list[str]) -> str:
        if name in self._compiled:
            return self._compiled[name]
        if name in path:
            cycle = path[path.index(name):] + [name]
            raise ConditionCycleError(
                f"Circular condition reference detected: {' -> '.join(cycle)}"
            )

        condition = self.conditions.get(name)
        if condition is None:
            referrer = f" (referenced by '{path[-1]}')" if path else ""
            raise UnknownConditionError(f"Unknown condition '{name}'{referrer}")

        if isinstance(condition, RawCondition):
            expr = condition.expression
        elif isinstance(condition, FunctionCondition):
            expr = self._function_call(condition)
        else:
            _check_operand_count(condition)
            operands = [group(self._compile(o, path + [name])) for o in condition.operands]
            expr = fold(condition.operator, operands)

        logger.debug(f"Compiled condition '{name}': {expr}")
        self._compiled[name] = expr
        return expr

    def _function_call(self, condition: FunctionCondition) -> str:
        if not condition.args:
            return condition.body
        routine = condition.routine_id
        if self.dataset:
            routine = f"{self.dataset}.{routine}"
        return f"{routine}({', '.join(condition.args)})"
