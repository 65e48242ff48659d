"""Tests for the condition expression compiler."""
import pytest

from manifold.exceptions import (
    ConditionCycleError,
    OperandCountError,
    UnknownConditionError,
)
from manifold.metrics.conditions import ConditionCompiler, fold
from manifold.metrics.models import (
    CompositeCondition,
    FunctionCondition,
    Operator,
    RawCondition,
)


def raw(name, expression):
    return RawCondition(name=name, expression=expression)


def composite(name, operator, *operands):
    return CompositeCondition(name=name, operator=Operator(operator), operands=tuple(operands))


def compiler_for(*conditions, dataset=None):
    return ConditionCompiler({c.name: c for c in conditions}, dataset=dataset)


BASE = (
    raw("paid", "plan = 'paid'"),
    raw("us", "country = 'US'"),
    raw("mobile", "device = 'mobile'"),
)


# ── Raw conditions ──────────────────────────────────────────────────────────


class TestRawConditions:
    def test_raw_expression_is_returned_verbatim(self):
        compiler = compiler_for(raw("active", "status = 'active' AND deleted_at IS NULL"))
        assert compiler.compile("active") == "status = 'active' AND deleted_at IS NULL"

    def test_unknown_condition(self):
        with pytest.raises(UnknownConditionError, match="Unknown condition 'missing'"):
            compiler_for(*BASE).compile("missing")


# ── Operators ───────────────────────────────────────────────────────────────


class TestOperators:
    def test_and(self):
        compiler = compiler_for(*BASE, composite("paidUs", "AND", "paid", "us"))
        assert compiler.compile("paidUs") == "(plan = 'paid') AND (country = 'US')"

    def test_or_with_three_operands(self):
        compiler = compiler_for(*BASE, composite("any", "OR", "paid", "us", "mobile"))
        assert (
            compiler.compile("any")
            == "(plan = 'paid') OR (country = 'US') OR (device = 'mobile')"
        )

    def test_not(self):
        compiler = compiler_for(*BASE, composite("free", "NOT", "paid"))
        assert compiler.compile("free") == "NOT (plan = 'paid')"

    def test_nand(self):
        compiler = compiler_for(*BASE, composite("n", "NAND", "paid", "us"))
        assert compiler.compile("n") == "NOT ((plan = 'paid') AND (country = 'US'))"

    def test_nor(self):
        compiler = compiler_for(*BASE, composite("n", "NOR", "paid", "us"))
        assert compiler.compile("n") == "NOT ((plan = 'paid') OR (country = 'US'))"

    def test_xor(self):
        compiler = compiler_for(*BASE, composite("x", "XOR", "paid", "us"))
        assert compiler.compile("x") == (
            "((plan = 'paid') AND NOT (country = 'US'))"
            " OR (NOT (plan = 'paid') AND (country = 'US'))"
        )

    def test_xnor(self):
        compiler = compiler_for(*BASE, composite("x", "XNOR", "paid", "us"))
        assert compiler.compile("x") == (
            "((plan = 'paid') AND (country = 'US'))"
            " OR (NOT (plan = 'paid') AND NOT (country = 'US'))"
        )

    @pytest.mark.parametrize("operator", ["XOR", "XNOR"])
    @pytest.mark.parametrize("count", [1, 3])
    def test_xor_family_needs_two_operands(self, operator, count):
        operands = ["paid", "us", "mobile"][:count]
        compiler = compiler_for(*BASE, composite("x", operator, *operands))
        with pytest.raises(OperandCountError, match="exactly two operands"):
            compiler.compile("x")

    def test_not_needs_one_operand(self):
        compiler = compiler_for(*BASE, composite("n", "NOT", "paid", "us"))
        with pytest.raises(OperandCountError, match="exactly one operand"):
            compiler.compile("n")

    def test_empty_operands(self):
        compiler = compiler_for(*BASE, composite("n", "AND"))
        with pytest.raises(OperandCountError):
            compiler.compile("n")

    def test_fold_and(self):
        assert fold(Operator.AND, ["a", "b"]) == "a AND b"

    @pytest.mark.parametrize("operator", list(Operator))
    def test_fold_handles_every_operator(self, operator):
        operands = ["(a)"] if operator is Operator.NOT else ["(a)", "(b)"]
        assert "(a)" in fold(operator, operands)


# ── Nesting ─────────────────────────────────────────────────────────────────


class TestNesting:
    def test_composite_operands_are_parenthesized(self):
        compiler = compiler_for(
            *BASE,
            composite("paidOrUs", "OR", "paid", "us"),
            composite("target", "AND", "paidOrUs", "mobile"),
        )
        assert compiler.compile("target") == (
            "((plan = 'paid') OR (country = 'US')) AND (device = 'mobile')"
        )

    def test_not_of_composite(self):
        compiler = compiler_for(
            *BASE,
            composite("paidUs", "AND", "paid", "us"),
            composite("other", "NOT", "paidUs"),
        )
        assert compiler.compile("other") == "NOT ((plan = 'paid') AND (country = 'US'))"

    def test_unknown_operand_names_referrer(self):
        compiler = compiler_for(*BASE, composite("x", "AND", "paid", "ghost"))
        with pytest.raises(UnknownConditionError, match="referenced by 'x'"):
            compiler.compile("x")

    def test_cycle_detected(self):
        compiler = compiler_for(
            composite("a", "AND", "b"),
            composite("b", "OR", "a"),
        )
        with pytest.raises(ConditionCycleError, match="a -> b -> a"):
            compiler.compile("a")

    def test_self_reference(self):
        compiler = compiler_for(composite("a", "NOT", "a"))
        with pytest.raises(ConditionCycleError):
            compiler.compile("a")

    def test_shared_operand_compiles_consistently(self):
        compiler = compiler_for(
            *BASE,
            composite("one", "AND", "paid", "us"),
            composite("two", "OR", "paid", "mobile"),
        )
        assert compiler.compile("one").startswith("(plan = 'paid')")
        assert compiler.compile("two").startswith("(plan = 'paid')")


# ── Compound raw predicates ─────────────────────────────────────────────────


COMPOUND = (
    raw("a", "x = 1 OR y = 1"),
    raw("b", "z = 1"),
)


class TestCompoundRawPredicates:
    @pytest.mark.parametrize(
        "operator, expected",
        [
            ("AND", "(x = 1 OR y = 1) AND (z = 1)"),
            ("OR", "(x = 1 OR y = 1) OR (z = 1)"),
            ("NAND", "NOT ((x = 1 OR y = 1) AND (z = 1))"),
            ("NOR", "NOT ((x = 1 OR y = 1) OR (z = 1))"),
            ("XOR", "((x = 1 OR y = 1) AND NOT (z = 1)) OR (NOT (x = 1 OR y = 1) AND (z = 1))"),
            ("XNOR", "((x = 1 OR y = 1) AND (z = 1)) OR (NOT (x = 1 OR y = 1) AND NOT (z = 1))"),
        ],
    )
    def test_binary_operators_keep_operand_grouping(self, operator, expected):
        compiler = compiler_for(*COMPOUND, composite("c", operator, "a", "b"))
        assert compiler.compile("c") == expected

    def test_not_negates_whole_predicate(self):
        compiler = compiler_for(*COMPOUND, composite("c", "NOT", "a"))
        assert compiler.compile("c") == "NOT (x = 1 OR y = 1)"

    def test_and_predicate_inside_or(self):
        compiler = compiler_for(
            raw("a", "x = 1 AND y = 1"),
            raw("b", "z = 1"),
            composite("c", "OR", "a", "b"),
        )
        assert compiler.compile("c") == "(x = 1 AND y = 1) OR (z = 1)"


# ── Conjunctions ────────────────────────────────────────────────────────────


class TestConjunction:
    def test_conjunction_of_raw_conditions(self):
        compiler = compiler_for(*BASE)
        assert compiler.conjunction(["paid", "us"]) == "(plan = 'paid') AND (country = 'US')"

    def test_conjunction_wraps_composites(self):
        compiler = compiler_for(*BASE, composite("free", "NOT", "paid"))
        assert compiler.conjunction(["free", "us"]) == "(NOT (plan = 'paid')) AND (country = 'US')"

    def test_conjunction_keeps_or_predicate_grouped(self):
        compiler = compiler_for(*BASE, raw("na", "country = 'US' OR country = 'CA'"))
        assert compiler.conjunction(["mobile", "na"]) == (
            "(device = 'mobile') AND (country = 'US' OR country = 'CA')"
        )


# ── Function conditions ─────────────────────────────────────────────────────


class TestFunctionConditions:
    def test_function_without_args_inlines_body(self):
        compiler = compiler_for(FunctionCondition(name="big", body="amount > 100"))
        assert compiler.compile("big") == "amount > 100"

    def test_function_with_args_calls_routine(self):
        condition = FunctionCondition(
            name="high_value", body="amount > threshold", args={"amount": "INT64", "threshold": "INT64"}
        )
        compiler = compiler_for(condition, dataset="Core")
        assert compiler.compile("high_value") == "Core.isHighValue(amount, threshold)"

    def test_function_without_dataset(self):
        condition = FunctionCondition(name="paid", body="plan = p", args={"plan": "STRING"})
        assert compiler_for(condition).compile("paid") == "isPaid(plan)"
