"""Tests for the sandboxed formula evaluator."""

import pytest

from src.core.exceptions import FormulaError
from src.core.services.formula import evaluate_formula, tokenize

VARIABLES = {"materialCost": 1000.0, "fabricationCost": 250.0, "quantity": 4.0, "total": 1250.0}


class TestEvaluateFormula:
    """Arithmetic and variables."""

    @pytest.mark.parametrize(
        ("formula", "expected"),
        [
            ("1 + 2 * 3", 7.0),
            ("(1 + 2) * 3", 9.0),
            ("10 / 4", 2.5),
            ("-5 + 2", -3.0),
            ("--3", 3.0),
            ("+2 * -2", -4.0),
            (".5 * 4", 2.0),
            ("2 - 3 - 4", -5.0),
            ("100 / 10 / 2", 5.0),
        ],
    )
    def test_arithmetic(self, formula: str, expected: float):
        assert evaluate_formula(formula, {}) == expected

    def test_variables(self):
        assert evaluate_formula("materialCost * 0.05 + quantity", VARIABLES) == 54.0

    def test_total_variable(self):
        assert evaluate_formula("total * 0.1", VARIABLES) == 125.0

    @pytest.mark.parametrize("formula", ["", "   ", None])
    def test_blank_formula_is_zero(self, formula):
        assert evaluate_formula(formula, VARIABLES) == 0.0


class TestFunctions:
    """Whitelisted math functions."""

    def test_max_and_min(self):
        assert evaluate_formula("max(fabricationCost, 300)", VARIABLES) == 300.0
        assert evaluate_formula("min(fabricationCost, 300, 100)", VARIABLES) == 100.0

    def test_math_prefix(self):
        assert evaluate_formula("Math.ceil(2.1) + Math.floor(2.9)", {}) == 5.0

    def test_round_half_up(self):
        assert evaluate_formula("round(2.5)", {}) == 3.0
        assert evaluate_formula("round(-2.5)", {}) == -2.0

    def test_abs(self):
        assert evaluate_formula("abs(fabricationCost - materialCost)", VARIABLES) == 750.0

    def test_wrong_arity(self):
        with pytest.raises(FormulaError, match="wrong number of arguments"):
            evaluate_formula("round(1, 2)", {})


class TestFormulaErrors:
    """Malformed or unsafe input raises FormulaError."""

    def test_division_by_zero(self):
        with pytest.raises(FormulaError, match="division by zero"):
            evaluate_formula("materialCost / 0", VARIABLES)

    def test_unknown_variable(self):
        with pytest.raises(FormulaError, match="unknown variable 'weight'"):
            evaluate_formula("weight * 2", VARIABLES)

    def test_unknown_function(self):
        with pytest.raises(FormulaError, match="unknown function"):
            evaluate_formula("sqrt(4)", {})

    @pytest.mark.parametrize(
        "formula",
        [
            "__import__('os').system('ls')",
            "materialCost; quantity",
            "2 ** 3",
            "[1, 2]",
        ],
    )
    def test_rejects_code(self, formula: str):
        with pytest.raises(FormulaError):
            evaluate_formula(formula, VARIABLES)

    def test_unbalanced_parentheses(self):
        with pytest.raises(FormulaError):
            evaluate_formula("(1 + 2", {})

    def test_trailing_tokens(self):
        with pytest.raises(FormulaError, match="unexpected token"):
            evaluate_formula("1 2", {})

    def test_error_carries_formula(self):
        with pytest.raises(FormulaError) as exc_info:
            evaluate_formula("1 / 0", {})
        assert exc_info.value.details["formula"] == "1 / 0"
        assert exc_info.value.code == "FORMULA_ERROR"


def test_tokenize_skips_whitespace():
    tokens = tokenize("Math.max( a ,2 )")
    assert [t.text for t in tokens] == ["Math.max", "(", "a", ",", "2", ")"]
