"""
Unit Tests for the rule auto-fixer

Tests cover:
1. Bracket and quote balancing
2. Missing "then" insertion
3. Dangling comparison operators
4. The no-fix result and idempotence
"""

import pytest

from rules.autofix import NO_FIX_MESSAGE, auto_fix_rule


class TestBalancing:
    """Tests for parenthesis and quote repairs."""

    @pytest.mark.parametrize("rule_code, missing", [
        ("if (a > 1 then x", 1),
        ("if ((a > 1) and (b < 2 then x", 2),
        ("((((", 4),
    ])
    def test_appends_missing_parentheses(self, rule_code, missing):
        """Test that k unclosed parentheses get exactly k closers appended."""
        result = auto_fix_rule(rule_code)

        assert result.was_fixed
        assert result.fixed_rule == rule_code + ")" * missing
        assert result.fix_explanations[0] == f"Added {missing} missing closing parenthesis"
        assert result.confidence_score == 100 - 5 * missing

    def test_extra_closing_parenthesis_left_alone(self):
        """Test that more closers than openers is not repaired."""
        result = auto_fix_rule("if a > 1) then x")

        assert not result.was_fixed

    def test_odd_double_quote(self):
        """Test that an odd number of double quotes gets one appended."""
        result = auto_fix_rule('if user.country == "US then flag')

        assert result.fixed_rule == 'if user.country == "US then flag"'
        assert result.fix_explanations == ["Added missing closing quote"]
        assert result.confidence_score == 95

    def test_both_quote_kinds_fixed_together(self):
        """Test that double and single quote repairs stack."""
        result = auto_fix_rule("if a == \"x and b == 'y then z")

        assert result.fixed_rule.endswith("\"'")
        assert result.fix_explanations.count("Added missing closing quote") == 2
        assert result.confidence_score == 90


class TestMissingThen:
    """Tests for inserting the then keyword."""

    def test_then_inserted_after_last_condition(self):
        """Test the canonical missing-then case."""
        result = auto_fix_rule("if a > 5 and b < 10")

        assert "then" in result.fixed_rule
        assert result.fixed_rule == "if a > 5 and b < 10 then "
        assert result.fix_explanations == ['Added missing "then" keyword after conditions']
        assert result.confidence_score == 90

    def test_then_inserted_before_following_or(self):
        """Test that insertion stops at the next " or " after the last and."""
        result = auto_fix_rule("if a > 5 and b < 10 or c > 1")

        assert result.fixed_rule == "if a > 5 and b < 10 then  or c > 1"

    def test_no_then_without_and(self):
        """Test that a rule without "and" is left alone."""
        result = auto_fix_rule("if a > 5 flag")

        assert not result.was_fixed


class TestDanglingOperator:
    """Tests for inserting a placeholder operand."""

    def test_trailing_operator(self):
        """Test that a trailing ">" gets a 0 placeholder."""
        result = auto_fix_rule("amount > ")

        assert result.was_fixed
        assert result.fixed_rule == "amount > 0 "
        assert result.fix_explanations == ['Added missing value after ">" operator']
        assert result.confidence_score == 85

    def test_operator_followed_by_keyword(self):
        """Test that an operator followed directly by then gets a placeholder."""
        result = auto_fix_rule("if amount >= then flag")

        assert result.fixed_rule == "if amount >= 0  flag"
        assert 'Added missing value after ">=" operator' in result.fix_explanations

    def test_multiple_operators_stack(self):
        """Test that each dangling operator costs 15."""
        result = auto_fix_rule("if a < and b != then x")

        assert result.fix_explanations == [
            'Added missing value after "<" operator',
            'Added missing value after "!=" operator',
        ]
        assert result.confidence_score == 70


class TestNoFix:
    """Tests for the untouched result."""

    def test_clean_rule(self):
        """Test that a well-formed rule is echoed back with confidence 0."""
        result = auto_fix_rule("amount > 100")

        assert result.was_fixed is False
        assert result.fixed_rule == "amount > 100"
        assert result.fix_explanations == [NO_FIX_MESSAGE]
        assert result.confidence_score == 0

    def test_empty_rule(self):
        """Test that an empty string is not an error."""
        result = auto_fix_rule("", [])

        assert result.fixed_rule == ""
        assert not result.was_fixed

    def test_errors_do_not_change_outcome(self):
        """Test that reported errors are accepted but not used."""
        with_errors = auto_fix_rule("amount > ", ["Missing value after operator"])
        without = auto_fix_rule("amount > ")

        assert with_errors == without

    @pytest.mark.parametrize("rule_code", [
        "amount > ",
        "if (a > 5 and b < 10",
        'if user.name == "bob then flag',
    ])
    def test_second_pass_applies_nothing(self, rule_code):
        """Test that fixing already-fixed output is a no-op."""
        first = auto_fix_rule(rule_code)
        second = auto_fix_rule(first.fixed_rule)

        assert first.was_fixed
        assert second.was_fixed is False

    def test_to_dict_shape(self):
        """Test the camelCase wire shape."""
        data = auto_fix_rule("amount > ").to_dict()

        assert data == {
            "fixedRule": "amount > 0 ",
            "fixExplanations": ['Added missing value after ">" operator'],
            "confidenceScore": 85,
            "wasFixed": True,
        }


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
