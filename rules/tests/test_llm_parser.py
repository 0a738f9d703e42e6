"""
Unit Tests for the LLM parser

The Groq client is replaced by a fake exposing the same
``chat.completions.create`` call so no network access happens.
"""

from types import SimpleNamespace

import pytest

from core.config import Settings
from core.exceptions import InvalidRequestError, LLMServiceError, MissingCredentialError
from rules.llm_parser import LLMParser


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def make_parser(content=None, error=None):
    completions = FakeCompletions(content, error)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    settings = Settings(_env_file=None, groq_api_key=None)
    return LLMParser(client=client, settings=settings), completions


class TestTranslate:
    """Tests for natural language to rule translation."""

    def test_translate_extracts_rule_json(self):
        """Test that the rule field is pulled out of a chatty response."""
        parser, _ = make_parser(
            'Here you go:\n{"rule": "if transaction.amount > 500 then flag_transaction"}'
        )

        result = parser.translate("Flag transactions over $500")

        assert result.rule == "if transaction.amount > 500 then flag_transaction"

    def test_translate_without_json_uses_raw_text(self):
        """Test that a response without JSON becomes the rule verbatim."""
        parser, _ = make_parser("  if user.age < 18 then block  ")

        assert parser.translate("Block minors").rule == "if user.age < 18 then block"

    def test_translate_json_without_rule_yields_none(self):
        """Test that JSON lacking a rule string is not passed off as a rule."""
        parser, _ = make_parser('{"error": "cannot express this as a rule"}')

        assert parser.translate("Make everything better").rule is None

    def test_translate_non_string_rule_yields_none(self):
        """Test that a rule field of the wrong type is ignored."""
        parser, _ = make_parser('{"rule": ["if a > 1 then x"]}')

        assert parser.translate("Flag anything above one").rule is None

    def test_translate_malformed_json_uses_raw_text(self):
        """Test that unparseable JSON falls back to the raw response."""
        parser, _ = make_parser('{"rule": if a > 1 then x}')

        assert parser.translate("Flag anything above one").rule == '{"rule": if a > 1 then x}'

    def test_realtime_uses_light_settings(self):
        """Test that realtime translation uses the lighter model and limits."""
        parser, completions = make_parser('{"rule": "if a > 1 then x"}')

        parser.translate("Flag anything above one", realtime=True)
        parser.translate("Flag anything above one")

        realtime_call, full_call = completions.calls
        assert realtime_call["model"] == parser.settings.llm_realtime_model
        assert realtime_call["max_tokens"] == 300
        assert realtime_call["temperature"] == 0.2
        assert full_call["model"] == parser.settings.llm_model
        assert full_call["max_tokens"] == 1000
        assert full_call["temperature"] == 0.3

    def test_prompt_contains_user_text(self):
        """Test that the user's rule text is sent to the model."""
        parser, completions = make_parser('{"rule": "x"}')

        parser.translate("Flag weekend transactions")

        assert "Flag weekend transactions" in completions.calls[0]["messages"][1]["content"]

    def test_empty_text_rejected(self):
        """Test that empty text is refused before calling the model."""
        parser, completions = make_parser('{"rule": "x"}')

        with pytest.raises(InvalidRequestError):
            parser.translate("")
        assert completions.calls == []

    def test_client_failure_raises_service_error(self):
        """Test that provider failures surface as LLMServiceError."""
        parser, _ = make_parser(error=RuntimeError("rate limited"))

        with pytest.raises(LLMServiceError):
            parser.translate("Flag transactions over $500")

    def test_missing_credential(self):
        """Test that a parser without a key or client refuses to call out."""
        parser = LLMParser(settings=Settings(_env_file=None, groq_api_key=None))

        assert not parser.is_available
        with pytest.raises(MissingCredentialError):
            parser.translate("Flag transactions over $500")

    def test_realtime_threshold(self):
        """Test that very short text is not worth a realtime translation."""
        parser, _ = make_parser()

        assert not parser.should_translate_realtime("flag tx")
        assert parser.should_translate_realtime("flag transactions")


class TestValidate:
    """Tests for rule validation."""

    def test_validate_parses_result(self):
        """Test that a JSON verdict is returned as ValidationResult."""
        parser, _ = make_parser(
            '{"isValid": false, "errors": ["Missing then"], "suggestions": ["Add then"]}'
        )

        result = parser.validate("if a > 1 and b < 2")

        assert result.is_valid is False
        assert result.errors == ["Missing then"]
        assert result.suggestions == ["Add then"]

    def test_validate_without_json(self):
        """Test the fallback verdict when the model returns prose."""
        parser, _ = make_parser("Looks fine to me")

        result = parser.validate("if a > 1 then x")

        assert result.is_valid is False
        assert result.errors == ["Could not validate rule format"]

    def test_validate_with_broken_json(self):
        """Test the fallback verdict when the JSON cannot be parsed."""
        parser, _ = make_parser('{"isValid": tru}')

        result = parser.validate("if a > 1 then x")

        assert result.errors == ["Failed to parse validation response"]


class TestSuggest:
    """Tests for inline suggestions."""

    def test_suggestions_capped_at_limit(self):
        """Test that at most five well-formed suggestions are returned."""
        items = ",".join(
            f'{{"text": "field_{i}", "category": "entity", "description": "d{i}"}}' for i in range(7)
        )
        parser, _ = make_parser(f'{{"suggestions": [{items}, {{"category": "bad"}}]}}')

        suggestions = parser.suggest("flag transactions where")

        assert len(suggestions) == 5
        assert suggestions[0].text == "field_0"

    def test_unparsable_suggestions_are_empty(self):
        """Test that garbage yields no suggestions rather than an error."""
        parser, _ = make_parser("no idea")

        assert parser.suggest("flag") == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
