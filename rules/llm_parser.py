import json
import logging
import re
from typing import Any, Optional

from groq import Groq
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.config import Settings, get_settings
from core.exceptions import InvalidRequestError, LLMServiceError, MissingCredentialError

logger = logging.getLogger(__name__)

TRANSLATE_SYSTEM_PROMPT = """You are an expert system that translates natural language rule descriptions into structured rule code.
Your output should be valid JSON with a "rule" field containing the translated rule logic."""

TRANSLATE_USER_PROMPT = """Translate this into a rule expression using conditions and logical operators (and, or, not).
Use common fields like:
- transaction.amount
- user.age
- user.country
- transaction.date
- location.state
- weekly_revenue
- monthly_revenue

For example:
"Flag transactions over $500 from new users" would translate to:
{{
  "rule": "if transaction.amount > 500 and user.is_new == true then flag_transaction"
}}

Provide ONLY the JSON output with no additional text or explanation.

Natural language rule to translate: "{text}\""""

VALIDATE_SYSTEM_PROMPT = "You are a rule syntax validator. You analyze rule code and check for syntax errors or logical inconsistencies."

VALIDATE_USER_PROMPT = """Analyze the following rule code and check for syntax errors or logical inconsistencies:

{rule_code}

Respond with a JSON object like this:
{{
  "isValid": true or false,
  "errors": [] (an array of error messages if any),
  "suggestions": [] (an array of improvement suggestions if any)
}}

ONLY return the JSON object with no additional text."""

SUGGEST_SYSTEM_PROMPT = """You are an AI assistant that helps users write rules for a rule engine.
Your task is to analyze the user's partial rule text and suggest relevant entities, conditions, actions, or values they might want to include next.
You should return suggestions in JSON format."""

SUGGEST_USER_PROMPT = """Here's a partial rule the user is writing:
"{text}"

Based on this partial text, provide suggestions for what they might want to add next.
Consider suggesting:
- Entities (like transaction.amount, user.age, user.country, transaction.date, location.state, weekly_revenue, etc.)
- Conditions (like greater than, less than, equal to, not equal to, contains, etc.)
- Actions (like flag, block, approve, review, etc.)
- Values (specific amounts, countries, states, etc. that make sense in context)

Return ONLY a JSON object in this format:
{{
  "suggestions": [
    {{"text": "transaction.amount", "category": "entity", "description": "The monetary value of the transaction"}},
    {{"text": "greater than", "category": "condition", "description": "Checks if a value exceeds a threshold"}}
  ]
}}

Limit to {limit} most relevant suggestions. Ensure they make semantic sense with what the user has already typed."""


class TranslationResult(BaseModel):
    rule: Optional[str] = None


class ValidationResult(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Suggestion(BaseModel):
    text: str
    category: str = "entity"
    description: str = ""


class LLMParser:
    """Talks to the Groq chat API to translate, validate and complete rules."""

    def __init__(self, api_key: Optional[str] = None, client: Any = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.api_key = api_key or self.settings.groq_api_key
        self.client = client

        if self.client is None and self.api_key:
            self.client = Groq(api_key=self.api_key)

    @property
    def is_available(self) -> bool:
        return self.client is not None

    def should_translate_realtime(self, text: str) -> bool:
        return len(text or "") >= self.settings.realtime_min_chars

    def translate(self, text: str, realtime: bool = False) -> TranslationResult:
        if not text:
            raise InvalidRequestError("Natural language rule is required")

        if realtime:
            model = self.settings.llm_realtime_model
            temperature = self.settings.llm_realtime_temperature
            max_tokens = self.settings.llm_realtime_max_tokens
        else:
            model = self.settings.llm_model
            temperature = self.settings.llm_temperature
            max_tokens = self.settings.llm_max_tokens

        content = self._complete(
            TRANSLATE_SYSTEM_PROMPT,
            TRANSLATE_USER_PROMPT.format(text=text),
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        data = self._extract_json(content)
        if isinstance(data, dict) and data:
            rule = data.get("rule")
            # JSON without a usable rule means nothing was generated
            return TranslationResult(rule=rule if isinstance(rule, str) else None)
        return TranslationResult(rule=content.strip())

    def validate(self, rule_code: str) -> ValidationResult:
        if not rule_code:
            raise InvalidRequestError("Rule code is required")

        content = self._complete(
            VALIDATE_SYSTEM_PROMPT,
            VALIDATE_USER_PROMPT.format(rule_code=rule_code),
            model=self.settings.llm_model,
            temperature=self.settings.llm_validate_temperature,
            max_tokens=self.settings.llm_max_tokens,
        )
        if not re.search(r'\{[\s\S]*\}', content):
            return ValidationResult(
                is_valid=False,
                errors=["Could not validate rule format"],
                suggestions=["Check rule syntax and ensure it follows the expected format"],
            )

        data = self._extract_json(content)
        try:
            return ValidationResult.model_validate(data)
        except ValueError as e:
            logger.warning("Unusable validation response: %s", e)
            return ValidationResult(
                is_valid=False,
                errors=["Failed to parse validation response"],
                suggestions=["Try simplifying the rule syntax"],
            )

    def suggest(self, text: str) -> list[Suggestion]:
        if not text:
            raise InvalidRequestError("Text is required")

        limit = self.settings.suggestion_limit
        content = self._complete(
            SUGGEST_SYSTEM_PROMPT,
            SUGGEST_USER_PROMPT.format(text=text, limit=limit),
            model=self.settings.llm_model,
            temperature=self.settings.llm_validate_temperature,
            max_tokens=self.settings.llm_max_tokens,
        )
        data = self._extract_json(content)
        raw = data.get("suggestions") if isinstance(data, dict) else None
        if not isinstance(raw, list):
            return []

        suggestions = []
        for item in raw:
            if isinstance(item, dict) and isinstance(item.get("text"), str):
                suggestions.append(Suggestion(
                    text=item["text"],
                    category=str(item.get("category", "entity")),
                    description=str(item.get("description", "")),
                ))
        return suggestions[:limit]

    def _complete(self, system_prompt: str, user_prompt: str, *, model: str, temperature: float, max_tokens: int) -> str:
        if not self.client:
            raise MissingCredentialError("Groq API key is required")
        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt}
                ],
                temperature=temperature,
                max_tokens=max_tokens
            )
        except Exception as e:
            logger.exception("Groq request failed")
            raise LLMServiceError(f"Failed to call LLM API: {e}") from e
        return response.choices[0].message.content or ""

    def _extract_json(self, text: str) -> Any:
        json_match = re.search(r'\{[\s\S]*\}', text)
        if json_match:
            try:
                return json.loads(json_match.group())
            except json.JSONDecodeError:
                logger.warning("LLM response contained malformed JSON")
        return {}
