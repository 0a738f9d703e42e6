import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.config import configure_logging, get_settings
from core.exceptions import (
    InvalidRequestError, LLMServiceError, MissingCredentialError,
    RuleStoreError, TemplateNotFoundError,
)
from rules.autofix import auto_fix_rule
from rules.llm_parser import LLMParser, Suggestion, ValidationResult
from rules.templates import apply_template, get_template, list_templates
from rules.wizard import WizardSelection, compose_natural_language, wizard_options
from store.models import DeleteResponse, RevertRequest, Rule, SaveRuleRequest
from store.service import RuleStore
from store.storage import create_storage

logger = logging.getLogger(__name__)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FixRequest(CamelModel):
    rule_code: str = ""
    errors: list[str] = Field(default_factory=list)


class FixResponse(CamelModel):
    fixed_rule: str
    fix_explanations: list[str]
    confidence_score: int
    was_fixed: bool


class TranslateRequest(CamelModel):
    natural_language_rule: str = ""
    api_key: Optional[str] = None
    realtime: bool = False


class TranslateResponse(CamelModel):
    rule: Optional[str] = None
    skipped: bool = False


class ValidateRequest(CamelModel):
    rule_code: str = ""
    api_key: Optional[str] = None


class SuggestRequest(CamelModel):
    text: str = ""
    api_key: Optional[str] = None


class SuggestResponse(CamelModel):
    suggestions: list[Suggestion]


class ApplyTemplateRequest(CamelModel):
    values: dict[str, Any] = Field(default_factory=dict)


class WizardComposeRequest(CamelModel):
    rule_type: str
    subject: str
    condition: str
    value: str
    action: Optional[str] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(_settings)
    logger.info("Starting RuleWeave API (%s, storage=%s)", _settings.ruleweave_env, _settings.storage_backend)
    yield
    logger.info("Shutting down RuleWeave API")


_settings = get_settings()

app = FastAPI(
    title=_settings.api_title,
    description="Natural-language rule authoring with versioned rule storage",
    version=_settings.api_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

rule_store = RuleStore(create_storage(_settings))


def _llm_parser(api_key: Optional[str]) -> LLMParser:
    parser = LLMParser(api_key=api_key, settings=_settings)
    if not parser.is_available:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="API key is required")
    return parser


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "healthy", "service": "ruleweave"}


@app.get("/rules", response_model=list[Rule], tags=["Rules"])
def list_rules() -> list[Rule]:
    try:
        return rule_store.list_all()
    except RuleStoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@app.get("/rules/{rule_id}", response_model=Rule, tags=["Rules"])
def get_rule(rule_id: str) -> Rule:
    try:
        rule = rule_store.get_by_id(rule_id)
    except RuleStoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if rule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Rule {rule_id} not found")
    return rule


@app.post("/rules", response_model=Rule, status_code=status.HTTP_201_CREATED, tags=["Rules"])
def save_rule(request: SaveRuleRequest) -> Rule:
    if not request.rule_code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No rule to save")
    if not request.name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please enter a name for this rule")
    try:
        return rule_store.save(request)
    except RuleStoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@app.delete("/rules/{rule_id}", response_model=DeleteResponse, tags=["Rules"])
def delete_rule(rule_id: str) -> DeleteResponse:
    try:
        return DeleteResponse(success=rule_store.delete_by_id(rule_id))
    except RuleStoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@app.post("/rules/{rule_id}/revert", response_model=Rule, tags=["Rules"])
def revert_rule(rule_id: str, request: RevertRequest) -> Rule:
    try:
        rule = rule_store.revert(rule_id, request.version_index)
    except RuleStoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if rule is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Rule {rule_id} or version {request.version_index} not found",
        )
    return rule


@app.post("/fix", response_model=FixResponse, tags=["Authoring"])
def fix_rule(request: FixRequest) -> FixResponse:
    result = auto_fix_rule(request.rule_code, request.errors)
    return FixResponse.model_validate(result.to_dict())


@app.post("/translate", response_model=TranslateResponse, tags=["Authoring"])
def translate_rule(request: TranslateRequest) -> TranslateResponse:
    if not request.natural_language_rule:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Natural language rule is required")
    parser = _llm_parser(request.api_key)
    if request.realtime and not parser.should_translate_realtime(request.natural_language_rule):
        return TranslateResponse(skipped=True)
    try:
        result = parser.translate(request.natural_language_rule, realtime=request.realtime)
    except MissingCredentialError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LLMServiceError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return TranslateResponse(rule=result.rule)


@app.post("/validate", response_model=ValidationResult, tags=["Authoring"])
def validate_rule(request: ValidateRequest) -> ValidationResult:
    if not request.rule_code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Rule code is required")
    parser = _llm_parser(request.api_key)
    try:
        return parser.validate(request.rule_code)
    except MissingCredentialError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LLMServiceError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@app.post("/suggest", response_model=SuggestResponse, tags=["Authoring"])
def suggest(request: SuggestRequest) -> SuggestResponse:
    if not request.text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Text is required")
    parser = _llm_parser(request.api_key)
    try:
        return SuggestResponse(suggestions=parser.suggest(request.text))
    except MissingCredentialError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LLMServiceError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@app.get("/templates", tags=["Templates"])
def get_templates(query: str = "", category: Optional[str] = None):
    return [t.to_dict() for t in list_templates(query, category)]


@app.get("/templates/{template_id}", tags=["Templates"])
def get_template_by_id(template_id: str):
    try:
        return get_template(template_id).to_dict()
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@app.post("/templates/{template_id}/apply", tags=["Templates"])
def apply_template_values(template_id: str, request: ApplyTemplateRequest):
    try:
        return apply_template(template_id, request.values).to_dict()
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@app.get("/wizard/options", tags=["Wizard"])
def get_wizard_options():
    return wizard_options()


@app.post("/wizard/compose", tags=["Wizard"])
def compose_wizard_rule(request: WizardComposeRequest):
    selection = WizardSelection(
        rule_type=request.rule_type,
        subject=request.subject,
        condition=request.condition,
        value=request.value,
        action=request.action,
    )
    try:
        return {"naturalLanguageRule": compose_natural_language(selection)}
    except InvalidRequestError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
