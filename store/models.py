from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


class RuleVersion(BaseModel):
    rule_code: str
    timestamp: datetime
    is_reversion: Optional[bool] = None
    reverted_from_version: Optional[int] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Rule(BaseModel):
    id: str
    name: str
    natural_language: str = ""
    rule_code: str
    created_at: datetime
    updated_at: datetime
    versions: list[RuleVersion] = Field(default_factory=list)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SaveRuleRequest(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., description="User-supplied label, not required to be unique")
    natural_language: str = ""
    rule_code: str
    created_at: Optional[datetime] = None
    versions: Optional[list[RuleVersion]] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, json_schema_extra={
        "example": {
            "name": "High value transactions",
            "naturalLanguage": "Flag transactions over $500 from new users",
            "ruleCode": "if transaction.amount > 500 and user.is_new == true then flag_transaction",
        }
    })


class RevertRequest(BaseModel):
    version_index: int = Field(..., description="Index into the rule's version history")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DeleteResponse(BaseModel):
    success: bool
