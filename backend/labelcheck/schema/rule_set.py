# Pydantic schemas for RuleSet and ComplianceRule validation and serialization.

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from labelcheck.models.rule_set import ProductType, RuleSeverity, RuleCategory, GenerationStatus


# Rule Set Schemas
class RuleSetCreate(BaseModel):

    name: str = Field(min_length=1)
    description: Optional[str] = None
    state_name: Optional[str] = None
    state_abbreviation: Optional[str] = None
    product_type: ProductType


class RuleSetUpdate(BaseModel):
    # Partial update, only the supplied fields change
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    state_name: Optional[str] = None
    state_abbreviation: Optional[str] = None
    product_type: Optional[ProductType] = None
    is_active: Optional[bool] = None


class RuleSetSummary(BaseModel):

    id: str
    name: str
    state_name: Optional[str]
    state_abbreviation: Optional[str]
    product_type: ProductType

    model_config = {
        "from_attributes": True
    }


class RuleSetResponse(RuleSetSummary):

    owner_id: str
    organization_id: str
    description: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime
    rules_count: Optional[int] = None


# Rule Schemas
class RuleCreate(BaseModel):

    name: str = Field(min_length=1)
    description: Optional[str] = None  # defaults to the name
    category: RuleCategory
    severity: RuleSeverity = RuleSeverity.ERROR
    validation_prompt: str = Field(min_length=1)


class RuleUpdate(BaseModel):

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[RuleCategory] = None
    severity: Optional[RuleSeverity] = None
    validation_prompt: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None


class RuleResponse(BaseModel):

    id: str
    rule_set_id: str
    name: str
    description: str
    category: RuleCategory
    severity: RuleSeverity
    validation_prompt: str
    source_citation: Optional[str] = None
    generation_status: Optional[GenerationStatus] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }


class StateResponse(BaseModel):

    id: str
    name: str
    abbreviation: str
