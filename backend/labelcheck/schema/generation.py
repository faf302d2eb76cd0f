# Wire schemas of the external rule-extraction service and the importer's reply.

from pydantic import BaseModel, Field
from typing import Optional, List
from labelcheck.models.rule_set import GenerationStatus


class ExistingRulePayload(BaseModel):

    rule_name: str
    rule_description: str
    rule_text_citation: str = ""


class RuleExtractionRequest(BaseModel):

    state: str
    product_type: str
    existing_rules: List[ExistingRulePayload] = Field(default_factory=list)


class ExtractedRuleCandidate(BaseModel):
    # status is decided by the service, never recomputed locally

    rule_name: str
    rule_description: str
    rule_text_citation: str = ""
    status: GenerationStatus
    change_reason: Optional[str] = None


class RuleExtractionResponse(BaseModel):

    success: bool
    state: Optional[str] = None
    product_type: Optional[str] = None
    source_url: Optional[str] = None
    total_rules_extracted: int = 0
    rules: List[ExtractedRuleCandidate] = Field(default_factory=list)
    error: Optional[str] = None


class GenerateRulesResponse(BaseModel):

    success: bool
    added: int
    updated: int
    skipped: int
    total: int
    source_url: Optional[str] = None
