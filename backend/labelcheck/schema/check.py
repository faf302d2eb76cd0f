# Pydantic schemas for compliance checks, panels, results and analysis runs.

from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from datetime import datetime
from labelcheck.models.compliance_check import ComplianceStatus, PanelType
from labelcheck.models.rule_set import RuleSeverity
from .rule_set import RuleSetSummary


class CheckCreate(BaseModel):

    rule_set_id: str
    product_name: Optional[str] = None


class CheckResponse(BaseModel):

    id: str
    user_id: str
    rule_set_id: str
    product_name: Optional[str]
    overall_status: Optional[ComplianceStatus]
    pass_count: int
    warning_count: int
    fail_count: int
    created_at: datetime
    completed_at: Optional[datetime]
    rule_set: Optional[RuleSetSummary] = None

    model_config = {
        "from_attributes": True
    }


class PanelResponse(BaseModel):

    id: str
    compliance_check_id: str
    panel_type: PanelType
    blob_url: str
    file_name: str
    extracted_data: Optional[Dict[str, Any]] = None
    created_at: datetime

    model_config = {
        "from_attributes": True
    }


class CheckResultResponse(BaseModel):
    # rule_* fields give one view over both provenance forms

    id: str
    compliance_check_id: str
    status: ComplianceStatus
    found_value: Optional[str]
    expected_value: Optional[str]
    explanation: Optional[str]
    rule_id: Optional[str]
    is_generated_rule: bool
    generated_rule_name: Optional[str] = None
    generated_rule_description: Optional[str] = None
    generated_rule_category: Optional[str] = None
    rule_name: Optional[str] = None
    rule_description: Optional[str] = None
    rule_category: Optional[str] = None
    rule_severity: Optional[RuleSeverity] = None
    created_at: datetime


class CheckDetailResponse(CheckResponse):

    panels: List[PanelResponse] = []
    results: List[CheckResultResponse] = []


class CleanupResponse(BaseModel):

    deleted: int


# Analysis
class AnalyzeRequest(BaseModel):

    check_id: str


class VerdictResponse(BaseModel):

    rule_id: str
    rule_name: Optional[str] = None
    rule_description: Optional[str] = None
    rule_category: Optional[str] = None
    status: ComplianceStatus
    found_value: Optional[str] = None
    expected_value: Optional[str] = None
    explanation: str


class AnalysisSummary(BaseModel):

    overall_status: Optional[ComplianceStatus]
    pass_count: int
    warning_count: int
    fail_count: int


class AnalyzeResponse(BaseModel):

    success: bool
    check_id: str
    is_generated: bool
    results: List[VerdictResponse]
    summary: AnalysisSummary
