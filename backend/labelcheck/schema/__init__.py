"""
Schema Package

Exports all Pydantic request/response schemas.
"""

from .rule_set import (
    RuleSetCreate,
    RuleSetUpdate,
    RuleSetSummary,
    RuleSetResponse,
    RuleCreate,
    RuleUpdate,
    RuleResponse,
    StateResponse
)

from .check import (
    CheckCreate,
    CheckResponse,
    PanelResponse,
    CheckResultResponse,
    CheckDetailResponse,
    CleanupResponse,
    AnalyzeRequest,
    VerdictResponse,
    AnalysisSummary,
    AnalyzeResponse
)

from .upload import UploadUrlRequest, UploadUrlResponse, UploadConfirmRequest

from .generation import (
    ExistingRulePayload,
    RuleExtractionRequest,
    ExtractedRuleCandidate,
    RuleExtractionResponse,
    GenerateRulesResponse
)
