"""
Label Analysis Services

Core Components:
- ModelClient: single-shot JSON calls to the vision/LLM model
- RuleResolver: persisted rules, or rules synthesized for the check
- LabelExtractor: per-panel structured data extraction
- ComplianceEvaluator: merges panels and classifies every rule
- CheckOrchestrator: runs the whole pipeline, deletes the check on failure

Quick Start:
    from labelcheck.services.analysis import build_orchestrator

    orchestrator = build_orchestrator(ModelClient(), object_store)
    response = orchestrator.analyze(db, check_id, user_id)
    print(response.summary.overall_status)
"""

from .model_client import ModelClient, unwrap_list
from .types import (
    ResolvedRule,
    RuleResolution,
    ExtractedLabelData,
    RuleVerdict,
    CheckSummary,
    EvaluationResult,
    summarize
)
from .rule_resolver import RuleResolver
from .label_extractor import LabelExtractor
from .evaluator import ComplianceEvaluator, merge_extracted_data
from .orchestrator import CheckOrchestrator, CheckStage


def build_orchestrator(model_client: ModelClient, object_store) -> CheckOrchestrator:

    return CheckOrchestrator(
        resolver=RuleResolver(model_client),
        extractor=LabelExtractor(model_client),
        evaluator=ComplianceEvaluator(model_client),
        object_store=object_store
    )


__all__ = [
    "ModelClient",
    "unwrap_list",
    "ResolvedRule",
    "RuleResolution",
    "ExtractedLabelData",
    "RuleVerdict",
    "CheckSummary",
    "EvaluationResult",
    "summarize",
    "RuleResolver",
    "LabelExtractor",
    "ComplianceEvaluator",
    "merge_extracted_data",
    "CheckOrchestrator",
    "CheckStage",
    "build_orchestrator",
]
