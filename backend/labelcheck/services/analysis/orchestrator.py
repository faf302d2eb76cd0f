"""
Check Orchestrator

Runs one compliance check end to end.

Pipeline Flow:
┌─────────────────────────────────────────────────────────────────────────┐
│                           ANALYSIS PIPELINE                             │
├─────────────────────────────────────────────────────────────────────────┤
│                                                                         │
│  created                                                                │
│     └── Resolve rules once (persisted, or generated by the model)       │
│                                                                         │
│  extracting                                                             │
│     └── FOR EACH PANEL (upload order, sequential):                      │
│         ├── Download the panel from the object store                    │
│         ├── Extract label data with the resolved rules                  │
│         └── Save extracted_data on the panel row                        │
│                                                                         │
│  evaluating                                                             │
│     └── Merge all panels, classify every rule in one model call         │
│                                                                         │
│  completed                                                              │
│     └── Replace results + write status, counters, completed_at          │
│         (one commit)                                                    │
│                                                                         │
│  failed (from any stage)                                                │
│     └── Delete the check; panels and results cascade                    │
│                                                                         │
└─────────────────────────────────────────────────────────────────────────┘

A failed check is never left half-done: it is deleted and the caller is
told to start over. If the delete itself fails it is only logged, the
original error is what the caller sees.
"""

from enum import StrEnum
from typing import Any, Dict, List
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from labelcheck.crud import crud_check, crud_panel, crud_result
from labelcheck.exceptions.base import AppException, ValidationException
from labelcheck.exceptions.check_exceptions import (
    AnalysisFailedException,
    CheckNotFoundException,
    PersistenceException
)
from labelcheck.models import ComplianceCheck, GeneratedRuleRef, PersistedRuleRef, RuleCategory
from labelcheck.schema.check import AnalysisSummary, AnalyzeResponse, VerdictResponse
from labelcheck.services.storage.object_store import ObjectStore
from .evaluator import ComplianceEvaluator
from .label_extractor import LabelExtractor
from .rule_resolver import RuleResolver
from .types import EvaluationResult, RuleResolution, RuleVerdict

logger = logging.getLogger(__name__)


ROLLBACK_NOTE = "The check was removed, please start a new check and retry."


class CheckStage(StrEnum):
    CREATED = "created"
    EXTRACTING = "extracting"
    EVALUATING = "evaluating"
    COMPLETED = "completed"
    FAILED = "failed"


def provenance_for(verdict: RuleVerdict, is_generated: bool):
    rule = verdict.rule
    if is_generated:
        return GeneratedRuleRef(
            name=rule.name or "Unknown Rule",
            description=rule.description,
            category=rule.category or RuleCategory.GENERAL.value
        )
    return PersistedRuleRef(rule_id=rule.id)


class CheckOrchestrator:

    def __init__(
        self,
        resolver: RuleResolver,
        extractor: LabelExtractor,
        evaluator: ComplianceEvaluator,
        object_store: ObjectStore
    ):
        self.resolver = resolver
        self.extractor = extractor
        self.evaluator = evaluator
        self.object_store = object_store

    def analyze(self, db: Session, check_id: str, user_id: str) -> AnalyzeResponse:

        check = crud_check.get_user_check(db, check_id, user_id)
        if not check:
            raise CheckNotFoundException()

        panels = crud_panel.get_check_panels(db, check_id)
        if not panels:
            raise ValidationException("No panels found for this check.")

        stage = CheckStage.CREATED
        self._log_stage(check_id, stage)

        try:
            resolution = self.resolver.resolve(db, check)

            stage = CheckStage.EXTRACTING
            self._log_stage(check_id, stage)
            extracted_panels: List[Dict[str, Any]] = []
            for panel in panels:
                image = self.object_store.get(panel.blob_url)
                extracted = self.extractor.extract(
                    image,
                    panel_type=str(panel.panel_type),
                    product_type=str(check.rule_set.product_type),
                    rules=resolution.rules,
                    file_name=panel.file_name
                )
                record = extracted.to_record()
                crud_panel.set_extracted_data(db, panel, record)
                extracted_panels.append(record)

            stage = CheckStage.EVALUATING
            self._log_stage(check_id, stage)
            evaluation = self.evaluator.evaluate(extracted_panels, resolution.rules)

            if evaluation.summary.overall_status is None:
                logger.warning(f"Check {check_id}: model returned no verdicts, leaving the check incomplete")
            else:
                self._complete(db, check, resolution, evaluation)
                stage = CheckStage.COMPLETED
                self._log_stage(check_id, stage)

        except Exception as e:
            logger.exception(f"Check {check_id} failed while {stage}")
            self._log_stage(check_id, CheckStage.FAILED)
            self._discard(db, check_id)

            if isinstance(e, AppException):
                raise type(e)(f"{e.detail} {ROLLBACK_NOTE}") from e
            if isinstance(e, SQLAlchemyError):
                raise PersistenceException(f"Failed to save analysis results. {ROLLBACK_NOTE}") from e
            raise AnalysisFailedException() from e

        return self._response(check_id, resolution, evaluation)

    def _complete(self, db: Session, check: ComplianceCheck, resolution: RuleResolution, evaluation: EvaluationResult) -> None:
        """Results and completion fields land in one commit"""
        replaced = crud_result.delete_check_results(db, check.id)
        if replaced:
            logger.info(f"Check {check.id}: replacing {replaced} results from a previous run")

        for position, verdict in enumerate(evaluation.results):
            crud_result.add_result(
                db,
                check_id=check.id,
                position=position,
                status=verdict.status,
                provenance=provenance_for(verdict, resolution.is_generated),
                found_value=verdict.found_value,
                expected_value=verdict.expected_value,
                explanation=verdict.explanation
            )

        summary = evaluation.summary
        crud_check.mark_completed(
            db,
            check,
            overall_status=summary.overall_status,
            pass_count=summary.pass_count,
            warning_count=summary.warning_count,
            fail_count=summary.fail_count
        )
        db.commit()

    def _discard(self, db: Session, check_id: str) -> None:

        try:
            db.rollback()
            if crud_check.delete_check(db, check_id):
                logger.info(f"Deleted incomplete compliance check: {check_id}")
        except Exception:
            logger.exception(f"Failed to delete incomplete check {check_id}")

    def _log_stage(self, check_id: str, stage: CheckStage) -> None:
        logger.info(f"Check {check_id}: {stage}")

    def _response(self, check_id: str, resolution: RuleResolution, evaluation: EvaluationResult) -> AnalyzeResponse:

        summary = evaluation.summary
        return AnalyzeResponse(
            success=True,
            check_id=check_id,
            is_generated=resolution.is_generated,
            results=[
                VerdictResponse(
                    rule_id=v.rule.id,
                    rule_name=v.rule.name,
                    rule_description=v.rule.description,
                    rule_category=v.rule.category,
                    status=v.status,
                    found_value=v.found_value,
                    expected_value=v.expected_value,
                    explanation=v.explanation
                )
                for v in evaluation.results
            ],
            summary=AnalysisSummary(
                overall_status=summary.overall_status,
                pass_count=summary.pass_count,
                warning_count=summary.warning_count,
                fail_count=summary.fail_count
            )
        )
