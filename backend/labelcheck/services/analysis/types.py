"""
Types shared by the analysis pipeline.

ResolvedRule is the one rule shape the extractor and evaluator see,
whether it came from the Rule Store or was synthesized for this check.
ExtractedLabelData is an open map: the keys the model extracts depend on
the rules, only rawText, extractionConfidence, flaggedForReview and
reviewReasons are fixed.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Sequence
import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator

from labelcheck.models import ComplianceRule, ComplianceStatus, RuleSeverity


Provenance = Literal["persisted", "generated"]


@dataclass(frozen=True)
class ResolvedRule:
    id: str
    name: str
    description: Optional[str]
    category: str
    severity: RuleSeverity
    validation_prompt: str
    is_generated: bool = False

    @classmethod
    def from_model(cls, rule: ComplianceRule) -> "ResolvedRule":
        return cls(
            id=rule.id,
            name=rule.name,
            description=rule.description,
            category=str(rule.category),
            severity=rule.severity,
            validation_prompt=rule.validation_prompt,
        )

    @classmethod
    def generated(cls, name: str, description: Optional[str], category: str, severity: RuleSeverity, validation_prompt: str) -> "ResolvedRule":
        # Fresh id, never written to compliance_rules
        return cls(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            category=category,
            severity=severity,
            validation_prompt=validation_prompt,
            is_generated=True,
        )


@dataclass
class RuleResolution:
    rules: List[ResolvedRule]
    provenance: Provenance

    @property
    def is_generated(self) -> bool:
        return self.provenance == "generated"


class ExtractionConfidence(BaseModel):

    overall: float = Field(ge=0.0, le=1.0)
    fields: Dict[str, float] = Field(default_factory=dict)

    @field_validator("fields")
    @classmethod
    def check_field_scores(cls, v: Dict[str, float]) -> Dict[str, float]:
        for name, score in v.items():
            if not 0.0 <= score <= 1.0:
                raise ValueError(f"confidence for '{name}' must be within [0, 1], got {score}")
        return v


class ExtractedLabelData(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    raw_text: str = Field(alias="rawText")
    extraction_confidence: ExtractionConfidence = Field(alias="extractionConfidence")
    flagged_for_review: bool = Field(default=False, alias="flaggedForReview")
    review_reasons: List[str] = Field(default_factory=list, alias="reviewReasons")

    def to_record(self) -> Dict[str, Any]:
        """Wire/JSON form with the model's camelCase keys"""
        return self.model_dump(by_alias=True)


class RawVerdict(BaseModel):
    """One per-rule verdict as the model returns it"""
    model_config = ConfigDict(populate_by_name=True)

    rule_id: Optional[str] = Field(default=None, alias="ruleId")
    status: ComplianceStatus
    found_value: Optional[str] = Field(default=None, alias="foundValue")
    expected_value: Optional[str] = Field(default=None, alias="expectedValue")
    explanation: str = ""

    @field_validator("found_value", "expected_value", mode="before")
    @classmethod
    def stringify(cls, v: Any) -> Optional[str]:
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


@dataclass
class RuleVerdict:
    rule: ResolvedRule
    status: ComplianceStatus
    found_value: Optional[str]
    expected_value: Optional[str]
    explanation: str


@dataclass
class CheckSummary:
    overall_status: Optional[ComplianceStatus]
    pass_count: int
    warning_count: int
    fail_count: int


@dataclass
class EvaluationResult:
    results: List[RuleVerdict]
    summary: CheckSummary


def summarize(statuses: Sequence[ComplianceStatus]) -> CheckSummary:
    """
    Roll verdicts up into the check's overall status.

    fail beats warning beats pass. No verdicts means no status at all,
    never an implicit pass.
    """
    pass_count = sum(1 for s in statuses if s == ComplianceStatus.PASS)
    warning_count = sum(1 for s in statuses if s == ComplianceStatus.WARNING)
    fail_count = sum(1 for s in statuses if s == ComplianceStatus.FAIL)

    if not statuses:
        overall = None
    elif fail_count > 0:
        overall = ComplianceStatus.FAIL
    elif warning_count > 0:
        overall = ComplianceStatus.WARNING
    else:
        overall = ComplianceStatus.PASS

    return CheckSummary(
        overall_status=overall,
        pass_count=pass_count,
        warning_count=warning_count,
        fail_count=fail_count,
    )
