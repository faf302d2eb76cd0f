# ComplianceCheck, PanelUpload, CheckResult

# One check is one run of label validation against a rule set.
# overall_status, the counters and completed_at are only ever written
# together, when the orchestrator completes the check.

from sqlalchemy import (
    Column, String, Text, Integer, Boolean, DateTime, ForeignKey, JSON,
    CheckConstraint, Enum as SQLEnum
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import StrEnum
import uuid
from labelcheck.database import Base
from .provenance import PersistedRuleRef, GeneratedRuleRef, ResultProvenance


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class ComplianceStatus(StrEnum):
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"

class PanelType(StrEnum):
    FRONT = "front"
    BACK = "back"
    LEFT_SIDE = "left_side"
    RIGHT_SIDE = "right_side"
    EXIT_BAG = "exit_bag"
    OTHER = "other"


class ComplianceCheck(Base):
    __tablename__ = "compliance_checks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    rule_set_id = Column(String, ForeignKey("rule_sets.id", ondelete="CASCADE"), nullable=False, index=True)
    product_name = Column(String, nullable=True)

    # Null until the check completes
    overall_status = Column(SQLEnum(ComplianceStatus, name="compliance_status", values_callable=_enum_values), nullable=True)
    pass_count = Column(Integer, default=0, nullable=False)
    warning_count = Column(Integer, default=0, nullable=False)
    fail_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.now, index=True)
    completed_at = Column(DateTime, nullable=True)

    rule_set = relationship("RuleSet", back_populates="checks")
    panels = relationship("PanelUpload", back_populates="check", cascade="all, delete-orphan", order_by="PanelUpload.position")
    results = relationship("CheckResult", back_populates="check", cascade="all, delete-orphan", order_by="CheckResult.position")

    def __repr__(self):
        return f"<ComplianceCheck(id = {self.id}, rule_set_id = {self.rule_set_id}, overall_status = {self.overall_status})>"


class PanelUpload(Base):
    __tablename__ = "panel_uploads"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    compliance_check_id = Column(String, ForeignKey("compliance_checks.id", ondelete="CASCADE"), nullable=False, index=True)
    panel_type = Column(SQLEnum(PanelType, name="panel_type", values_callable=_enum_values), nullable=False)
    blob_url = Column(String, nullable=False)
    file_name = Column(String, nullable=False)

    # Upload order within the check; later panels win scalar collisions when merging
    position = Column(Integer, nullable=False, default=0)

    # Written once by the extraction step
    extracted_data = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    created_at = Column(DateTime, default=datetime.now)

    check = relationship("ComplianceCheck", back_populates="panels")


class CheckResult(Base):
    __tablename__ = "check_results"
    __table_args__ = (
        # Exactly one provenance form: a stored rule, or inline generated-rule data
        CheckConstraint(
            "(rule_id IS NOT NULL AND is_generated_rule = false AND generated_rule_name IS NULL) OR "
            "(rule_id IS NULL AND is_generated_rule = true AND generated_rule_name IS NOT NULL)",
            name="check_results_rule_source"
        ),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    compliance_check_id = Column(String, ForeignKey("compliance_checks.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    status = Column(SQLEnum(ComplianceStatus, name="compliance_status", values_callable=_enum_values), nullable=False)
    found_value = Column(Text, nullable=True)
    expected_value = Column(Text, nullable=True)
    explanation = Column(Text, nullable=True)

    rule_id = Column(String, ForeignKey("compliance_rules.id", ondelete="CASCADE"), nullable=True, index=True)
    is_generated_rule = Column(Boolean, default=False, nullable=False, index=True)
    generated_rule_name = Column(String, nullable=True)
    generated_rule_description = Column(Text, nullable=True)
    generated_rule_category = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.now)

    check = relationship("ComplianceCheck", back_populates="results")
    rule = relationship("ComplianceRule", back_populates="results")

    @property
    def provenance(self) -> ResultProvenance:
        if self.rule_id is not None:
            return PersistedRuleRef(rule_id=self.rule_id)
        return GeneratedRuleRef(
            name=self.generated_rule_name,
            description=self.generated_rule_description,
            category=self.generated_rule_category
        )

    @provenance.setter
    def provenance(self, value: ResultProvenance) -> None:
        if isinstance(value, PersistedRuleRef):
            self.rule_id = value.rule_id
            self.is_generated_rule = False
            self.generated_rule_name = None
            self.generated_rule_description = None
            self.generated_rule_category = None
        elif isinstance(value, GeneratedRuleRef):
            self.rule_id = None
            self.is_generated_rule = True
            self.generated_rule_name = value.name
            self.generated_rule_description = value.description
            self.generated_rule_category = value.category
        else:
            raise TypeError(f"Unknown result provenance: {value!r}")
