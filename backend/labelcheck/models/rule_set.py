# RuleSet and ComplianceRule

# A rule set groups the labeling rules of one (state, product type) pair.
# Rules are either written by an admin or imported from the external
# rule-extraction service (source_citation + generation_status).

from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import StrEnum
import uuid
from labelcheck.database import Base


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class ProductType(StrEnum):
    FLOWER = "flower"
    EDIBLES = "edibles"
    CONCENTRATES = "concentrates"
    TOPICALS = "topicals"

class RuleSeverity(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

class RuleCategory(StrEnum):
    REQUIRED_WARNINGS = "Required Warnings"
    SYMBOLS_AND_ICONS = "Symbols & Icons"
    INGREDIENT_PANELS = "Ingredient Panels"
    NET_WEIGHT_FORMAT = "Net Weight Format"
    PLACEMENT_RULES = "Placement Rules"
    THC_CONTENT = "THC Content"
    MANUFACTURER_INFO = "Manufacturer Info"
    BATCH_AND_TESTING = "Batch & Testing"
    GENERAL = "General"

class GenerationStatus(StrEnum):
    # Provenance of the last import pass that touched the rule
    NEW = "new"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class RuleSet(Base):
    __tablename__ = "rule_sets"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String, ForeignKey("users.id"), nullable=False)
    organization_id = Column(String, ForeignKey("organizations.id"), nullable=False, index=True)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    state_name = Column(String, nullable=True)
    state_abbreviation = Column(String, nullable=True)
    product_type = Column(SQLEnum(ProductType, name="product_type", values_callable=_enum_values), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    organization = relationship("Organization", back_populates="rule_sets")
    owner = relationship("User")
    rules = relationship("ComplianceRule", back_populates="rule_set", cascade="all, delete-orphan")
    checks = relationship("ComplianceCheck", back_populates="rule_set", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<RuleSet(id = {self.id}, name = {self.name}, state = {self.state_abbreviation}, product_type = {self.product_type})>"


class ComplianceRule(Base):
    __tablename__ = "compliance_rules"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    rule_set_id = Column(String, ForeignKey("rule_sets.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(RuleCategory, name="rule_category", values_callable=_enum_values), nullable=False)
    severity = Column(SQLEnum(RuleSeverity, name="rule_severity", values_callable=_enum_values), nullable=False, default=RuleSeverity.ERROR)
    validation_prompt = Column(Text, nullable=False)

    # Filled by the rule generation importer
    source_citation = Column(String, nullable=True, index=True)
    generation_status = Column(SQLEnum(GenerationStatus, name="generation_status", values_callable=_enum_values), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    rule_set = relationship("RuleSet", back_populates="rules")
    # Deleting a rule drops its results; generated-rule results have no rule_id and survive
    results = relationship("CheckResult", back_populates="rule", cascade="all, delete")

    def __repr__(self):
        return f"<ComplianceRule(id = {self.id}, name = {self.name}, category = {self.category})>"
