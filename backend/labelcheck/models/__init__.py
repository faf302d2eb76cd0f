"""
Models Package

Exports all SQLAlchemy models and enums for the label compliance service.
"""

from labelcheck.database import Base, engine

from .organization import Organization
from .user import User, UserRole

from .rule_set import (
    RuleSet,
    ComplianceRule,
    ProductType,
    RuleSeverity,
    RuleCategory,
    GenerationStatus
)

from .compliance_check import (
    ComplianceCheck,
    PanelUpload,
    CheckResult,
    ComplianceStatus,
    PanelType
)

from .provenance import PersistedRuleRef, GeneratedRuleRef, ResultProvenance

__all__ = [
    "Base",
    "engine",
    "Organization",
    "User",
    "UserRole",
    "RuleSet",
    "ComplianceRule",
    "ProductType",
    "RuleSeverity",
    "RuleCategory",
    "GenerationStatus",
    "ComplianceCheck",
    "PanelUpload",
    "CheckResult",
    "ComplianceStatus",
    "PanelType",
    "PersistedRuleRef",
    "GeneratedRuleRef",
    "ResultProvenance",
]
