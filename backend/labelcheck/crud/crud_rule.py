from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime
from labelcheck.models import ComplianceRule, RuleCategory, RuleSeverity, GenerationStatus
from labelcheck.schema.rule_set import RuleCreate, RuleUpdate


def create_rule(db: Session, rule_set_id: str, rule_data: RuleCreate) -> ComplianceRule:

    rule = ComplianceRule(
        rule_set_id=rule_set_id,
        name=rule_data.name,
        description=rule_data.description or rule_data.name,
        category=rule_data.category,
        severity=rule_data.severity,
        validation_prompt=rule_data.validation_prompt
    )

    db.add(rule)
    db.commit()
    db.refresh(rule)

    return rule


def create_imported_rule(
    db: Session,
    rule_set_id: str,
    name: str,
    description: str,
    category: RuleCategory,
    source_citation: str,
    generation_status: GenerationStatus
) -> ComplianceRule:
    """Insert a rule coming from the external rule-extraction service"""
    rule = ComplianceRule(
        rule_set_id=rule_set_id,
        name=name,
        description=description,
        category=category,
        severity=RuleSeverity.ERROR,
        validation_prompt=description,
        source_citation=source_citation,
        generation_status=generation_status
    )

    db.add(rule)
    db.commit()
    db.refresh(rule)

    return rule


def get_rule(db: Session, rule_set_id: str, rule_id: str) -> Optional[ComplianceRule]:

    return db.query(ComplianceRule).filter(
        ComplianceRule.id == rule_id,
        ComplianceRule.rule_set_id == rule_set_id
    ).first()


def get_rules(db: Session, rule_set_id: str) -> List[ComplianceRule]:

    return (
        db.query(ComplianceRule)
        .filter(ComplianceRule.rule_set_id == rule_set_id)
        .order_by(ComplianceRule.category, ComplianceRule.name)
        .all()
    )


def get_active_rules(db: Session, rule_set_id: str) -> List[ComplianceRule]:

    return (
        db.query(ComplianceRule)
        .filter(ComplianceRule.rule_set_id == rule_set_id, ComplianceRule.is_active.is_(True))
        .order_by(ComplianceRule.created_at)
        .all()
    )


def update_rule(db: Session, rule: ComplianceRule, rule_data: RuleUpdate) -> ComplianceRule:

    update_data = rule_data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(rule, field, value)

    rule.updated_at = datetime.now()
    db.commit()
    db.refresh(rule)

    return rule


def apply_imported_update(
    db: Session,
    rule: ComplianceRule,
    name: str,
    description: str,
    category: RuleCategory,
    generation_status: GenerationStatus
) -> ComplianceRule:
    """Overwrite a rule in place with the text of a newer import"""
    rule.name = name
    rule.description = description
    rule.validation_prompt = description
    rule.category = category
    rule.generation_status = generation_status
    rule.updated_at = datetime.now()

    db.commit()
    db.refresh(rule)

    return rule


def delete_rule(db: Session, rule: ComplianceRule) -> None:
    # Cascades to the check results that reference this rule
    db.delete(rule)
    db.commit()
