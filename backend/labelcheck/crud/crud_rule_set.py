from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Optional, Tuple
from datetime import datetime
from labelcheck.models import RuleSet, ComplianceRule
from labelcheck.schema.rule_set import RuleSetCreate, RuleSetUpdate


def create_rule_set(db: Session, owner_id: str, organization_id: str, rule_set_data: RuleSetCreate) -> RuleSet:

    rule_set = RuleSet(
        owner_id=owner_id,
        organization_id=organization_id,
        name=rule_set_data.name,
        description=rule_set_data.description,
        state_name=rule_set_data.state_name,
        state_abbreviation=rule_set_data.state_abbreviation,
        product_type=rule_set_data.product_type
    )

    db.add(rule_set)
    db.commit()
    db.refresh(rule_set)

    return rule_set


def get_rule_set(db: Session, rule_set_id: str) -> Optional[RuleSet]:

    return db.query(RuleSet).filter(RuleSet.id == rule_set_id).first()


def get_org_rule_set(db: Session, rule_set_id: str, organization_id: str) -> Optional[RuleSet]:
    """Rule set by id, only if it belongs to the organization"""
    return db.query(RuleSet).filter(
        RuleSet.id == rule_set_id,
        RuleSet.organization_id == organization_id
    ).first()


def get_org_rule_sets_with_counts(db: Session, organization_id: str) -> List[Tuple[RuleSet, int]]:
    """All rule sets of an organization with their rule counts, newest first"""
    return (
        db.query(RuleSet, func.count(ComplianceRule.id))
        .outerjoin(ComplianceRule, ComplianceRule.rule_set_id == RuleSet.id)
        .filter(RuleSet.organization_id == organization_id)
        .group_by(RuleSet.id)
        .order_by(RuleSet.created_at.desc())
        .all()
    )


def count_rules(db: Session, rule_set_id: str) -> int:

    return db.query(func.count(ComplianceRule.id)).filter(ComplianceRule.rule_set_id == rule_set_id).scalar()


def update_rule_set(db: Session, rule_set: RuleSet, rule_set_data: RuleSetUpdate) -> RuleSet:

    update_data = rule_set_data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(rule_set, field, value)

    rule_set.updated_at = datetime.now()
    db.commit()
    db.refresh(rule_set)

    return rule_set


def delete_rule_set(db: Session, rule_set: RuleSet) -> None:
    # ORM cascade removes rules, checks, panels and results
    db.delete(rule_set)
    db.commit()
