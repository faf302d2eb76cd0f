from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from datetime import datetime
from labelcheck.models import ComplianceCheck, ComplianceStatus


def create_check(db: Session, user_id: str, rule_set_id: str, product_name: Optional[str] = None) -> ComplianceCheck:

    check = ComplianceCheck(
        user_id=user_id,
        rule_set_id=rule_set_id,
        product_name=product_name
    )

    db.add(check)
    db.commit()
    db.refresh(check)

    return check


def get_check(db: Session, check_id: str) -> Optional[ComplianceCheck]:

    return db.query(ComplianceCheck).filter(ComplianceCheck.id == check_id).first()


def get_user_check(db: Session, check_id: str, user_id: str) -> Optional[ComplianceCheck]:

    return (
        db.query(ComplianceCheck)
        .options(joinedload(ComplianceCheck.rule_set))
        .filter(ComplianceCheck.id == check_id, ComplianceCheck.user_id == user_id)
        .first()
    )


def get_user_checks(db: Session, user_id: str) -> List[ComplianceCheck]:

    return (
        db.query(ComplianceCheck)
        .options(joinedload(ComplianceCheck.rule_set))
        .filter(ComplianceCheck.user_id == user_id)
        .order_by(ComplianceCheck.created_at.desc())
        .all()
    )


def get_stale_incomplete_checks(db: Session, user_id: str, created_before: datetime) -> List[ComplianceCheck]:

    return (
        db.query(ComplianceCheck)
        .filter(
            ComplianceCheck.user_id == user_id,
            ComplianceCheck.completed_at.is_(None),
            ComplianceCheck.created_at < created_before
        )
        .all()
    )


def mark_completed(
    db: Session,
    check: ComplianceCheck,
    overall_status: ComplianceStatus,
    pass_count: int,
    warning_count: int,
    fail_count: int
) -> None:
    """Stage the completion fields; the caller commits them with the results"""
    check.overall_status = overall_status
    check.pass_count = pass_count
    check.warning_count = warning_count
    check.fail_count = fail_count
    check.completed_at = datetime.now()


def delete_check(db: Session, check_id: str) -> bool:
    """Delete a check with its panels and results. Deleting a missing check is a no-op."""
    check = get_check(db, check_id)
    if not check:
        return False

    db.delete(check)
    db.commit()

    return True
