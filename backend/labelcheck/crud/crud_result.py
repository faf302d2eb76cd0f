from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from labelcheck.models import CheckResult, ComplianceStatus, ResultProvenance


def add_result(
    db: Session,
    check_id: str,
    position: int,
    status: ComplianceStatus,
    provenance: ResultProvenance,
    found_value: Optional[str] = None,
    expected_value: Optional[str] = None,
    explanation: Optional[str] = None
) -> CheckResult:
    """Stage one result row; committed together with the check's completion"""
    result = CheckResult(
        compliance_check_id=check_id,
        position=position,
        status=status,
        found_value=found_value,
        expected_value=expected_value,
        explanation=explanation
    )
    result.provenance = provenance

    db.add(result)

    return result


def get_check_results(db: Session, check_id: str) -> List[CheckResult]:

    return (
        db.query(CheckResult)
        .options(joinedload(CheckResult.rule))
        .filter(CheckResult.compliance_check_id == check_id)
        .order_by(CheckResult.position)
        .all()
    )


def delete_check_results(db: Session, check_id: str) -> int:
    """Stage removal of a check's previous results before a re-run writes new ones"""
    results = db.query(CheckResult).filter(CheckResult.compliance_check_id == check_id).all()
    for result in results:
        db.delete(result)

    return len(results)
