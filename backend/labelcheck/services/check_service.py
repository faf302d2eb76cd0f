from sqlalchemy.orm import Session
from typing import List
from datetime import datetime, timedelta
import logging
from labelcheck.core.config import settings
from labelcheck.crud import crud_check, crud_panel, crud_result, crud_rule_set
from labelcheck.models import User, CheckResult
from labelcheck.schema import (
    CheckCreate, CheckResponse, CheckDetailResponse, CheckResultResponse,
    PanelResponse, CleanupResponse
)
from labelcheck.exceptions.check_exceptions import CheckNotFoundException
from labelcheck.exceptions.rule_exceptions import RuleSetNotFoundException

logger = logging.getLogger(__name__)


def result_view(result: CheckResult) -> CheckResultResponse:
    """One rule_* view over both provenance forms"""
    rule = result.rule
    if rule is not None:
        rule_name, rule_description = rule.name, rule.description
        rule_category, rule_severity = str(rule.category), rule.severity
    else:
        rule_name, rule_description = result.generated_rule_name, result.generated_rule_description
        rule_category, rule_severity = result.generated_rule_category, None

    return CheckResultResponse(
        id=result.id,
        compliance_check_id=result.compliance_check_id,
        status=result.status,
        found_value=result.found_value,
        expected_value=result.expected_value,
        explanation=result.explanation,
        rule_id=result.rule_id,
        is_generated_rule=result.is_generated_rule,
        generated_rule_name=result.generated_rule_name,
        generated_rule_description=result.generated_rule_description,
        generated_rule_category=result.generated_rule_category,
        rule_name=rule_name,
        rule_description=rule_description,
        rule_category=rule_category,
        rule_severity=rule_severity,
        created_at=result.created_at
    )


class CheckService:

    def create_check(self, db: Session, user: User, check_data: CheckCreate) -> CheckResponse:

        rule_set = crud_rule_set.get_org_rule_set(db, check_data.rule_set_id, user.organization_id)
        if not rule_set:
            raise RuleSetNotFoundException()

        check = crud_check.create_check(db, user.id, rule_set.id, check_data.product_name)
        return CheckResponse.model_validate(check)

    def list_checks(self, db: Session, user: User) -> List[CheckResponse]:

        return [CheckResponse.model_validate(c) for c in crud_check.get_user_checks(db, user.id)]

    def get_check_detail(self, db: Session, user: User, check_id: str) -> CheckDetailResponse:

        check = crud_check.get_user_check(db, check_id, user.id)
        if not check:
            raise CheckNotFoundException()

        return CheckDetailResponse(
            **CheckResponse.model_validate(check).model_dump(),
            panels=[PanelResponse.model_validate(p) for p in crud_panel.get_check_panels(db, check.id)],
            results=[result_view(r) for r in crud_result.get_check_results(db, check.id)]
        )

    def delete_check(self, db: Session, user: User, check_id: str) -> None:
        # Already gone (or never ours) is a no-op
        check = crud_check.get_user_check(db, check_id, user.id)
        if check:
            crud_check.delete_check(db, check.id)

    def cleanup_stale_checks(self, db: Session, user: User) -> CleanupResponse:
        """Reap incomplete checks left behind by interrupted analyses"""
        cutoff = datetime.now() - timedelta(minutes=settings.STALE_CHECK_MINUTES)
        stale = crud_check.get_stale_incomplete_checks(db, user.id, cutoff)

        deleted = 0
        for check in stale:
            if crud_check.delete_check(db, check.id):
                deleted += 1

        if deleted:
            logger.info(f"Removed {deleted} stale incomplete checks for user {user.id}")

        return CleanupResponse(deleted=deleted)


check_service = CheckService()
