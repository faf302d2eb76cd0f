from sqlalchemy.orm import Session
from typing import List
from labelcheck.crud import crud_rule_set, crud_rule
from labelcheck.models import User, RuleSet, ComplianceRule
from labelcheck.schema import (
    RuleSetCreate, RuleSetUpdate, RuleSetResponse,
    RuleCreate, RuleUpdate, RuleResponse, GenerateRulesResponse
)
from labelcheck.exceptions.auth_exceptions import ForbiddenException
from labelcheck.exceptions.rule_exceptions import RuleSetNotFoundException, RuleNotFoundException
from labelcheck.services.rule_generation import RuleImporter


class RuleSetService:
    # Members of the organization read, admins write

    def _require_admin(self, user: User) -> None:
        if not user.is_admin:
            raise ForbiddenException()

    def _get_rule_set(self, db: Session, user: User, rule_set_id: str) -> RuleSet:

        rule_set = crud_rule_set.get_org_rule_set(db, rule_set_id, user.organization_id)
        if not rule_set:
            raise RuleSetNotFoundException()
        return rule_set

    def _get_rule(self, db: Session, rule_set: RuleSet, rule_id: str) -> ComplianceRule:

        rule = crud_rule.get_rule(db, rule_set.id, rule_id)
        if not rule:
            raise RuleNotFoundException()
        return rule

    def _to_response(self, rule_set: RuleSet, rules_count: int) -> RuleSetResponse:

        response = RuleSetResponse.model_validate(rule_set)
        response.rules_count = rules_count
        return response

    # Rule sets
    def list_rule_sets(self, db: Session, user: User) -> List[RuleSetResponse]:

        rows = crud_rule_set.get_org_rule_sets_with_counts(db, user.organization_id)
        return [self._to_response(rule_set, count) for rule_set, count in rows]

    def get_rule_set(self, db: Session, user: User, rule_set_id: str) -> RuleSetResponse:

        rule_set = self._get_rule_set(db, user, rule_set_id)
        return self._to_response(rule_set, crud_rule_set.count_rules(db, rule_set.id))

    def create_rule_set(self, db: Session, user: User, rule_set_data: RuleSetCreate) -> RuleSetResponse:

        self._require_admin(user)
        rule_set = crud_rule_set.create_rule_set(db, user.id, user.organization_id, rule_set_data)
        return self._to_response(rule_set, 0)

    def update_rule_set(self, db: Session, user: User, rule_set_id: str, rule_set_data: RuleSetUpdate) -> RuleSetResponse:

        self._require_admin(user)
        rule_set = self._get_rule_set(db, user, rule_set_id)
        rule_set = crud_rule_set.update_rule_set(db, rule_set, rule_set_data)
        return self._to_response(rule_set, crud_rule_set.count_rules(db, rule_set.id))

    def delete_rule_set(self, db: Session, user: User, rule_set_id: str) -> None:

        self._require_admin(user)
        rule_set = self._get_rule_set(db, user, rule_set_id)
        crud_rule_set.delete_rule_set(db, rule_set)

    # Rules
    def list_rules(self, db: Session, user: User, rule_set_id: str) -> List[RuleResponse]:

        rule_set = self._get_rule_set(db, user, rule_set_id)
        return [RuleResponse.model_validate(r) for r in crud_rule.get_rules(db, rule_set.id)]

    def create_rule(self, db: Session, user: User, rule_set_id: str, rule_data: RuleCreate) -> RuleResponse:

        self._require_admin(user)
        rule_set = self._get_rule_set(db, user, rule_set_id)
        rule = crud_rule.create_rule(db, rule_set.id, rule_data)
        return RuleResponse.model_validate(rule)

    def update_rule(self, db: Session, user: User, rule_set_id: str, rule_id: str, rule_data: RuleUpdate) -> RuleResponse:

        self._require_admin(user)
        rule_set = self._get_rule_set(db, user, rule_set_id)
        rule = self._get_rule(db, rule_set, rule_id)
        rule = crud_rule.update_rule(db, rule, rule_data)
        return RuleResponse.model_validate(rule)

    def delete_rule(self, db: Session, user: User, rule_set_id: str, rule_id: str) -> None:

        self._require_admin(user)
        rule_set = self._get_rule_set(db, user, rule_set_id)
        rule = self._get_rule(db, rule_set, rule_id)
        crud_rule.delete_rule(db, rule)

    def generate_rules(self, db: Session, user: User, rule_set_id: str, importer: RuleImporter) -> GenerateRulesResponse:

        self._require_admin(user)
        rule_set = self._get_rule_set(db, user, rule_set_id)
        return importer.import_rules(db, rule_set)


rule_set_service = RuleSetService()
