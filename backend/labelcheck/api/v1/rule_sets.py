from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from labelcheck.database import get_db
from labelcheck.models import User
from labelcheck.schema import (
    RuleSetCreate, RuleSetUpdate, RuleSetResponse,
    RuleCreate, RuleUpdate, RuleResponse, GenerateRulesResponse
)
from labelcheck.services.rule_set_service import rule_set_service
from labelcheck.services.rule_generation import RuleImporter
from labelcheck.api.deps import get_current_user, get_rule_importer

router = APIRouter(prefix="/rule-sets", tags=["rules"])

@router.get("", response_model=List[RuleSetResponse])
def list_rule_sets(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    return rule_set_service.list_rule_sets(db, current_user)

@router.post("", response_model=RuleSetResponse, status_code=status.HTTP_201_CREATED)
def create_rule_set(
    rule_set_data: RuleSetCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    return rule_set_service.create_rule_set(db, current_user, rule_set_data)

@router.get("/{rule_set_id}", response_model=RuleSetResponse)
def get_rule_set(
    rule_set_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    return rule_set_service.get_rule_set(db, current_user, rule_set_id)

@router.put("/{rule_set_id}", response_model=RuleSetResponse)
def update_rule_set(
    rule_set_id: str,
    rule_set_data: RuleSetUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    return rule_set_service.update_rule_set(db, current_user, rule_set_id, rule_set_data)

@router.delete("/{rule_set_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rule_set(
    rule_set_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    rule_set_service.delete_rule_set(db, current_user, rule_set_id)

# Rules
@router.get("/{rule_set_id}/rules", response_model=List[RuleResponse])
def list_rules(
    rule_set_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    return rule_set_service.list_rules(db, current_user, rule_set_id)

@router.post("/{rule_set_id}/rules", response_model=RuleResponse, status_code=status.HTTP_201_CREATED)
def create_rule(
    rule_set_id: str,
    rule_data: RuleCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    return rule_set_service.create_rule(db, current_user, rule_set_id, rule_data)

@router.put("/{rule_set_id}/rules/{rule_id}", response_model=RuleResponse)
def update_rule(
    rule_set_id: str,
    rule_id: str,
    rule_data: RuleUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    return rule_set_service.update_rule(db, current_user, rule_set_id, rule_id, rule_data)

@router.delete("/{rule_set_id}/rules/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rule(
    rule_set_id: str,
    rule_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    rule_set_service.delete_rule(db, current_user, rule_set_id, rule_id)

# Blocks for as long as the extraction service takes (up to ~10 minutes)
@router.post("/{rule_set_id}/generate", response_model=GenerateRulesResponse)
def generate_rules(
    rule_set_id: str,
    current_user: User = Depends(get_current_user),
    importer: RuleImporter = Depends(get_rule_importer),
    db: Session = Depends(get_db)
):

    return rule_set_service.generate_rules(db, current_user, rule_set_id, importer)
