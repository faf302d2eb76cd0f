from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from labelcheck.database import get_db
from labelcheck.models import User
from labelcheck.schema import (
    CheckCreate, CheckResponse, CheckDetailResponse, CleanupResponse,
    AnalyzeRequest, AnalyzeResponse
)
from labelcheck.services.check_service import check_service
from labelcheck.services.analysis import CheckOrchestrator
from labelcheck.api.deps import get_current_user, get_orchestrator

router = APIRouter(prefix="/checks", tags=["checks"])
analyze_router = APIRouter(tags=["checks"])

@router.get("", response_model=List[CheckResponse])
def list_checks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    return check_service.list_checks(db, current_user)

@router.post("", response_model=CheckResponse, status_code=status.HTTP_201_CREATED)
def create_check(
    check_data: CheckCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    return check_service.create_check(db, current_user, check_data)

@router.post("/cleanup", response_model=CleanupResponse)
def cleanup_checks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    return check_service.cleanup_stale_checks(db, current_user)

@router.get("/{check_id}", response_model=CheckDetailResponse)
def get_check(
    check_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    return check_service.get_check_detail(db, current_user, check_id)

@router.delete("/{check_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_check(
    check_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):

    check_service.delete_check(db, current_user, check_id)

@analyze_router.post("/analyze", response_model=AnalyzeResponse)
def analyze_check(
    request: AnalyzeRequest,
    current_user: User = Depends(get_current_user),
    orchestrator: CheckOrchestrator = Depends(get_orchestrator),
    db: Session = Depends(get_db)
):

    return orchestrator.analyze(db, request.check_id, current_user.id)
