from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from functools import lru_cache
from typing import Optional
from sqlalchemy.orm import Session
from labelcheck.core.config import settings
from labelcheck.core.security import decode_access_token
from labelcheck.database import get_db
from labelcheck.models.user import User
from labelcheck.crud import crud_user
from labelcheck.exceptions.auth_exceptions import NotAuthenticatedException
from labelcheck.services.analysis import ModelClient, CheckOrchestrator, build_orchestrator
from labelcheck.services.rule_generation import RuleExtractionClient, RuleImporter
from labelcheck.services.storage import ObjectStore, build_object_store

# auto_error=False so a missing header becomes our 401 instead of FastAPI's 403
security = HTTPBearer(auto_error=False)

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:

    if credentials is None:
        raise NotAuthenticatedException()

    payload = decode_access_token(credentials.credentials)

    if payload is None:
        raise NotAuthenticatedException()

    user_id: str = payload.get("sub")

    if user_id is None:
        raise NotAuthenticatedException()

    user = crud_user.get_user_by_id(db, user_id)

    if user is None:
        raise NotAuthenticatedException()

    return user


# Collaborators; tests swap these through app.dependency_overrides
@lru_cache
def get_object_store() -> ObjectStore:
    return build_object_store(settings)


@lru_cache
def get_model_client() -> ModelClient:
    return ModelClient()


def get_extraction_client() -> RuleExtractionClient:
    return RuleExtractionClient()


def get_rule_importer(client: RuleExtractionClient = Depends(get_extraction_client)) -> RuleImporter:
    return RuleImporter(client)


def get_orchestrator(
    model_client: ModelClient = Depends(get_model_client),
    store: ObjectStore = Depends(get_object_store)
) -> CheckOrchestrator:
    return build_orchestrator(model_client, store)
