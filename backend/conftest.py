"""
Shared fixtures: an in-memory database per test, one organization with an
admin and a member, scripted stand-ins for the model and the rule-extraction
service, and a filesystem object store under tmp_path.
"""

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from labelcheck.core.security import create_access_token
from labelcheck.crud import crud_check, crud_panel, crud_rule, crud_rule_set, crud_user
from labelcheck.database import build_engine, get_db, init_db
from labelcheck.models import PanelType, ProductType, RuleCategory, UserRole
from labelcheck.schema import RuleCreate, RuleSetCreate
from labelcheck.schema.generation import RuleExtractionResponse
from labelcheck.services.analysis import build_orchestrator
from labelcheck.services.storage import LocalObjectStore, build_object_key
from labelcheck.api import deps
from main import app


class ScriptedModelClient:
    """Answers generate_json calls from a queue; exceptions in the queue are raised"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def generate_json(self, prompt, *, temperature, attachment=None, attachment_name="panel"):
        self.calls.append({
            "prompt": prompt,
            "temperature": temperature,
            "attachment": attachment,
            "attachment_name": attachment_name,
        })
        if not self.responses:
            raise AssertionError("unexpected model call")

        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(prompt)
        return response


class ScriptedExtractionClient:
    """Stands in for RuleExtractionClient; a callable answer sees the request"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def extract_rules(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            response = response(request)
        if isinstance(response, dict):
            response = RuleExtractionResponse.model_validate(response)
        return response


def extraction(raw_text: str, confidence: float = 0.9, **fields) -> Dict[str, Any]:
    """A well-formed extraction answer"""
    data = {
        "rawText": raw_text,
        "extractionConfidence": {"overall": confidence, "fields": {}},
        "flaggedForReview": False,
        "reviewReasons": [],
    }
    data.update(fields)
    return data


def verdicts(*statuses: str, rule_ids: Optional[List[Optional[str]]] = None) -> Dict[str, Any]:
    """An evaluation answer; without rule_ids the verdicts match rules by position"""
    ids = rule_ids or [None] * len(statuses)
    return {
        "results": [
            {
                "ruleId": rule_id,
                "status": status,
                "foundValue": f"found {i}",
                "expectedValue": f"expected {i}",
                "explanation": f"rule {i} is {status}",
            }
            for i, (rule_id, status) in enumerate(zip(ids, statuses))
        ]
    }


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://")
    init_db(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def organization(db):
    return crud_user.create_organization(db, "Green Leaf Co")


@pytest.fixture
def admin(db, organization):
    return crud_user.create_user(db, "admin@greenleaf.test", organization.id, UserRole.ADMIN)


@pytest.fixture
def member(db, organization):
    return crud_user.create_user(db, "member@greenleaf.test", organization.id, UserRole.MEMBER)


@pytest.fixture
def outsider(db):
    other = crud_user.create_organization(db, "Other Org")
    return crud_user.create_user(db, "admin@other.test", other.id, UserRole.ADMIN)


@pytest.fixture
def store(tmp_path):
    return LocalObjectStore(tmp_path / "blobs")


@pytest.fixture
def model_client():
    return ScriptedModelClient()


@pytest.fixture
def extraction_client():
    return ScriptedExtractionClient()


@pytest.fixture
def orchestrator(model_client, store):
    return build_orchestrator(model_client, store)


@pytest.fixture
def make_rule_set(db, admin):
    def _make(state_name: Optional[str] = "Montana", state_abbreviation: Optional[str] = "MT",
              product_type: ProductType = ProductType.EDIBLES, name: str = "Montana Edibles", owner=None):
        owner = owner or admin
        return crud_rule_set.create_rule_set(db, owner.id, owner.organization_id, RuleSetCreate(
            name=name,
            state_name=state_name,
            state_abbreviation=state_abbreviation,
            product_type=product_type
        ))
    return _make


@pytest.fixture
def make_rule(db):
    def _make(rule_set, name: str = "Universal Symbol", category: RuleCategory = RuleCategory.SYMBOLS_AND_ICONS,
              validation_prompt: Optional[str] = None):
        return crud_rule.create_rule(db, rule_set.id, RuleCreate(
            name=name,
            category=category,
            validation_prompt=validation_prompt or f"Check the label for: {name}"
        ))
    return _make


@pytest.fixture
def make_check(db, admin):
    def _make(rule_set, user=None, product_name: Optional[str] = "Gummies"):
        user = user or admin
        return crud_check.create_check(db, user.id, rule_set.id, product_name)
    return _make


@pytest.fixture
def add_panel(db, store):
    def _add(check, panel_type: PanelType = PanelType.FRONT, file_name: str = "front.png", data: bytes = b"\x89PNG front"):
        blob_url = store.put(data, build_object_key(check.user_id, file_name), "image/png")
        return crud_panel.create_panel(db, check.id, panel_type, blob_url, file_name)
    return _add


@pytest.fixture
def auth_headers():
    def _headers(user) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}
    return _headers


@pytest.fixture
def client(session_factory, model_client, extraction_client, store):

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_model_client] = lambda: model_client
    app.dependency_overrides[deps.get_extraction_client] = lambda: extraction_client
    app.dependency_overrides[deps.get_object_store] = lambda: store

    yield TestClient(app)

    app.dependency_overrides.clear()
