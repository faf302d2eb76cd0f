from fastapi import APIRouter, Depends
from typing import List
from labelcheck.models import User
from labelcheck.schema import StateResponse
from labelcheck.api.deps import get_current_user

router = APIRouter(prefix="/states", tags=["reference"])

# States with legal adult-use cannabis, offered when creating a rule set
LEGAL_STATES = [
    ("Alaska", "AK"),
    ("Arizona", "AZ"),
    ("California", "CA"),
    ("Colorado", "CO"),
    ("Connecticut", "CT"),
    ("Delaware", "DE"),
    ("District of Columbia", "DC"),
    ("Illinois", "IL"),
    ("Maine", "ME"),
    ("Maryland", "MD"),
    ("Massachusetts", "MA"),
    ("Michigan", "MI"),
    ("Minnesota", "MN"),
    ("Missouri", "MO"),
    ("Montana", "MT"),
    ("Nevada", "NV"),
    ("New Hampshire", "NH"),
    ("New Jersey", "NJ"),
    ("New Mexico", "NM"),
    ("New York", "NY"),
    ("Ohio", "OH"),
    ("Oregon", "OR"),
    ("Rhode Island", "RI"),
    ("Vermont", "VT"),
    ("Virginia", "VA"),
    ("Washington", "WA"),
]


def state_id(name: str) -> str:
    return name.lower().replace(" ", "-")

@router.get("", response_model=List[StateResponse])
def list_states(current_user: User = Depends(get_current_user)):

    return [StateResponse(id=state_id(name), name=name, abbreviation=abbr) for name, abbr in LEGAL_STATES]
