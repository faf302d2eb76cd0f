from sqlalchemy.orm import Session
from typing import Optional
from labelcheck.models import User, Organization, UserRole

def get_user_by_id(db: Session, user_id: str) -> Optional[User]:

    return db.query(User).filter(User.id == user_id).first()

def create_organization(db: Session, name: str) -> Organization:

    organization = Organization(name = name)

    db.add(organization)
    db.commit()
    db.refresh(organization)

    return organization

def create_user(db: Session, email: str, organization_id: str, role: UserRole = UserRole.MEMBER) -> User:

    user = User(
        email = email,
        organization_id = organization_id,
        role = role
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    return user
