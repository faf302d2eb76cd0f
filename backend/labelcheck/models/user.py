from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import StrEnum
import uuid
from labelcheck.database import Base


class UserRole(StrEnum):
    ADMIN = "admin"
    MEMBER = "member"

# Users are provisioned by the external auth/admin layer; we only keep
# what is needed to scope rule sets and checks
class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, nullable=False)
    organization_id = Column(String, ForeignKey("organizations.id"), nullable=False, index=True)
    role = Column(SQLEnum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]), nullable=False, default=UserRole.MEMBER)
    created_at = Column(DateTime, default=datetime.now)

    organization = relationship("Organization", back_populates="users")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
