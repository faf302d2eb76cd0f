from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from labelcheck.database import Base

# An organization owns rule sets; every member can read them, admins can change them
class Organization(Base):
    __tablename__ = "organizations"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    users = relationship("User", back_populates="organization")
    rule_sets = relationship("RuleSet", back_populates="organization")

    def __repr__(self):
        return f"<Organization(id = {self.id}, name = {self.name})>"
