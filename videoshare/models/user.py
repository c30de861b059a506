import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from videoshare.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)  # matched exactly, case-sensitive
    password = Column(String(255), nullable=False)  # argon2 hash
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
