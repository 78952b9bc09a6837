from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.dialects import mysql
from datetime import datetime
from .db import Base
from sqlalchemy.orm import relationship

MAX_IDENTIFIER_LENGTH = 64

# identifiers compare case-sensitively, MySQL's default collation does not
Identifier = String(MAX_IDENTIFIER_LENGTH).with_variant(mysql.VARCHAR(MAX_IDENTIFIER_LENGTH, collation="utf8mb4_bin"), "mysql")


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(Identifier, unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)

    sessions = relationship("SessionToken", back_populates="user", cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        return {"userId": self.id, "identifiant": self.username}


class SessionToken(Base):
    __tablename__ = "sessions"
    id = Column(Integer, primary_key=True, index=True)
    token = Column(String(512), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)

    user = relationship("User", back_populates="sessions")
