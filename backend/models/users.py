# backend/models/users.py
from sqlalchemy import Column, Integer, String, DateTime, func
from database import Base

# Back-office account allowed to sign in and obtain a bearer token
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    username = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
