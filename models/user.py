from sqlalchemy import Column, Integer, String, Boolean
from models.base import Base, TimestampMixin

class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), default="student", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
