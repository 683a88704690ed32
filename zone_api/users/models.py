from sqlalchemy import Column, DateTime, Integer, String, Boolean, Text, func
from sqlalchemy.orm import relationship
from ..database.database import Base

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False)
    password_hash = Column(String(255), nullable=False)

    # Perfil (editable desde PUT /users/me)
    bio = Column(Text, nullable=True)
    phone = Column(String(30), nullable=True)
    gender = Column(String(30), nullable=True)
    profile_image_url = Column(String(500), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    zones = relationship("Zone", back_populates="user")
