"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from template_market.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(50), nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    refresh_token_hash = Column(String(64))
    role = Column(String(20), nullable=False, default="user")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    last_login_at = Column(DateTime(timezone=True))

    templates = relationship("Template", back_populates="owner", foreign_keys="Template.created_by")


class Template(Base):
    __tablename__ = "templates"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    tags = Column(Text, nullable=False, default="[]")
    category = Column(String(100), index=True)
    tech_stack = Column(String(100))
    price_cents = Column(Integer, nullable=False, default=0)
    preview_image_url = Column(String(1024))
    download_url = Column(String(1024))
    is_premium = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    admin_comment = Column(Text)
    created_by = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    reviewed_by = Column(String(36), ForeignKey("accounts.id"))
    reviewed_at = Column(DateTime(timezone=True))
    demo_url = Column(String(1024))
    has_live_demo = Column(Boolean, nullable=False, default=False)
    demo_deployment_id = Column(String(255), unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    owner = relationship("Account", back_populates="templates", foreign_keys=[created_by])
    reviewer = relationship("Account", foreign_keys=[reviewed_by])
