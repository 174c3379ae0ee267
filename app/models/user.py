"""사용자 관련 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definition.
Users carry a single role string that decides which checklist
operations they may perform.

Tables:
    - users: 사용자 계정 (User accounts: admins, property owners, housekeepers)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 역할 이름 — Role names
ROLE_ADMIN: str = "admin"
ROLE_PROPERTY_OWNER: str = "property_owner"
ROLE_HOUSEKEEPER: str = "housekeeper"


class User(Base):
    """사용자 모델 — 시스템 사용자 계정 정보.

    User model — System user account information.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 표시 이름 (Display name)
        email: 이메일 주소 (Email address, unique)
        role: 역할 (Role: "admin", "property_owner", "housekeeper")
        is_active: 활성 상태 (Whether the account can authenticate)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 표시 이름 — Display name shown on checklists
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 이메일 — Unique email address
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    # 역할 — "admin" | "property_owner" | "housekeeper"
    role: Mapped[str] = mapped_column(String(30), nullable=False, default=ROLE_HOUSEKEEPER)
    # 활성 상태 — Inactive users are rejected at authentication
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
