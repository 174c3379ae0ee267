"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    user: 사용자 (Users with role)
    property: 숙소, 방, 숙소-방 피벗, 작업, 방-작업 배정 (Property, Room, PropertyRoom, Task, RoomTask)
    checklist: 체크리스트 및 항목 (Checklists and checklist items)
"""

from app.models.user import User
from app.models.property import Property, Room, PropertyRoom, Task, RoomTask
from app.models.checklist import Checklist, ChecklistItem

__all__ = [
    "User",
    "Property", "Room", "PropertyRoom", "Task", "RoomTask",
    "Checklist", "ChecklistItem",
]
