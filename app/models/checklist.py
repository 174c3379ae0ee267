"""체크리스트 관련 SQLAlchemy ORM 모델 정의.

Checklist SQLAlchemy ORM model definitions.
A checklist is one scheduled cleaning visit of a housekeeper to a property.
Its items are created once per (room, task) pairing at scheduling time and
are only ever mutated through the checklist engine services.

Tables:
    - checklists: 체크리스트 (Scheduled cleaning visits with lifecycle status)
    - checklist_items: 체크리스트 항목 (One row per room/task pairing in a checklist)
"""

import uuid
from datetime import date, datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Date, Integer, Text, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, JSONType

# 체크리스트 상태 — Lifecycle states, in the only order they may be visited
STATUS_PENDING: str = "pending"
STATUS_IN_PROGRESS: str = "in_progress"
STATUS_COMPLETED: str = "completed"
STATUS_REVIEWED: str = "reviewed"
CHECKLIST_STATUSES: tuple[str, ...] = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_REVIEWED)


class Checklist(Base):
    """체크리스트 모델 — 숙소 1곳에 대한 예약된 청소 방문.

    Checklist model — One scheduled cleaning visit assigned to one housekeeper.
    Status only moves forward: "pending" → "in_progress" → "completed" → "reviewed".

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        property_id: 숙소 FK (Property being cleaned)
        housekeeper_id: 담당 하우스키퍼 FK (Assigned worker)
        scheduled_date: 예약 날짜 (Scheduled date)
        scheduled_time: 예약 시각, 선택 (Scheduled time, optional)
        status: 진행 상태 (Lifecycle status)
        rating: 평점 1~5 (Review rating, set on review)
        notes: 리뷰 메모 (Review notes)
        version: 낙관적 잠금 버전 (Optimistic concurrency version stamp)

    Relationships:
        items: 체크리스트 항목 목록 (Items ordered by position)
        property: 대상 숙소 (Property with ordered rooms)
    """

    __tablename__ = "checklists"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 숙소 FK — Property (CASCADE: 숙소 삭제 시 체크리스트도 삭제)
    property_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    # 담당자 FK — Assigned housekeeper
    housekeeper_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False)
    scheduled_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 진행 상태 — Workflow status: "pending" → "in_progress" → "completed" → "reviewed"
    status: Mapped[str] = mapped_column(String(20), default=STATUS_PENDING, nullable=False)
    # 리뷰 — Rating and notes, writable only once status is "completed"
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 전이 시각 — Transition timestamps (UTC)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 버전 — Incremented on every UPDATE; a stale writer fails its flush
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __mapper_args__ = {"version_id_col": version}

    # 관계 — Items in creation order (room order, then task order)
    items = relationship("ChecklistItem", back_populates="checklist", cascade="all, delete-orphan", order_by="ChecklistItem.position")
    property = relationship("Property", foreign_keys=[property_id])
    housekeeper = relationship("User", foreign_keys=[housekeeper_id], lazy="noload")


class ChecklistItem(Base):
    """체크리스트 항목 모델 — 체크리스트 내 방 1개의 작업 1개.

    Checklist item model — One task in one room of one checklist.
    Once completed is true the row is locked: notes, photos and completed
    never change again.

    Attributes:
        checklist_id: 소속 체크리스트 FK (Parent checklist)
        task_id: 작업 FK (Task to perform)
        room_id: 방 FK (Room the task belongs to)
        position: 항목 순서 (Creation order within the checklist)
        completed: 완료 여부 (Completion flag, one-way)
        notes: 메모 (Worker notes)
        photos: 사진 기록 목록 (List of {"path", "uploaded_at"} records)
        completed_at: 완료 일시 (Completion timestamp)
    """

    __tablename__ = "checklist_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    checklist_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("checklists.id", ondelete="CASCADE"), nullable=False)
    task_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    room_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 사진 기록 — Photo records stored verbatim from the upload service
    photos: Mapped[list[dict]] = mapped_column(JSONType, nullable=False, default=list)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    checklist = relationship("Checklist", back_populates="items")
    task = relationship("Task")
