"""숙소/방/작업 관련 SQLAlchemy ORM 모델 정의.

Property, room and task SQLAlchemy ORM model definitions.
A property owns an ordered list of rooms through the property_rooms pivot,
which also carries the per-property photo requirement of each room.
Tasks are attached to a room within a specific property via room_tasks.

Tables:
    - properties: 숙소 (Properties with optional geofence anchor)
    - rooms: 방 (Reusable room definitions)
    - property_rooms: 숙소-방 피벗 (Room order and photo requirement per property)
    - tasks: 작업 (Cleaning tasks)
    - room_tasks: 방-작업 배정 (Task assignment to a room within a property)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Float, Integer, Text, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Property(Base):
    """숙소 모델 — 청소 대상 숙소.

    Property model — A cleaning location. Latitude/longitude form the
    geofence anchor used when a housekeeper starts a checklist.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        owner_id: 숙소 소유자 FK (Property owner user, optional)
        name: 숙소 이름 (Property name)
        address: 주소 (Street address)
        latitude: 위도 (Geofence anchor latitude, optional)
        longitude: 경도 (Geofence anchor longitude, optional)

    Relationships:
        room_links: 방 피벗 목록 (Room pivots ordered by order index)
    """

    __tablename__ = "properties"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소유자 FK — Property owner (SET NULL: 사용자 삭제 시 null)
    owner_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # 지오펜스 기준 좌표 — Geofence anchor coordinate
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Room pivots sorted by order (id breaks ties so the order is total)
    room_links = relationship(
        "PropertyRoom",
        back_populates="property",
        cascade="all, delete-orphan",
        order_by=lambda: [PropertyRoom.order, PropertyRoom.id],
    )


class Room(Base):
    """방 모델 — 숙소에 배치되는 방 정의.

    Room model — A named room that can be attached to many properties.
    """

    __tablename__ = "rooms"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class PropertyRoom(Base):
    """숙소-방 피벗 모델 — 방 순서와 사진 요구 조건.

    Property/room pivot model — Visit order of a room within a property
    and its photo-evidence requirement.

    Attributes:
        property_id: 숙소 FK (Property foreign key)
        room_id: 방 FK (Room foreign key)
        order: 방문 순서 (Visit order index, lower = first)
        is_active: 활성 여부 (Inactive rooms are not scheduled)
        requires_photo: 사진 필수 여부 (Whether completion needs photo evidence)
        photos_required_count: 필요 사진 수 (Required photos, 1~10, NULL = no requirement)

    Constraints:
        uq_property_room: 숙소당 방 1회 (A room appears once per property)
    """

    __tablename__ = "property_rooms"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    room_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    # 방문 순서 — Visit order (0-based)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 사진 요구 조건 — Photo requirement (count meaningful only when requires_photo)
    requires_photo: Mapped[bool] = mapped_column(Boolean, default=False)
    photos_required_count: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("property_id", "room_id", name="uq_property_room"),
    )

    property = relationship("Property", back_populates="room_links")
    room = relationship("Room")


class Task(Base):
    """작업 모델 — 방에서 수행하는 청소 작업.

    Task model — A cleaning task. requires_photo is a display hint only;
    the blocking photo threshold lives on the room pivot.
    """

    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 예상 소요 시간(분) — Estimated duration in minutes
    estimated_time: Mapped[int] = mapped_column(Integer, default=0)
    requires_photo: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class RoomTask(Base):
    """방-작업 배정 모델 — 숙소 내 특정 방에 배정된 작업.

    Room task assignment — A task attached to a room within one property.
    Checklist items are derived from these rows at scheduling time.
    """

    __tablename__ = "room_tasks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    room_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    task_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    # 방 내 작업 순서 — Task order inside the room
    order: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        UniqueConstraint("property_id", "room_id", "task_id", name="uq_room_task"),
    )

    task = relationship("Task")
