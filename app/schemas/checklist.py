"""체크리스트 Pydantic 요청/응답 스키마 정의.

Checklist Pydantic request/response schema definitions.
Covers checklist scheduling, the lifecycle requests of the mobile app
(start, item submission, completion) and the admin review and room
photo requirement inputs.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator


# === 요청 (Requests) ===

class ChecklistCreate(BaseModel):
    """체크리스트 생성 요청 스키마.

    Checklist creation request schema. Items are derived from the
    property's active rooms and their assigned tasks.

    Attributes:
        property_id: 숙소 UUID (Property identifier)
        housekeeper_id: 담당 하우스키퍼 UUID (Assigned housekeeper identifier)
        scheduled_date: 예약일 (Scheduled date)
        scheduled_time: 예약 시각, 선택 (Scheduled time, optional)
    """

    property_id: str  # 숙소 UUID (Property identifier)
    housekeeper_id: str  # 담당자 UUID (Housekeeper identifier)
    scheduled_date: date  # 예약일 (Scheduled date)
    scheduled_time: datetime | None = None  # 예약 시각 (Scheduled time, optional)


class ChecklistStartRequest(BaseModel):
    """체크리스트 시작 요청 스키마 — 기기에서 측정한 위치.

    Checklist start request carrying the device's location fix. Both
    coordinates are omitted when the device could not get a fix.
    """

    latitude: float | None = Field(default=None, ge=-90, le=90)  # 위도 (Latitude)
    longitude: float | None = Field(default=None, ge=-180, le=180)  # 경도 (Longitude)

    @model_validator(mode="after")
    def _both_or_neither(self) -> "ChecklistStartRequest":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be sent together")
        return self


class ChecklistItemSubmit(BaseModel):
    """체크리스트 항목 제출 요청 스키마.

    Item submission request schema.

    Attributes:
        notes: 메모, 선택 (Worker notes, optional)
        photos: base64 사진 목록 — data URL 접두사 허용
                (Base64 photos, an optional data URL prefix is accepted)
    """

    notes: str | None = None  # 메모 (Notes, optional)
    photos: list[str] = Field(default_factory=list)  # base64 사진 (Base64 photo payloads)


class ChecklistReviewRequest(BaseModel):
    """체크리스트 리뷰 요청 스키마.

    Review request schema. The rating is validated by the state machine
    so an out-of-range value surfaces as ``invalid_rating``.
    """

    rating: Any = None  # 평점 1~5 (Rating, integer 1..5)
    notes: str | None = None  # 리뷰 메모 (Review notes, optional)


class RoomRequirementUpdate(BaseModel):
    """방 사진 요구 조건 수정 요청 스키마.

    Room photo requirement update. ``photos_required_count`` is clamped to
    [1, 10] by the service; 0 or null clears the count.
    """

    requires_photo: bool  # 사진 필수 여부 (Whether photos are required)
    photos_required_count: int | None = None  # 필요 사진 수 (Required photo count)


# === 응답 (Responses) ===

class PhotoResponse(BaseModel):
    """사진 기록 응답 (Stored photo record)."""

    path: str | None = None
    uploaded_at: str | None = None
    url: str | None = None


class ChecklistItemResponse(BaseModel):
    """체크리스트 항목 응답 스키마 (Checklist item response)."""

    id: str
    task_id: str
    room_id: str
    position: int = 0
    title: str | None = None  # 작업 제목 (Task title)
    description: str | None = None  # 작업 설명 (Task description)
    estimated_time: int | None = None  # 예상 소요 시간 (Estimated minutes)
    completed: bool = False
    notes: str | None = None
    photos: list[PhotoResponse] = []
    completed_at: datetime | None = None


class PhotoProgressResponse(BaseModel):
    """방 사진 진행 상황 — 필요 수/누적 수 (Room photo progress)."""

    required: int
    total: int


class RoomResponse(BaseModel):
    """숙소 방 응답 스키마 (Property room pivot response)."""

    room_id: str
    name: str | None = None
    order: int = 0
    is_active: bool = True
    requires_photo: bool = False
    photos_required_count: int | None = None


class ChecklistRoomResponse(RoomResponse):
    """체크리스트 상세의 방 — 사진 진행 상황 포함 (Room with photo progress)."""

    photo_progress: PhotoProgressResponse


class PropertySummary(BaseModel):
    """숙소 요약 (Property summary)."""

    id: str
    name: str
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class ChecklistResponse(BaseModel):
    """체크리스트 요약 응답 스키마.

    Checklist summary response schema with item counters.
    """

    id: str
    property_id: str
    housekeeper_id: str
    scheduled_date: date
    scheduled_time: datetime | None = None
    status: str  # pending / in_progress / completed / reviewed
    rating: int | None = None
    notes: str | None = None
    total_items: int = 0  # 전체 항목 수 (Total items)
    completed_items: int = 0  # 완료 항목 수 (Completed items)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    reviewed_at: datetime | None = None
    version: int = 1  # 낙관적 잠금 버전 (Concurrency version stamp)
    created_at: datetime | None = None


class ChecklistDetailResponse(ChecklistResponse):
    """체크리스트 상세 응답 스키마.

    Checklist detail response: items, ordered rooms, the current room and
    its visible items, recomputed on every response.
    """

    property: PropertySummary | None = None
    housekeeper_name: str | None = None
    rooms: list[ChecklistRoomResponse] = []
    items: list[ChecklistItemResponse] = []
    current_room: RoomResponse | None = None  # 현재 방 (First room with open work)
    current_room_index: int | None = None
    visible_items: list[ChecklistItemResponse] = []  # 현재 방 항목 (Items of the current room)
