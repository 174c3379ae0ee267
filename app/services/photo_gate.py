"""사진 요구 조건 게이트 — 항목 제출 가능 여부 판단.

Photo Requirement Gate — Decides whether a completion submission may proceed.
The threshold is evaluated per room, not per task: every item in a room draws
from one shared photo pool. The requirement is read fresh from the room pivot
on each evaluation, so an edited count applies to the remaining items.
"""

from typing import Sequence
from uuid import UUID

from app.models.checklist import ChecklistItem
from app.models.property import PropertyRoom
from app.services.room_sequencer import items_in_room

# 방별 사진 수 입력 범위 — Accepted range for photos_required_count on input
MIN_PHOTOS_REQUIRED: int = 1
MAX_PHOTOS_REQUIRED: int = 10


def clamp_photo_count(value: int | None) -> int | None:
    """입력된 필요 사진 수를 [1, 10] 범위로 보정합니다.

    Clamp an input photo count to [1, 10]. Zero, negatives and None mean
    "no requirement" and are normalized to None.
    """
    if value is None or value <= 0:
        return None
    return max(MIN_PHOTOS_REQUIRED, min(MAX_PHOTOS_REQUIRED, value))


def required_photo_count(requires_photo: bool, photos_required_count: int | None) -> int:
    """실제 적용되는 필요 사진 수 (0 = 요구 없음).

    Effective threshold enforced by the gate; 0 means no requirement.
    """
    if not requires_photo or not photos_required_count or photos_required_count <= 0:
        return 0
    return photos_required_count


def can_submit(
    requires_photo: bool,
    photos_required_count: int | None,
    photos_persisted: int,
    photos_staged: int,
) -> bool:
    """사진 요구 조건 충족 여부를 판단합니다.

    Submission is always allowed when the room has no requirement; otherwise
    persisted plus staged photos must reach the required count.

    Args:
        requires_photo: 방 사진 필수 여부 (Room-level requires_photo flag)
        photos_required_count: 필요 사진 수 (Configured count, may be None)
        photos_persisted: 방에 이미 저장된 사진 수 (Photos already stored for the room)
        photos_staged: 이번 제출에 포함된 사진 수 (Photos attached to this submission)

    Returns:
        bool: 제출 가능 여부 (Whether the submission may proceed)
    """
    required: int = required_photo_count(requires_photo, photos_required_count)
    if required == 0:
        return True
    return photos_persisted + photos_staged >= required


def room_requirement(rooms: Sequence[PropertyRoom], room_id: UUID) -> PropertyRoom | None:
    """방 ID로 숙소 피벗을 찾습니다 (Find the property pivot for a room, if any)."""
    for room in rooms:
        if room.room_id == room_id:
            return room
    return None


def persisted_room_photos(items: Sequence[ChecklistItem], room_id: UUID) -> int:
    """방의 모든 항목에 저장된 사진 수 합계 (Photos stored across a room's items)."""
    return sum(len(item.photos or []) for item in items_in_room(items, room_id))


def room_photo_progress(
    rooms: Sequence[PropertyRoom],
    items: Sequence[ChecklistItem],
    room_id: UUID | None,
) -> dict[str, int]:
    """방 사진 진행 상황 — {"required": 필요 수, "total": 저장된 수}.

    Photo progress for a room as shown next to its tasks.
    """
    if room_id is None:
        return {"required": 0, "total": 0}

    pivot: PropertyRoom | None = room_requirement(rooms, room_id)
    required: int = 0
    if pivot is not None:
        required = required_photo_count(pivot.requires_photo, pivot.photos_required_count)

    return {"required": required, "total": persisted_room_photos(items, room_id)}
