"""체크리스트 상태 머신 — 체크리스트 생명주기 전이 규칙.

Checklist State Machine — Lifecycle transition rules for a checklist aggregate.
Operates purely on in-memory ORM instances: it validates every precondition
first and only then mutates, so a rejected transition leaves the aggregate
untouched. Loading, locking and persisting are the caller's job
(see ChecklistService).

States:
    pending (초기) → in_progress → completed → reviewed (종료)
"""

from datetime import datetime, timezone
from typing import Any, Sequence

from app.models.checklist import (
    Checklist,
    ChecklistItem,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PENDING,
    STATUS_REVIEWED,
)
from app.models.property import PropertyRoom
from app.services.photo_gate import can_submit, persisted_room_photos, required_photo_count, room_requirement
from app.utils.exceptions import (
    IllegalTransition,
    IncompleteChecklist,
    InsufficientPhotos,
    InvalidRating,
    ItemLocked,
)

# 전이 정의 — action: (허용 출발 상태, 도착 상태)
# Transition table — action: (required source status, target status)
TRANSITIONS: dict[str, tuple[str, str]] = {
    "start": (STATUS_PENDING, STATUS_IN_PROGRESS),
    "complete": (STATUS_IN_PROGRESS, STATUS_COMPLETED),
    "review": (STATUS_COMPLETED, STATUS_REVIEWED),
}

MIN_RATING: int = 1
MAX_RATING: int = 5


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ChecklistStateMachine:
    """체크리스트 상태 머신.

    Checklist state machine enforcing forward-only status transitions,
    the one-way item lock, and the photo requirement gate on submission.
    """

    def ensure_transition(self, checklist: Checklist, action: str) -> str:
        """전이 가능 여부를 확인하고 도착 상태를 반환합니다.

        Verify ``checklist`` may perform ``action`` and return the target status.

        Raises:
            IllegalTransition: 출발 상태가 맞지 않을 때 (Wrong source status)
        """
        source, target = TRANSITIONS[action]
        if checklist.status != source:
            raise IllegalTransition(action, checklist.status, source)
        return target

    def start(self, checklist: Checklist) -> Checklist:
        """pending → in_progress. 지오펜스 검증은 호출자가 먼저 수행합니다.

        Move a pending checklist to in_progress. The geofence precondition is
        evaluated by the caller before this is invoked.
        """
        target: str = self.ensure_transition(checklist, "start")
        checklist.status = target
        checklist.started_at = _now()
        return checklist

    def check_submission(
        self,
        checklist: Checklist,
        item: ChecklistItem,
        photos_staged: int,
        rooms: Sequence[PropertyRoom],
    ) -> None:
        """항목 제출 사전 조건을 검증합니다 (변경 없음).

        Validate an item submission without mutating anything. The item lock
        is checked first, whatever the checklist status, so a stale client
        always learns the item is locked.

        Args:
            checklist: 대상 체크리스트 (Parent checklist)
            item: 제출할 항목 (Item being submitted)
            photos_staged: 이번 제출의 사진 수 (Photos attached to this submission)
            rooms: 숙소 방 피벗 목록 (Property room pivots, for the photo requirement)

        Raises:
            ItemLocked: 이미 완료된 항목 (Item already completed)
            IllegalTransition: 체크리스트가 진행 중이 아님 (Checklist not in progress)
            InsufficientPhotos: 방 사진 수 부족 (Room photo requirement not met)
        """
        if item.completed:
            raise ItemLocked(item.id)

        if checklist.status != STATUS_IN_PROGRESS:
            raise IllegalTransition("submit an item of", checklist.status, STATUS_IN_PROGRESS)

        pivot: PropertyRoom | None = room_requirement(rooms, item.room_id)
        if pivot is None:
            return

        persisted: int = persisted_room_photos(checklist.items, item.room_id)
        if not can_submit(pivot.requires_photo, pivot.photos_required_count, persisted, photos_staged):
            raise InsufficientPhotos(
                item.room_id,
                required=required_photo_count(pivot.requires_photo, pivot.photos_required_count),
                available=persisted + photos_staged,
            )

    def submit_item(
        self,
        checklist: Checklist,
        item: ChecklistItem,
        photos: Sequence[dict[str, Any]],
        notes: str | None,
        rooms: Sequence[PropertyRoom],
    ) -> ChecklistItem:
        """항목을 완료 처리합니다. 이후 항목은 영구 잠금 상태가 됩니다.

        Complete an item with its notes and photo records. After this the
        item is permanently locked.

        Args:
            checklist: 대상 체크리스트 (Parent checklist)
            item: 완료할 항목 (Item to complete)
            photos: 저장된 사진 기록 [{"path", "uploaded_at"}] (Stored photo records)
            notes: 메모, 선택 (Optional notes)
            rooms: 숙소 방 피벗 목록 (Property room pivots)

        Returns:
            ChecklistItem: 완료된 항목 (The completed item)
        """
        self.check_submission(checklist, item, len(photos), rooms)

        item.photos = [*(item.photos or []), *photos]
        if notes:
            item.notes = notes
        item.completed = True
        item.completed_at = _now()
        return item

    def complete(self, checklist: Checklist) -> Checklist:
        """in_progress → completed. 모든 항목이 완료되어야 합니다.

        Complete a checklist once every item is completed.

        Raises:
            IllegalTransition: 진행 중이 아님 (Not in progress)
            IncompleteChecklist: 미완료 항목 존재 (Outstanding items)
        """
        target: str = self.ensure_transition(checklist, "complete")

        outstanding: int = sum(1 for item in checklist.items if not item.completed)
        if outstanding:
            raise IncompleteChecklist(outstanding, len(checklist.items))

        checklist.status = target
        checklist.completed_at = _now()
        return checklist

    def review(self, checklist: Checklist, rating: Any, notes: str | None = None) -> Checklist:
        """completed → reviewed. 이미 reviewed이면 평점/메모만 덮어씁니다.

        Review a completed checklist. On an already reviewed checklist this is
        an update of rating and notes, not a new transition.

        Raises:
            IllegalTransition: completed/reviewed가 아님 (Not completed yet)
            InvalidRating: 평점이 1~5 정수가 아님 (Rating not an integer in 1..5)
        """
        if checklist.status != STATUS_REVIEWED:
            self.ensure_transition(checklist, "review")

        if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
            raise InvalidRating(rating)

        checklist.rating = rating
        checklist.notes = notes
        checklist.status = STATUS_REVIEWED
        checklist.reviewed_at = _now()
        return checklist


# 싱글턴 인스턴스 — Singleton instance
checklist_state_machine: ChecklistStateMachine = ChecklistStateMachine()
