"""체크리스트 상태 머신 테스트.

Checklist state machine tests — forward-only transitions, item lock,
photo gate on submission, completion and review rules.
"""

import uuid

import pytest

from app.models.checklist import Checklist, ChecklistItem
from app.models.property import PropertyRoom
from app.services.checklist_state_machine import ChecklistStateMachine
from app.utils.exceptions import (
    IllegalTransition,
    IncompleteChecklist,
    InsufficientPhotos,
    InvalidRating,
    ItemLocked,
)

machine = ChecklistStateMachine()


def make_room(order: int, requires_photo: bool = False, count: int | None = None) -> PropertyRoom:
    return PropertyRoom(
        id=uuid.uuid4(),
        room_id=uuid.uuid4(),
        order=order,
        requires_photo=requires_photo,
        photos_required_count=count,
    )


def make_checklist(status: str, items: list[ChecklistItem] | None = None) -> Checklist:
    return Checklist(id=uuid.uuid4(), status=status, items=items or [])


def make_item(room: PropertyRoom, completed: bool = False, photos: list | None = None) -> ChecklistItem:
    return ChecklistItem(id=uuid.uuid4(), room_id=room.room_id, completed=completed, photos=photos or [])


def photo(n: int) -> dict:
    return {"path": f"checklists/{n}.jpg", "uploaded_at": "2026-10-18T09:00:00+00:00"}


class TestStart:
    """시작 전이."""

    def test_pending_to_in_progress(self):
        checklist = make_checklist("pending")
        machine.start(checklist)

        assert checklist.status == "in_progress"
        assert checklist.started_at is not None

    @pytest.mark.parametrize("status", ["in_progress", "completed", "reviewed"])
    def test_start_from_other_status_fails(self, status):
        checklist = make_checklist(status)
        with pytest.raises(IllegalTransition) as exc:
            machine.start(checklist)

        assert checklist.status == status
        assert exc.value.detail["code"] == "illegal_transition"
        assert exc.value.detail["current_status"] == status


class TestSubmitItem:
    """항목 제출."""

    def test_submit_completes_and_records_photos(self):
        room = make_room(0, requires_photo=True, count=1)
        item = make_item(room)
        checklist = make_checklist("in_progress", [item])

        machine.submit_item(checklist, item, [photo(1)], "all clean", [room])

        assert item.completed is True
        assert item.notes == "all clean"
        assert item.photos == [photo(1)]
        assert item.completed_at is not None

    def test_completed_item_is_locked(self):
        """완료 항목은 다시 제출 불가, 변경 없음."""
        room = make_room(0)
        item = make_item(room, completed=True, photos=[photo(1)])
        item.notes = "first"
        checklist = make_checklist("in_progress", [item])

        with pytest.raises(ItemLocked):
            machine.submit_item(checklist, item, [photo(2)], "second", [room])

        assert item.notes == "first"
        assert item.photos == [photo(1)]

    def test_lock_is_reported_before_status(self):
        """완료된 체크리스트의 완료 항목 → ItemLocked 우선."""
        room = make_room(0)
        item = make_item(room, completed=True)
        checklist = make_checklist("completed", [item])

        with pytest.raises(ItemLocked):
            machine.check_submission(checklist, item, 0, [room])

    @pytest.mark.parametrize("status", ["pending", "completed", "reviewed"])
    def test_submit_requires_in_progress(self, status):
        room = make_room(0)
        item = make_item(room)
        checklist = make_checklist(status, [item])

        with pytest.raises(IllegalTransition):
            machine.submit_item(checklist, item, [], None, [room])
        assert item.completed is False

    def test_photo_threshold_is_per_room(self):
        """필요 2장: 1장 추가 → 거부, 2장 추가 → 성공."""
        bath = make_room(1, requires_photo=True, count=2)
        item = make_item(bath)
        checklist = make_checklist("in_progress", [item])

        with pytest.raises(InsufficientPhotos) as exc:
            machine.submit_item(checklist, item, [photo(1)], None, [bath])
        assert exc.value.detail["required"] == 2
        assert exc.value.detail["available"] == 1
        assert item.completed is False
        assert item.photos == []

        machine.submit_item(checklist, item, [photo(1), photo(2)], None, [bath])
        assert item.completed is True

    def test_photos_on_sibling_items_count(self):
        """같은 방 다른 항목의 저장 사진도 합산."""
        kitchen = make_room(0, requires_photo=True, count=2)
        first = make_item(kitchen, completed=True, photos=[photo(1), photo(2)])
        second = make_item(kitchen)
        checklist = make_checklist("in_progress", [first, second])

        machine.submit_item(checklist, second, [], None, [kitchen])
        assert second.completed is True

    def test_requirement_is_read_at_evaluation(self):
        """요구 사진 수 변경은 다음 평가에 바로 반영."""
        kitchen = make_room(0, requires_photo=True, count=1)
        item = make_item(kitchen)
        checklist = make_checklist("in_progress", [item])

        kitchen.photos_required_count = 3
        with pytest.raises(InsufficientPhotos):
            machine.check_submission(checklist, item, 1, [kitchen])


class TestComplete:
    """완료 전이."""

    def test_all_items_completed(self):
        room = make_room(0)
        checklist = make_checklist("in_progress", [make_item(room, completed=True)])
        machine.complete(checklist)

        assert checklist.status == "completed"
        assert checklist.completed_at is not None

    def test_empty_checklist_can_complete(self):
        checklist = make_checklist("in_progress", [])
        machine.complete(checklist)
        assert checklist.status == "completed"

    def test_outstanding_items_block(self):
        room = make_room(0)
        checklist = make_checklist("in_progress", [make_item(room, completed=True), make_item(room)])

        with pytest.raises(IncompleteChecklist) as exc:
            machine.complete(checklist)
        assert exc.value.detail["outstanding"] == 1
        assert exc.value.detail["total"] == 2
        assert checklist.status == "in_progress"

    def test_complete_requires_in_progress(self):
        checklist = make_checklist("pending", [])
        with pytest.raises(IllegalTransition):
            machine.complete(checklist)


class TestReview:
    """리뷰 전이."""

    def test_completed_to_reviewed(self):
        checklist = make_checklist("completed")
        machine.review(checklist, 4, "nice")

        assert checklist.status == "reviewed"
        assert checklist.rating == 4
        assert checklist.notes == "nice"
        assert checklist.reviewed_at is not None

    def test_reviewed_checklist_is_updated(self):
        """이미 리뷰된 체크리스트는 평점/메모 덮어쓰기."""
        checklist = make_checklist("completed")
        machine.review(checklist, 4, "nice")
        machine.review(checklist, 2, "missed a spot")

        assert checklist.status == "reviewed"
        assert checklist.rating == 2
        assert checklist.notes == "missed a spot"

    @pytest.mark.parametrize("rating", [0, 6, None, "5", 3.5, True])
    def test_invalid_rating(self, rating):
        checklist = make_checklist("completed")
        with pytest.raises(InvalidRating):
            machine.review(checklist, rating)

        assert checklist.status == "completed"
        assert checklist.rating is None

    @pytest.mark.parametrize("status", ["pending", "in_progress"])
    def test_review_before_completion_fails(self, status):
        checklist = make_checklist(status)
        with pytest.raises(IllegalTransition):
            machine.review(checklist, 5)
