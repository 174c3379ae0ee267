"""사진 요구 조건 게이트 테스트.

Photo gate tests — threshold decisions, input clamping and per-room progress.
"""

import uuid

import pytest

from app.models.checklist import ChecklistItem
from app.models.property import PropertyRoom
from app.services import photo_gate


class TestCanSubmit:
    """제출 가능 여부."""

    def test_no_requirement_always_allows(self):
        assert photo_gate.can_submit(False, 5, 0, 0) is True

    def test_missing_count_means_no_requirement(self):
        """requires_photo=True 이지만 수가 없으면 요구 없음."""
        assert photo_gate.can_submit(True, None, 0, 0) is True
        assert photo_gate.can_submit(True, 0, 0, 0) is True

    def test_staged_photos_reach_threshold(self):
        """필요 2장: 저장 0 + 추가 1 → 불가, 추가 2 → 가능."""
        assert photo_gate.can_submit(True, 2, 0, 1) is False
        assert photo_gate.can_submit(True, 2, 0, 2) is True

    def test_persisted_photos_count_toward_threshold(self):
        """이미 저장된 사진도 합산."""
        assert photo_gate.can_submit(True, 3, 2, 1) is True
        assert photo_gate.can_submit(True, 3, 2, 0) is False

    def test_exact_threshold_passes(self):
        assert photo_gate.can_submit(True, 1, 0, 1) is True


class TestClampPhotoCount:
    """입력 보정."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, None), (0, None), (-3, None), (1, 1), (4, 4), (10, 10), (11, 10), (99, 10)],
    )
    def test_clamp(self, value, expected):
        assert photo_gate.clamp_photo_count(value) == expected


class TestRoomPhotoProgress:
    """방별 사진 진행 상황."""

    def test_counts_photos_across_room_items(self):
        """방의 모든 항목 사진을 합산, 다른 방 사진은 제외."""
        kitchen = PropertyRoom(room_id=uuid.uuid4(), order=0, requires_photo=True, photos_required_count=3)
        bath = PropertyRoom(room_id=uuid.uuid4(), order=1, requires_photo=False)
        items = [
            ChecklistItem(room_id=kitchen.room_id, completed=True, photos=[{"path": "a"}, {"path": "b"}]),
            ChecklistItem(room_id=kitchen.room_id, completed=False, photos=[]),
            ChecklistItem(room_id=bath.room_id, completed=True, photos=[{"path": "c"}]),
        ]

        assert photo_gate.room_photo_progress([kitchen, bath], items, kitchen.room_id) == {"required": 3, "total": 2}
        assert photo_gate.room_photo_progress([kitchen, bath], items, bath.room_id) == {"required": 0, "total": 1}

    def test_no_room(self):
        assert photo_gate.room_photo_progress([], [], None) == {"required": 0, "total": 0}
