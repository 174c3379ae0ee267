"""현재 방 계산 테스트.

Room sequencer tests — current room derivation and visible items.
Uses transient ORM instances only; no database needed.
"""

import uuid

from app.models.checklist import ChecklistItem
from app.models.property import PropertyRoom
from app.services import room_sequencer


def make_room(order: int) -> PropertyRoom:
    return PropertyRoom(id=uuid.uuid4(), room_id=uuid.uuid4(), order=order, requires_photo=False)


def make_item(room: PropertyRoom, completed: bool = False) -> ChecklistItem:
    return ChecklistItem(id=uuid.uuid4(), room_id=room.room_id, completed=completed, photos=[])


class TestCurrentRoom:
    """현재 방 계산."""

    def test_first_room_with_open_item(self):
        """Kitchen 미완료, Bath 완료 → Kitchen."""
        kitchen, bath = make_room(0), make_room(1)
        items = [make_item(kitchen), make_item(bath, completed=True)]

        assert room_sequencer.current_room([kitchen, bath], items) is kitchen

    def test_skips_completed_rooms(self):
        """앞 방이 모두 완료되면 다음 방."""
        kitchen, bath = make_room(0), make_room(1)
        items = [make_item(kitchen, completed=True), make_item(bath)]

        assert room_sequencer.current_room([kitchen, bath], items) is bath

    def test_skips_rooms_without_items(self):
        """항목이 없는 방은 건너뜀."""
        empty, bath = make_room(0), make_room(1)
        items = [make_item(bath)]

        assert room_sequencer.current_room([empty, bath], items) is bath

    def test_all_done_falls_back_to_first_room(self):
        """모두 완료 → 첫 번째 방."""
        kitchen, bath = make_room(0), make_room(1)
        items = [make_item(kitchen, completed=True), make_item(bath, completed=True)]

        assert room_sequencer.current_room([kitchen, bath], items) is kitchen

    def test_no_items_falls_back_to_first_room(self):
        """항목 없음 → 첫 번째 방."""
        kitchen = make_room(0)
        assert room_sequencer.current_room([kitchen], []) is kitchen

    def test_no_rooms_yields_none(self):
        """방 없음 → None."""
        assert room_sequencer.current_room([], []) is None

    def test_item_order_does_not_matter(self):
        """항목 순서와 무관하게 방 순서를 따름."""
        kitchen, bath = make_room(0), make_room(1)
        items = [make_item(bath), make_item(kitchen)]

        assert room_sequencer.current_room([kitchen, bath], items) is kitchen

    def test_is_recomputed_from_item_state(self):
        """항목 완료 후 다시 계산하면 다음 방."""
        kitchen, bath = make_room(0), make_room(1)
        kitchen_item = make_item(kitchen)
        items = [kitchen_item, make_item(bath)]
        assert room_sequencer.current_room([kitchen, bath], items) is kitchen

        kitchen_item.completed = True
        assert room_sequencer.current_room([kitchen, bath], items) is bath


class TestCurrentRoomIndex:
    """현재 방 위치."""

    def test_index_of_current_room(self):
        kitchen, bath = make_room(0), make_room(1)
        items = [make_item(kitchen, completed=True), make_item(bath)]

        assert room_sequencer.current_room_index([kitchen, bath], items) == 1

    def test_none_without_rooms(self):
        assert room_sequencer.current_room_index([], []) is None


class TestVisibleItems:
    """표시 항목."""

    def test_only_current_room_items(self):
        """현재 방의 항목만 표시 (완료 항목 포함)."""
        kitchen, bath = make_room(0), make_room(1)
        done = make_item(kitchen, completed=True)
        open_item = make_item(kitchen)
        items = [done, make_item(bath), open_item]

        assert room_sequencer.visible_items([kitchen, bath], items) == [done, open_item]

    def test_flat_list_without_rooms(self):
        """방이 없으면 전체 항목."""
        room = make_room(0)
        items = [make_item(room), make_item(room)]

        assert room_sequencer.visible_items([], items) == items
