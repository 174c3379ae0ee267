"""방 순서 서비스 — 하우스키퍼가 다음에 청소할 방 계산.

Room Sequencer — Derives the room a housekeeper should work on next.
The pointer is never stored: it is recomputed from the property's room order
and the completion flags of the checklist items every time it is needed.
All functions here are pure and safe to call without coordination.
"""

from typing import Sequence
from uuid import UUID

from app.models.checklist import ChecklistItem
from app.models.property import PropertyRoom


def items_in_room(items: Sequence[ChecklistItem], room_id: UUID) -> list[ChecklistItem]:
    """특정 방에 속한 항목만 반환합니다 (원래 순서 유지).

    Return the items that belong to ``room_id``, keeping their order.
    """
    return [item for item in items if item.room_id == room_id]


def current_room(
    rooms_in_order: Sequence[PropertyRoom],
    items: Sequence[ChecklistItem],
) -> PropertyRoom | None:
    """현재 방을 계산합니다.

    Return the first room, in property order, that still has at least one
    incomplete item. Rooms without items are skipped. When every room is
    done the first room is returned; an empty room list yields None, which
    callers treat as "no room-scoped view" and fall back to a flat item list.

    Args:
        rooms_in_order: 숙소의 방 피벗 목록, 방문 순서대로 (Property room pivots in visit order)
        items: 체크리스트 항목 목록, 순서 무관 (Checklist items, any order)

    Returns:
        PropertyRoom | None: 현재 방 또는 None (Current room pivot or None)
    """
    if not rooms_in_order:
        return None

    # 미완료 항목이 있는 방 ID 집합 — Rooms with outstanding work
    pending_room_ids: set[UUID] = {item.room_id for item in items if not item.completed}

    for room in rooms_in_order:
        if room.room_id in pending_room_ids:
            return room

    return rooms_in_order[0]


def current_room_index(
    rooms_in_order: Sequence[PropertyRoom],
    items: Sequence[ChecklistItem],
) -> int | None:
    """현재 방의 0-기반 위치 (Zero-based position of the current room, or None)."""
    room: PropertyRoom | None = current_room(rooms_in_order, items)
    if room is None:
        return None
    for index, candidate in enumerate(rooms_in_order):
        if candidate is room:
            return index
    return None


def visible_items(
    rooms_in_order: Sequence[PropertyRoom],
    items: Sequence[ChecklistItem],
) -> list[ChecklistItem]:
    """화면에 표시할 항목 — 현재 방의 항목, 현재 방이 없으면 전체.

    Items to present: the current room's items, or every item when there is
    no current room.
    """
    room: PropertyRoom | None = current_room(rooms_in_order, items)
    if room is None:
        return list(items)
    return items_in_room(items, room.room_id)
