"""체크리스트 서비스 — 체크리스트 실행 엔진 비즈니스 로직.

Checklist Service — Orchestrates the checklist aggregate: creation from the
property's room/task layout, listing, and the lifecycle operations
(start, submit item, complete, review).

Every lifecycle operation follows the same shape:
    1. 체크리스트별 프로세스 내 잠금 (Per-checklist in-process lock)
    2. 집합체 행 잠금 조회 (Load the aggregate with a row lock)
    3. 권한 확인 → 상태 머신 검증/변경 (Authorize, then validate and mutate)
    4. flush — 버전 충돌 시 ConcurrentModification
       (Flush; a version mismatch surfaces as ConcurrentModification)

Commit is left to the router, like every other service here. The
in-process lock is released before that commit, so it only narrows the
race inside one worker; the row lock and the ``version`` check on
``checklists`` are what keep two writers from both committing.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import Any, AsyncIterator, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.config import settings
from app.models.checklist import Checklist, ChecklistItem
from app.models.property import Property, PropertyRoom, RoomTask
from app.models.user import User, ROLE_ADMIN, ROLE_HOUSEKEEPER, ROLE_PROPERTY_OWNER
from app.repositories.checklist_repository import checklist_repository
from app.repositories.property_repository import property_repository
from app.repositories.user_repository import user_repository
from app.services import room_sequencer
from app.services.checklist_state_machine import ChecklistStateMachine, checklist_state_machine
from app.services.geofence_guard import GeofenceStartGuard, LocationProvider
from app.services.geofence_service import geofence_service
from app.services.photo_gate import room_photo_progress
from app.services.property_service import can_manage_property, property_service
from app.services.storage_service import StorageService, storage_service
from app.utils.exceptions import BadRequestError, ConcurrentModification, ForbiddenError, NotFoundError


class ChecklistService:
    """체크리스트 서비스.

    Checklist service owning the aggregate's load/lock/persist cycle.

    Attributes:
        state_machine: 전이 규칙 (Lifecycle transition rules)
        guard: 시작 지오펜스 가드 (Start transition geofence guard)
        storage: 사진 저장소 (Photo storage)
    """

    def __init__(
        self,
        state_machine: ChecklistStateMachine | None = None,
        guard: GeofenceStartGuard | None = None,
        storage: StorageService | None = None,
    ) -> None:
        self.state_machine: ChecklistStateMachine = state_machine or checklist_state_machine
        self.guard: GeofenceStartGuard = guard or GeofenceStartGuard(geofence_service)
        self.storage: StorageService = storage or storage_service
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._waiters: dict[UUID, int] = {}

    @asynccontextmanager
    async def _locked(self, checklist_id: UUID) -> AsyncIterator[None]:
        """체크리스트별 잠금 — one lock per checklist id within this process.

        The entry is dropped once no coroutine holds or waits on it.
        """
        lock: asyncio.Lock | None = self._locks.get(checklist_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[checklist_id] = lock
        self._waiters[checklist_id] = self._waiters.get(checklist_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining: int = self._waiters[checklist_id] - 1
            if remaining:
                self._waiters[checklist_id] = remaining
            else:
                del self._waiters[checklist_id]
                del self._locks[checklist_id]

    async def _load_for_update(self, db: AsyncSession, checklist_id: UUID) -> Checklist:
        checklist: Checklist | None = await checklist_repository.get_aggregate(db, checklist_id, for_update=True)
        if checklist is None:
            raise NotFoundError("체크리스트를 찾을 수 없습니다 (Checklist not found)")
        return checklist

    async def _flush(self, db: AsyncSession, checklist: Checklist) -> None:
        try:
            await db.flush()
        except StaleDataError:
            raise ConcurrentModification(checklist.id)

    # ── 권한 — Authorization ──────────────────────────────

    def _ensure_assignee(self, checklist: Checklist, user: User) -> None:
        if checklist.housekeeper_id != user.id:
            raise ForbiddenError(
                "배정된 하우스키퍼만 수행할 수 있습니다 (Only the assigned housekeeper can do this)"
            )

    def _ensure_manager(self, checklist: Checklist, user: User) -> None:
        if checklist.property is None or not can_manage_property(user, checklist.property):
            raise ForbiddenError(
                "관리자 또는 숙소 소유자만 수행할 수 있습니다 (Only an admin or the property owner can do this)"
            )

    def _ensure_viewer(self, checklist: Checklist, user: User) -> None:
        if checklist.housekeeper_id == user.id:
            return
        self._ensure_manager(checklist, user)

    @staticmethod
    def ordered_rooms(checklist: Checklist) -> list[PropertyRoom]:
        """체크리스트 대상 방 피벗 — (order, id) 순서 (Room pivots in visit order).

        Inactive rooms are left out unless the checklist already has items
        in them (a room switched off after scheduling).
        """
        if checklist.property is None:
            return []
        item_rooms: set[UUID] = {item.room_id for item in checklist.items}
        return [
            link for link in checklist.property.room_links
            if link.is_active or link.room_id in item_rooms
        ]

    @staticmethod
    def _find_item(checklist: Checklist, item_id: UUID) -> ChecklistItem:
        for item in checklist.items:
            if item.id == item_id:
                return item
        raise NotFoundError("체크리스트 항목을 찾을 수 없습니다 (Checklist item not found)")

    # ── 생성/조회 — Creation and queries ──────────────────

    async def create_checklist(
        self,
        db: AsyncSession,
        property_id: UUID,
        housekeeper_id: UUID,
        scheduled_date: date,
        user: User,
        scheduled_time: datetime | None = None,
    ) -> Checklist:
        """숙소의 방/작업 배치로 체크리스트를 생성합니다.

        Create a pending checklist whose items are one per (room, task)
        pairing: active rooms in visit order, then each room's tasks in
        task order.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            property_id: 숙소 UUID (Property UUID)
            housekeeper_id: 담당 하우스키퍼 UUID (Assigned housekeeper UUID)
            scheduled_date: 예약일 (Scheduled date)
            user: 요청 사용자 (Requesting user, admin or property owner)
            scheduled_time: 예약 시각, 선택 (Optional scheduled time)

        Returns:
            Checklist: 생성된 체크리스트 집합체 (Created checklist aggregate)

        Raises:
            NotFoundError: 숙소가 없을 때 (When property not found)
            ForbiddenError: 관리 권한이 없을 때 (When user cannot manage the property)
            BadRequestError: 담당자가 하우스키퍼가 아닐 때 (When assignee is not an active housekeeper)
        """
        property_: Property | None = await property_repository.get_with_rooms(db, property_id)
        if property_ is None:
            raise NotFoundError("숙소를 찾을 수 없습니다 (Property not found)")
        if not can_manage_property(user, property_):
            raise ForbiddenError("숙소 관리 권한이 없습니다 (You cannot manage this property)")

        housekeeper: User | None = await user_repository.get_active(db, housekeeper_id)
        if housekeeper is None or housekeeper.role != ROLE_HOUSEKEEPER:
            raise BadRequestError("활성 하우스키퍼에게만 배정할 수 있습니다 (Assignee must be an active housekeeper)")

        room_tasks: Sequence[RoomTask] = await property_repository.get_room_tasks(db, property_id)
        tasks_by_room: dict[UUID, list[RoomTask]] = {}
        for room_task in room_tasks:
            tasks_by_room.setdefault(room_task.room_id, []).append(room_task)

        items_data: list[dict] = []
        for link in property_.room_links:
            if not link.is_active:
                continue
            for room_task in tasks_by_room.get(link.room_id, []):
                items_data.append({
                    "task_id": room_task.task_id,
                    "room_id": link.room_id,
                    "position": len(items_data),
                })

        checklist: Checklist = await checklist_repository.create_with_items(
            db,
            {
                "property_id": property_id,
                "housekeeper_id": housekeeper_id,
                "scheduled_date": scheduled_date,
                "scheduled_time": scheduled_time,
            },
            items_data,
        )
        return await self.get_checklist(db, checklist.id)

    async def get_checklist(self, db: AsyncSession, checklist_id: UUID) -> Checklist:
        """체크리스트 집합체를 조회합니다 (Load a checklist aggregate).

        Raises:
            NotFoundError: 체크리스트가 없을 때 (When checklist not found)
        """
        checklist: Checklist | None = await checklist_repository.get_aggregate(db, checklist_id)
        if checklist is None:
            raise NotFoundError("체크리스트를 찾을 수 없습니다 (Checklist not found)")
        return checklist

    async def get_checklist_for_user(self, db: AsyncSession, checklist_id: UUID, user: User) -> Checklist:
        """조회 권한을 확인하고 체크리스트를 반환합니다.

        Load a checklist visible to ``user``: its housekeeper, an admin, or
        the owner of its property.
        """
        checklist: Checklist = await self.get_checklist(db, checklist_id)
        self._ensure_viewer(checklist, user)
        return checklist

    async def list_checklists(
        self,
        db: AsyncSession,
        user: User,
        property_id: UUID | None = None,
        housekeeper_id: UUID | None = None,
        status: str | None = None,
        scheduled_date: date | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Checklist], int]:
        """관리용 체크리스트 목록 — 숙소 소유자는 자기 숙소로 한정됩니다.

        Paginated checklist list for admins and property owners. Property
        owners only see checklists of their own properties.
        """
        if user.role not in (ROLE_ADMIN, ROLE_PROPERTY_OWNER):
            raise ForbiddenError("관리자 또는 숙소 소유자만 조회할 수 있습니다 (Admins and property owners only)")
        owner_id: UUID | None = user.id if user.role == ROLE_PROPERTY_OWNER else None
        return await checklist_repository.get_by_filters(
            db,
            property_id=property_id,
            housekeeper_id=housekeeper_id,
            status=status,
            scheduled_date=scheduled_date,
            owner_id=owner_id,
            page=page,
            per_page=per_page,
        )

    async def get_my_checklists(
        self,
        db: AsyncSession,
        housekeeper_id: UUID,
        scheduled_date: date | None = None,
    ) -> Sequence[Checklist]:
        """내 체크리스트 목록 (앱용) — Checklists assigned to a housekeeper."""
        return await checklist_repository.get_housekeeper_checklists(db, housekeeper_id, scheduled_date)

    # ── 생명주기 — Lifecycle operations ────────────────────

    async def start_checklist(
        self,
        db: AsyncSession,
        checklist_id: UUID,
        user: User,
        provider: LocationProvider,
    ) -> Checklist:
        """체크리스트를 시작합니다 (pending → in_progress).

        Start a checklist after the geofence guard accepts the worker's
        location. Status is checked before any location is requested.

        Raises:
            IllegalTransition: pending이 아닐 때 (Not pending)
            LocationUnavailable: 위치 없음 (No location fix)
            OutOfRange: 숙소 반경 밖 (Too far from the property)
            ConcurrentModification: 동시 수정 충돌 (Concurrent write lost the race)
        """
        async with self._locked(checklist_id):
            checklist: Checklist = await self._load_for_update(db, checklist_id)
            self._ensure_assignee(checklist, user)
            self.state_machine.ensure_transition(checklist, "start")

            await self.guard.check(checklist.property, provider)

            self.state_machine.start(checklist)
            await self._flush(db, checklist)
        return checklist

    async def submit_item(
        self,
        db: AsyncSession,
        checklist_id: UUID,
        item_id: UUID,
        user: User,
        notes: str | None = None,
        photo_payloads: Sequence[str] = (),
    ) -> Checklist:
        """항목을 제출합니다 — 사진 저장 후 완료 처리, 이후 항목은 잠금.

        Submit one item with its notes and photos. Every precondition is
        checked before any photo is stored; stored photos are removed again
        when the submission fails afterwards.

        Raises:
            BadRequestError: 사진 수 초과 또는 잘못된 사진 (Too many or malformed photos)
            ItemLocked: 이미 완료된 항목 (Item already completed)
            IllegalTransition: 진행 중이 아님 (Checklist not in progress)
            InsufficientPhotos: 방 사진 부족 (Room photo requirement not met)
            ConcurrentModification: 동시 수정 충돌 (Concurrent write lost the race)
        """
        if len(photo_payloads) > settings.MAX_PHOTOS_PER_SUBMISSION:
            raise BadRequestError(
                f"사진은 최대 {settings.MAX_PHOTOS_PER_SUBMISSION}장까지 첨부할 수 있습니다 "
                f"(At most {settings.MAX_PHOTOS_PER_SUBMISSION} photos per submission)"
            )

        async with self._locked(checklist_id):
            checklist: Checklist = await self._load_for_update(db, checklist_id)
            self._ensure_assignee(checklist, user)
            item: ChecklistItem = self._find_item(checklist, item_id)
            rooms: list[PropertyRoom] = self.ordered_rooms(checklist)

            self.state_machine.check_submission(checklist, item, len(photo_payloads), rooms)

            stored: list[dict[str, Any]] = []
            try:
                for payload in photo_payloads:
                    stored.append(self.storage.store_photo(payload))

                self.state_machine.submit_item(checklist, item, stored, notes, rooms)
                # 집합체 버전 증가 — Bump the checklist row so its version moves with item writes
                checklist.updated_at = datetime.now(timezone.utc)
                await self._flush(db, checklist)
            except Exception:
                for record in stored:
                    self.storage.delete_photo(record["path"])
                raise
        return checklist

    async def complete_checklist(self, db: AsyncSession, checklist_id: UUID, user: User) -> Checklist:
        """체크리스트를 완료합니다 (in_progress → completed).

        Raises:
            IllegalTransition: 진행 중이 아님 (Not in progress)
            IncompleteChecklist: 미완료 항목 존재 (Outstanding items)
        """
        async with self._locked(checklist_id):
            checklist: Checklist = await self._load_for_update(db, checklist_id)
            self._ensure_assignee(checklist, user)
            self.state_machine.complete(checklist)
            await self._flush(db, checklist)
        return checklist

    async def review_checklist(
        self,
        db: AsyncSession,
        checklist_id: UUID,
        user: User,
        rating: Any,
        notes: str | None = None,
    ) -> Checklist:
        """체크리스트를 리뷰합니다 (completed → reviewed, 또는 리뷰 수정).

        Review a completed checklist, or update the review of a reviewed one.

        Raises:
            IllegalTransition: 완료 전 (Not completed yet)
            InvalidRating: 평점 범위 오류 (Rating not an integer in 1..5)
        """
        async with self._locked(checklist_id):
            checklist: Checklist = await self._load_for_update(db, checklist_id)
            self._ensure_manager(checklist, user)
            self.state_machine.review(checklist, rating, notes)
            await self._flush(db, checklist)
        return checklist

    # ── 응답 — Response building ──────────────────────────

    def _build_photo(self, record: dict[str, Any]) -> dict[str, Any]:
        return {
            "path": record.get("path"),
            "uploaded_at": record.get("uploaded_at"),
            "url": self.storage.public_url(record["path"]) if record.get("path") else None,
        }

    def _build_item(self, item: ChecklistItem) -> dict[str, Any]:
        task = item.task
        return {
            "id": str(item.id),
            "task_id": str(item.task_id),
            "room_id": str(item.room_id),
            "position": item.position,
            "title": task.title if task is not None else None,
            "description": task.description if task is not None else None,
            "estimated_time": task.estimated_time if task is not None else None,
            "completed": item.completed,
            "notes": item.notes,
            "photos": [self._build_photo(record) for record in (item.photos or [])],
            "completed_at": item.completed_at,
        }

    def build_response(self, checklist: Checklist) -> dict[str, Any]:
        """체크리스트 요약 응답 (Summary response dict)."""
        items: list[ChecklistItem] = list(checklist.items)
        return {
            "id": str(checklist.id),
            "property_id": str(checklist.property_id),
            "housekeeper_id": str(checklist.housekeeper_id),
            "scheduled_date": checklist.scheduled_date,
            "scheduled_time": checklist.scheduled_time,
            "status": checklist.status,
            "rating": checklist.rating,
            "notes": checklist.notes,
            "total_items": len(items),
            "completed_items": sum(1 for item in items if item.completed),
            "started_at": checklist.started_at,
            "completed_at": checklist.completed_at,
            "reviewed_at": checklist.reviewed_at,
            "version": checklist.version,
            "created_at": checklist.created_at,
        }

    def build_detail_response(self, checklist: Checklist) -> dict[str, Any]:
        """체크리스트 상세 응답 — 현재 방과 방별 사진 진행 상황 포함.

        Detail response dict. The current room, its visible items and every
        room's photo progress are recomputed from the aggregate on each call.
        """
        response: dict[str, Any] = self.build_response(checklist)
        items: list[ChecklistItem] = list(checklist.items)
        rooms: list[PropertyRoom] = self.ordered_rooms(checklist)

        current: PropertyRoom | None = room_sequencer.current_room(rooms, items)
        property_: Property | None = checklist.property
        housekeeper: User | None = checklist.housekeeper

        response.update({
            "property": {
                "id": str(property_.id),
                "name": property_.name,
                "address": property_.address,
                "latitude": property_.latitude,
                "longitude": property_.longitude,
            } if property_ is not None else None,
            "housekeeper_name": housekeeper.name if housekeeper is not None else None,
            "rooms": [
                {**property_service.build_room_response(link), "photo_progress": room_photo_progress(rooms, items, link.room_id)}
                for link in rooms
            ],
            "items": [self._build_item(item) for item in items],
            "current_room": property_service.build_room_response(current) if current is not None else None,
            "current_room_index": room_sequencer.current_room_index(rooms, items),
            "visible_items": [self._build_item(item) for item in room_sequencer.visible_items(rooms, items)],
        })
        return response


# 싱글턴 인스턴스 — Singleton instance
checklist_service: ChecklistService = ChecklistService()
