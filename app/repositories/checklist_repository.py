"""체크리스트 레포지토리 — 체크리스트/항목 DB 쿼리 담당.

Checklist Repository — Handles all checklists and checklist_items database
queries. Loads the checklist aggregate (checklist + items + property rooms)
in one go, optionally row-locked for a transition.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.checklist import Checklist, ChecklistItem
from app.models.property import Property, PropertyRoom
from app.repositories.base import BaseRepository


class ChecklistRepository(BaseRepository[Checklist]):
    """체크리스트 레포지토리.

    Checklist repository with aggregate loading, filtering and
    housekeeper-scoped lookups.

    Extends:
        BaseRepository[Checklist]
    """

    def __init__(self) -> None:
        """레포지토리를 초기화합니다.

        Initialize the checklist repository with Checklist model.
        """
        super().__init__(Checklist)

    def _aggregate_query(self) -> Select:
        """항목/작업/숙소 방까지 eager loading 하는 기본 쿼리."""
        return select(Checklist).options(
            selectinload(Checklist.items).selectinload(ChecklistItem.task),
            selectinload(Checklist.property).selectinload(Property.room_links).selectinload(PropertyRoom.room),
            selectinload(Checklist.housekeeper),
        )

    async def get_aggregate(
        self,
        db: AsyncSession,
        checklist_id: UUID,
        for_update: bool = False,
    ) -> Checklist | None:
        """체크리스트 집합체를 조회합니다.

        Retrieve a checklist with its items and property rooms eagerly loaded.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            checklist_id: 체크리스트 UUID (Checklist UUID)
            for_update: 행 잠금 여부 — 전이 처리 시 True
                        (Lock the checklist row; use for transitions)

        Returns:
            Checklist | None: 체크리스트 또는 None (Checklist or None)
        """
        # 세션 캐시 갱신 — Always refresh identity map state from the row
        query: Select = (
            self._aggregate_query()
            .where(Checklist.id == checklist_id)
            .execution_options(populate_existing=True)
        )

        if for_update:
            # 행 잠금 — Row lock for the duration of the transaction
            query = query.with_for_update(of=Checklist)

        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_filters(
        self,
        db: AsyncSession,
        property_id: UUID | None = None,
        housekeeper_id: UUID | None = None,
        status: str | None = None,
        scheduled_date: date | None = None,
        owner_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Checklist], int]:
        """필터 조건에 맞는 체크리스트를 페이지네이션하여 조회합니다.

        Retrieve paginated checklists matching the given filters.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            property_id: 숙소 UUID 필터, 선택 (Optional property filter)
            housekeeper_id: 담당자 UUID 필터, 선택 (Optional housekeeper filter)
            status: 상태 필터, 선택 (Optional status filter)
            scheduled_date: 예약일 필터, 선택 (Optional scheduled date filter)
            owner_id: 숙소 소유자 범위, 선택 (Restrict to properties of this owner)
            page: 페이지 번호, 1부터 시작 (Page number, 1-based)
            per_page: 페이지당 항목 수 (Items per page)

        Returns:
            tuple[Sequence[Checklist], int]: (체크리스트 목록, 전체 개수)
        """
        query: Select = select(Checklist).options(selectinload(Checklist.items))

        if property_id is not None:
            query = query.where(Checklist.property_id == property_id)
        if housekeeper_id is not None:
            query = query.where(Checklist.housekeeper_id == housekeeper_id)
        if status is not None:
            query = query.where(Checklist.status == status)
        if scheduled_date is not None:
            query = query.where(Checklist.scheduled_date == scheduled_date)
        if owner_id is not None:
            query = query.join(Property, Checklist.property_id == Property.id).where(Property.owner_id == owner_id)

        query = query.order_by(Checklist.scheduled_date.desc(), Checklist.created_at.desc())

        return await self.get_paginated(db, query, page, per_page)

    async def get_housekeeper_checklists(
        self,
        db: AsyncSession,
        housekeeper_id: UUID,
        scheduled_date: date | None = None,
    ) -> Sequence[Checklist]:
        """특정 하우스키퍼의 체크리스트 목록을 조회합니다 (앱용).

        Retrieve checklists assigned to a housekeeper.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            housekeeper_id: 하우스키퍼 UUID (Housekeeper UUID)
            scheduled_date: 예약일 필터, 선택 (Optional scheduled date filter)

        Returns:
            Sequence[Checklist]: 체크리스트 목록 (Checklist list)
        """
        query: Select = (
            select(Checklist)
            .options(selectinload(Checklist.items))
            .where(Checklist.housekeeper_id == housekeeper_id)
        )

        if scheduled_date is not None:
            query = query.where(Checklist.scheduled_date == scheduled_date)

        query = query.order_by(Checklist.scheduled_date.desc(), Checklist.created_at.desc())
        result = await db.execute(query)
        return result.scalars().all()

    async def create_with_items(
        self,
        db: AsyncSession,
        checklist_data: dict,
        items_data: list[dict],
    ) -> Checklist:
        """체크리스트와 항목을 함께 생성합니다.

        Create a checklist together with its items.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            checklist_data: 체크리스트 데이터 (Checklist column values)
            items_data: 항목 데이터 목록 (Item column values, in position order)

        Returns:
            Checklist: 생성된 체크리스트 (Created checklist)
        """
        checklist: Checklist = Checklist(**checklist_data)
        checklist.items = [ChecklistItem(**data) for data in items_data]
        db.add(checklist)
        await db.flush()
        return checklist


# 싱글턴 인스턴스 — Singleton instance
checklist_repository: ChecklistRepository = ChecklistRepository()
