"""숙소 레포지토리 — 숙소/방 피벗/방-작업 배정 DB 쿼리 담당.

Property Repository — Read queries for properties, their ordered room pivots
and room task assignments, plus the pivot photo requirement update.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.property import Property, PropertyRoom, RoomTask
from app.repositories.base import BaseRepository


class PropertyRepository(BaseRepository[Property]):
    """숙소 레포지토리.

    Property repository with ordered room and room task lookups.

    Extends:
        BaseRepository[Property]
    """

    def __init__(self) -> None:
        """레포지토리를 초기화합니다.

        Initialize the property repository with Property model.
        """
        super().__init__(Property)

    async def get_with_rooms(
        self,
        db: AsyncSession,
        property_id: UUID,
    ) -> Property | None:
        """숙소를 방 피벗과 함께 조회합니다 (방문 순서대로).

        Retrieve a property with its room pivots in visit order.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            property_id: 숙소 UUID (Property UUID)

        Returns:
            Property | None: 숙소 또는 None (Property or None)
        """
        query: Select = (
            select(Property)
            .where(Property.id == property_id)
            .options(selectinload(Property.room_links).selectinload(PropertyRoom.room))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_room_tasks(
        self,
        db: AsyncSession,
        property_id: UUID,
    ) -> Sequence[RoomTask]:
        """숙소의 방-작업 배정 목록을 조회합니다.

        Retrieve the room task assignments of a property, ordered by task order.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            property_id: 숙소 UUID (Property UUID)

        Returns:
            Sequence[RoomTask]: 방-작업 배정 목록 (Room task assignments)
        """
        query: Select = (
            select(RoomTask)
            .where(RoomTask.property_id == property_id)
            .order_by(RoomTask.order, RoomTask.id)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_room_link(
        self,
        db: AsyncSession,
        property_id: UUID,
        room_id: UUID,
    ) -> PropertyRoom | None:
        """숙소-방 피벗을 조회합니다.

        Retrieve the pivot row of a room within a property.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            property_id: 숙소 UUID (Property UUID)
            room_id: 방 UUID (Room UUID)

        Returns:
            PropertyRoom | None: 피벗 또는 None (Pivot or None)
        """
        query: Select = (
            select(PropertyRoom)
            .where(PropertyRoom.property_id == property_id, PropertyRoom.room_id == room_id)
            .options(selectinload(PropertyRoom.room))
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
property_repository: PropertyRepository = PropertyRepository()
