"""숙소 서비스 — 숙소 접근 권한 및 방 사진 요구 조건 설정.

Property Service — Property access rules and the per-property room photo
requirement input. The photo count is clamped to [1, 10] here, at input
time; zero or an empty value is stored as "no requirement".
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.property import Property, PropertyRoom
from app.models.user import User, ROLE_ADMIN, ROLE_PROPERTY_OWNER
from app.repositories.property_repository import property_repository
from app.services.photo_gate import clamp_photo_count
from app.utils.exceptions import ForbiddenError, NotFoundError


def can_manage_property(user: User, property_: Property) -> bool:
    """관리자 또는 해당 숙소 소유자인지 확인합니다 (Admin, or the property's owner)."""
    if user.role == ROLE_ADMIN:
        return True
    return user.role == ROLE_PROPERTY_OWNER and property_.owner_id == user.id


class PropertyService:
    """숙소 서비스.

    Property service covering access checks and room requirement updates.
    """

    async def get_managed_property(
        self,
        db: AsyncSession,
        property_id: UUID,
        user: User,
    ) -> Property:
        """관리 권한이 있는 숙소를 방 목록과 함께 조회합니다.

        Load a property (with ordered rooms) the user is allowed to manage.

        Raises:
            NotFoundError: 숙소가 없을 때 (When property not found)
            ForbiddenError: 관리 권한이 없을 때 (When user cannot manage it)
        """
        property_: Property | None = await property_repository.get_with_rooms(db, property_id)
        if property_ is None:
            raise NotFoundError("숙소를 찾을 수 없습니다 (Property not found)")
        if not can_manage_property(user, property_):
            raise ForbiddenError("숙소 관리 권한이 없습니다 (You cannot manage this property)")
        return property_

    async def update_room_requirements(
        self,
        db: AsyncSession,
        property_id: UUID,
        room_id: UUID,
        requires_photo: bool,
        photos_required_count: int | None,
        user: User,
    ) -> PropertyRoom:
        """숙소 내 방의 사진 요구 조건을 수정합니다.

        Update the photo requirement of a room within a property.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            property_id: 숙소 UUID (Property UUID)
            room_id: 방 UUID (Room UUID)
            requires_photo: 사진 필수 여부 (Whether photos are required)
            photos_required_count: 필요 사진 수, [1, 10]으로 보정 (Count, clamped to [1, 10])
            user: 요청 사용자 (Requesting user)

        Returns:
            PropertyRoom: 수정된 피벗 (Updated pivot)
        """
        await self.get_managed_property(db, property_id, user)

        link: PropertyRoom | None = await property_repository.get_room_link(db, property_id, room_id)
        if link is None:
            raise NotFoundError("숙소에 배정되지 않은 방입니다 (Room is not attached to this property)")

        link.requires_photo = requires_photo
        link.photos_required_count = clamp_photo_count(photos_required_count)
        await db.flush()
        return link

    def build_room_response(self, link: PropertyRoom) -> dict:
        """방 피벗 응답 딕셔너리 (Response dict for a room pivot)."""
        return {
            "room_id": str(link.room_id),
            "name": link.room.name if link.room is not None else None,
            "order": link.order,
            "is_active": link.is_active,
            "requires_photo": link.requires_photo,
            "photos_required_count": link.photos_required_count,
        }


# 싱글턴 인스턴스 — Singleton instance
property_service: PropertyService = PropertyService()
