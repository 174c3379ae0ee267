"""관리자 숙소 라우터 — 방 사진 요구 조건 설정 API.

Admin Property Router — Room photo requirement settings per property.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_manager
from app.database import get_db
from app.models.user import User
from app.schemas.checklist import RoomRequirementUpdate, RoomResponse
from app.services.property_service import property_service

router: APIRouter = APIRouter()


@router.get("/{property_id}/rooms", response_model=list[RoomResponse])
async def list_property_rooms(
    property_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> list[dict]:
    """숙소의 방 목록을 방문 순서대로 조회합니다 (Rooms in visit order)."""
    property_ = await property_service.get_managed_property(db, property_id, current_user)
    return [property_service.build_room_response(link) for link in property_.room_links]


@router.put("/{property_id}/rooms/{room_id}/requirements", response_model=RoomResponse)
async def update_room_requirements(
    property_id: UUID,
    room_id: UUID,
    data: RoomRequirementUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> dict:
    """방 사진 요구 조건을 수정합니다 — 사진 수는 1~10으로 보정.

    Update a room's photo requirement. The count is clamped to [1, 10];
    0 or null clears it. Checklists already in progress read the new
    value at their next submission.

    Args:
        property_id: 숙소 UUID (Property UUID)
        room_id: 방 UUID (Room UUID)
        data: 요구 조건 (Requirement values)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 관리자 또는 숙소 소유자 (Admin or property owner)

    Returns:
        dict: 수정된 방 정보 (Updated room pivot)
    """
    link = await property_service.update_room_requirements(
        db,
        property_id=property_id,
        room_id=room_id,
        requires_photo=data.requires_photo,
        photos_required_count=data.photos_required_count,
        user=current_user,
    )
    await db.commit()

    return property_service.build_room_response(link)
