"""앱 체크리스트 라우터 — 내 체크리스트 실행 API.

App Checklist Router — Endpoints the housekeeper's mobile app uses to run
an assigned checklist: list, detail, start (with location), item
submission and completion. Every mutating endpoint returns the refreshed
detail view so the app can re-render the current room.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_housekeeper
from app.database import get_db
from app.models.user import User
from app.schemas.checklist import (
    ChecklistDetailResponse,
    ChecklistItemSubmit,
    ChecklistResponse,
    ChecklistStartRequest,
)
from app.services.checklist_service import checklist_service
from app.services.geofence_guard import Coordinate, RequestLocationProvider

router: APIRouter = APIRouter()


@router.get("", response_model=list[ChecklistResponse])
async def list_my_checklists(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_housekeeper)],
    scheduled_date: Annotated[date | None, Query()] = None,
) -> list[dict]:
    """내 체크리스트 목록을 조회합니다.

    List my checklists with an optional scheduled date filter.
    """
    checklists = await checklist_service.get_my_checklists(
        db,
        housekeeper_id=current_user.id,
        scheduled_date=scheduled_date,
    )
    return [checklist_service.build_response(checklist) for checklist in checklists]


@router.get("/{checklist_id}", response_model=ChecklistDetailResponse)
async def get_my_checklist(
    checklist_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_housekeeper)],
) -> dict:
    """내 체크리스트 상세를 조회합니다 (현재 방 포함).

    Get my checklist detail including the current room.
    """
    checklist = await checklist_service.get_checklist_for_user(db, checklist_id, current_user)
    return checklist_service.build_detail_response(checklist)


@router.post("/{checklist_id}/start", response_model=ChecklistDetailResponse)
async def start_checklist(
    checklist_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_housekeeper)],
    data: ChecklistStartRequest | None = None,
) -> dict:
    """체크리스트를 시작합니다 — 숙소 근처에서만 가능.

    Start a checklist. The app sends the device's location fix; without
    one the request fails with ``location_unavailable``.

    Args:
        checklist_id: 체크리스트 UUID (Checklist UUID)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 하우스키퍼 (Authenticated housekeeper)
        data: 위치 정보, 선택 (Location fix, optional)

    Returns:
        dict: 시작된 체크리스트 상세 (Started checklist detail)
    """
    coordinate: Coordinate | None = None
    if data is not None and data.latitude is not None and data.longitude is not None:
        coordinate = Coordinate(latitude=data.latitude, longitude=data.longitude)

    checklist = await checklist_service.start_checklist(
        db,
        checklist_id=checklist_id,
        user=current_user,
        provider=RequestLocationProvider(coordinate),
    )
    await db.commit()

    return checklist_service.build_detail_response(checklist)


@router.put("/{checklist_id}/items/{item_id}", response_model=ChecklistDetailResponse)
async def submit_checklist_item(
    checklist_id: UUID,
    item_id: UUID,
    data: ChecklistItemSubmit,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_housekeeper)],
) -> dict:
    """체크리스트 항목을 제출합니다 — 제출 후 항목은 잠금.

    Submit one item with notes and photos. A submitted item is locked.

    Args:
        checklist_id: 체크리스트 UUID (Checklist UUID)
        item_id: 항목 UUID (Item UUID)
        data: 메모/사진 (Notes and base64 photos)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 하우스키퍼 (Authenticated housekeeper)

    Returns:
        dict: 갱신된 체크리스트 상세 (Updated checklist detail)
    """
    checklist = await checklist_service.submit_item(
        db,
        checklist_id=checklist_id,
        item_id=item_id,
        user=current_user,
        notes=data.notes,
        photo_payloads=data.photos,
    )
    await db.commit()

    return checklist_service.build_detail_response(checklist)


@router.post("/{checklist_id}/complete", response_model=ChecklistDetailResponse)
async def complete_checklist(
    checklist_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_housekeeper)],
) -> dict:
    """체크리스트를 완료합니다 — 모든 항목이 완료되어야 합니다.

    Complete a checklist once every item has been submitted.
    """
    checklist = await checklist_service.complete_checklist(db, checklist_id, current_user)
    await db.commit()

    return checklist_service.build_detail_response(checklist)
