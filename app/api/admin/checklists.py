"""관리자 체크리스트 라우터 — 체크리스트 배정/조회/리뷰 API.

Admin Checklist Router — Endpoints for admins and property owners to
schedule checklists, browse them, and review finished ones.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_manager
from app.database import get_db
from app.models.user import User
from app.schemas.checklist import (
    ChecklistCreate,
    ChecklistDetailResponse,
    ChecklistReviewRequest,
)
from app.services.checklist_service import checklist_service
from app.utils.exceptions import BadRequestError
from app.utils.pagination import Page, build_page

router: APIRouter = APIRouter()


def _parse_uuid(value: str, field: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise BadRequestError(f"잘못된 UUID 형식입니다 (Invalid UUID for {field})")


@router.post("", response_model=ChecklistDetailResponse, status_code=201)
async def create_checklist(
    data: ChecklistCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> dict:
    """체크리스트를 생성합니다 — 숙소의 방/작업으로 항목 구성.

    Schedule a checklist for a housekeeper. Items are built from the
    property's active rooms and their tasks.

    Args:
        data: 생성 데이터 (Property, housekeeper and schedule)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 관리자 또는 숙소 소유자 (Admin or property owner)

    Returns:
        dict: 생성된 체크리스트 상세 (Created checklist detail)
    """
    checklist = await checklist_service.create_checklist(
        db,
        property_id=_parse_uuid(data.property_id, "property_id"),
        housekeeper_id=_parse_uuid(data.housekeeper_id, "housekeeper_id"),
        scheduled_date=data.scheduled_date,
        scheduled_time=data.scheduled_time,
        user=current_user,
    )
    await db.commit()

    return checklist_service.build_detail_response(checklist)


@router.get("", response_model=Page)
async def list_checklists(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    property_id: Annotated[UUID | None, Query()] = None,
    housekeeper_id: Annotated[UUID | None, Query()] = None,
    status: Annotated[str | None, Query()] = None,
    scheduled_date: Annotated[date | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    """체크리스트 목록을 필터링하여 조회합니다.

    List checklists with filters and pagination. Property owners only see
    their own properties.
    """
    checklists, total = await checklist_service.list_checklists(
        db,
        user=current_user,
        property_id=property_id,
        housekeeper_id=housekeeper_id,
        status=status,
        scheduled_date=scheduled_date,
        page=page,
        per_page=per_page,
    )
    return build_page(
        [checklist_service.build_response(checklist) for checklist in checklists],
        total,
        page,
        per_page,
    )


@router.get("/{checklist_id}", response_model=ChecklistDetailResponse)
async def get_checklist(
    checklist_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> dict:
    """체크리스트 상세를 조회합니다 (Get checklist detail)."""
    checklist = await checklist_service.get_checklist_for_user(db, checklist_id, current_user)
    return checklist_service.build_detail_response(checklist)


@router.post("/{checklist_id}/review", response_model=ChecklistDetailResponse)
async def review_checklist(
    checklist_id: UUID,
    data: ChecklistReviewRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> dict:
    """완료된 체크리스트를 리뷰합니다 — 리뷰된 체크리스트는 평점/메모 수정.

    Review a completed checklist, or update the rating and notes of an
    already reviewed one.

    Args:
        checklist_id: 체크리스트 UUID (Checklist UUID)
        data: 평점/메모 (Rating 1..5 and notes)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 관리자 또는 숙소 소유자 (Admin or property owner)

    Returns:
        dict: 리뷰된 체크리스트 상세 (Reviewed checklist detail)
    """
    checklist = await checklist_service.review_checklist(
        db,
        checklist_id=checklist_id,
        user=current_user,
        rating=data.rating,
        notes=data.notes,
    )
    await db.commit()

    return checklist_service.build_detail_response(checklist)
