"""관리자 API 라우터 패키지 — 관리자/숙소 소유자 엔드포인트 통합.

Admin API Router package — Aggregates the endpoints used by admins and
property owners into a single router for inclusion in the FastAPI application.

Included routers:
    - checklists: 체크리스트 배정/조회/리뷰 (Schedule, browse and review checklists)
    - properties: 방 사진 요구 조건 (Room photo requirements)
"""

from fastapi import APIRouter

from app.api.admin.checklists import router as checklists_router
from app.api.admin.properties import router as properties_router

admin_router: APIRouter = APIRouter()

# 체크리스트: /checklists 하위 (Checklists)
admin_router.include_router(checklists_router, prefix="/checklists", tags=["Checklists"])
# 숙소 방 설정: /properties 하위 (Property room settings)
admin_router.include_router(properties_router, prefix="/properties", tags=["Properties"])
