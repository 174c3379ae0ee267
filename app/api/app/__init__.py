"""앱 API 라우터 패키지 — 하우스키퍼용 엔드포인트 통합.

App API Router package — Aggregates the housekeeper-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - checklists: 내 체크리스트 실행 (My checklists: start, submit items, complete)
"""

from fastapi import APIRouter

from app.api.app.checklists import router as checklists_router

app_router: APIRouter = APIRouter()

# 내 체크리스트: /my/checklists 하위 (My checklists)
app_router.include_router(checklists_router, prefix="/my/checklists", tags=["My Checklists"])
