"""페이지네이션 유틸리티 모듈.

Pagination utility module.
Provides the Page response model and a helper that wraps a
``(items, total)`` tuple returned by ``BaseRepository.get_paginated``.
"""

import math
from typing import Any, Sequence

from pydantic import BaseModel


class Page(BaseModel):
    """페이지네이션 결과 모델.

    Pagination result model for typed responses.

    Attributes:
        items: 현재 페이지 항목 목록 (Items for the current page)
        total: 전체 항목 수 (Total count across all pages)
        page: 현재 페이지 번호 (Current page number, 1-based)
        per_page: 페이지당 항목 수 (Items per page)
        pages: 전체 페이지 수 (Total number of pages)
    """

    items: list[Any]  # 현재 페이지 항목 목록 (Paginated items)
    total: int  # 전체 항목 수 (Total item count)
    page: int  # 현재 페이지 번호 — 1부터 시작 (Current page, 1-indexed)
    per_page: int  # 페이지당 항목 수 (Items per page)
    pages: int  # 전체 페이지 수 (Total pages, computed: ceil(total/per_page))


def build_page(items: Sequence[Any], total: int, page: int, per_page: int) -> dict[str, Any]:
    """페이지 응답 딕셔너리를 만듭니다.

    Build a Page-shaped response dict from already serialized items.

    Args:
        items: 직렬화된 현재 페이지 항목 (Serialized items of this page)
        total: 전체 항목 수 (Total item count)
        page: 현재 페이지 번호 (Current page, 1-indexed)
        per_page: 페이지당 항목 수 (Items per page)

    Returns:
        dict[str, Any]: Page 모델과 같은 형태 (Dict shaped like Page)
    """
    return {
        "items": list(items),
        "total": total,
        "page": page,
        "per_page": per_page,
        "pages": math.ceil(total / per_page) if per_page > 0 else 0,
    }
