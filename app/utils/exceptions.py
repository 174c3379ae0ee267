"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for common error patterns
and the typed checklist engine errors. Engine errors carry a machine-readable
``code`` in their ``detail`` payload so clients can tell a domain rejection
apart from a transport failure.

Usage:
    from app.utils.exceptions import NotFoundError, ItemLocked
    raise NotFoundError("Checklist not found")
    raise ItemLocked(item_id)
"""

from typing import Any
from uuid import UUID

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a requested resource (checklist, item, property, etc.) does not exist.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    403 Forbidden exception.
    Raised when the authenticated user lacks the required role
    (e.g. housekeeper attempting to review a checklist).

    Args:
        detail: 오류 메시지 (Error message, default: "Insufficient permissions")
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when authentication is missing, invalid, or expired.

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    400 Bad Request exception.
    Raised when the request data is invalid beyond what Pydantic validation catches
    (e.g. undecodable photo payload, item not part of the checklist).

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


# ---------------------------------------------------------------------------
# 체크리스트 엔진 오류 — Checklist engine domain errors
# ---------------------------------------------------------------------------


class ChecklistEngineError(HTTPException):
    """체크리스트 엔진 도메인 오류의 부모 클래스.

    Base class for checklist engine domain errors.
    The response detail is always ``{"code": ..., "message": ..., **context}``.

    Attributes:
        code: 오류 코드 (Machine-readable error code)
        message: 사용자 메시지 (Human-readable message)
        context: 추가 진단 정보 (Extra diagnostics merged into the detail payload)
    """

    code: str = "checklist_error"
    status_code_default: int = status.HTTP_409_CONFLICT

    def __init__(self, message: str, **context: Any) -> None:
        self.message: str = message
        self.context: dict[str, Any] = context
        super().__init__(
            status_code=self.status_code_default,
            detail={"code": self.code, "message": message, **context},
        )

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class IllegalTransition(ChecklistEngineError):
    """현재 상태에서 허용되지 않는 전이 — Wrong source status for the requested transition."""

    code = "illegal_transition"

    def __init__(self, action: str, current_status: str, allowed_from: str) -> None:
        self.action: str = action
        self.current_status: str = current_status
        self.allowed_from: str = allowed_from
        super().__init__(
            f"Cannot {action} a checklist in status '{current_status}' (requires '{allowed_from}')",
            action=action,
            current_status=current_status,
            allowed_from=allowed_from,
        )


class ItemLocked(ChecklistEngineError):
    """완료된 항목 수정 시도 — Attempt to modify an item that is already completed."""

    code = "item_locked"

    def __init__(self, item_id: UUID) -> None:
        self.item_id: UUID = item_id
        super().__init__(
            "This task has been completed and cannot be modified",
            item_id=str(item_id),
        )


class IncompleteChecklist(ChecklistEngineError):
    """미완료 항목이 남은 상태에서 완료 시도 — Outstanding items block completion."""

    code = "incomplete_checklist"

    def __init__(self, outstanding: int, total: int) -> None:
        self.outstanding: int = outstanding
        self.total: int = total
        super().__init__(
            f"{outstanding} of {total} items are not completed yet",
            outstanding=outstanding,
            total=total,
        )


class InsufficientPhotos(ChecklistEngineError):
    """방 사진 수 부족 — Photo requirement gate rejection, recoverable by adding photos."""

    code = "insufficient_photos"
    status_code_default = 422

    def __init__(self, room_id: UUID, required: int, available: int) -> None:
        self.room_id: UUID = room_id
        self.required: int = required
        self.available: int = available
        super().__init__(
            f"This room requires at least {required} photo(s); {available} provided",
            room_id=str(room_id),
            required=required,
            available=available,
        )


class LocationUnavailable(ChecklistEngineError):
    """위치 정보 없음 — No location fix could be obtained; retry or grant permission."""

    code = "location_unavailable"
    status_code_default = 422

    def __init__(self, reason: str = "Unable to get your location. Please enable location services and try again.") -> None:
        super().__init__(reason)


class OutOfRange(ChecklistEngineError):
    """지오펜스 범위 밖 — Geofence rejection carrying the distance diagnostics verbatim."""

    code = "out_of_range"
    status_code_default = status.HTTP_403_FORBIDDEN

    def __init__(self, distance_meters: float, allowed_meters: float) -> None:
        self.distance_meters: float = distance_meters
        self.allowed_meters: float = allowed_meters
        super().__init__(
            f"You are ~{round(distance_meters)}m away; allowed {allowed_meters:g}m",
            distance_meters=distance_meters,
            allowed_meters=allowed_meters,
        )


class InvalidRating(ChecklistEngineError):
    """잘못된 평점 — Missing or out-of-range (1~5) review rating."""

    code = "invalid_rating"
    status_code_default = 422

    def __init__(self, rating: Any) -> None:
        self.rating: Any = rating
        super().__init__("Rating must be an integer between 1 and 5", rating=rating)


class ConcurrentModification(ChecklistEngineError):
    """동시 수정 충돌 — Another writer committed to the same checklist first."""

    code = "concurrent_modification"

    def __init__(self, checklist_id: UUID) -> None:
        self.checklist_id: UUID = checklist_id
        super().__init__(
            "The checklist was modified concurrently; reload and try again",
            checklist_id=str(checklist_id),
        )
