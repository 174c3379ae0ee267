"""사용자 레포지토리 — 사용자 DB 쿼리 담당.

User Repository — Handles users table lookups needed by authentication
and housekeeper assignment checks.
"""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 레포지토리.

    User repository.

    Extends:
        BaseRepository[User]
    """

    def __init__(self) -> None:
        super().__init__(User)

    async def get_active(self, db: AsyncSession, user_id: UUID) -> User | None:
        """활성 사용자를 조회합니다 (Retrieve a user only when the account is active)."""
        query: Select = select(User).where(User.id == user_id, User.is_active.is_(True))
        result = await db.execute(query)
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
