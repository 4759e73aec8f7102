"""PostgreSQL implementation of IUserRepository.

Only the live state needed to re-validate a credential is read: the
owning tenant, the role and the active flag.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.aggregates import User
from tenancy.domain.value_objects import UserId
from tenancy.infrastructure.models import UserModel
from tenancy.infrastructure.observability import (
    DefaultUserRepositoryProbe,
    UserRepositoryProbe,
)
from tenancy.ports.exceptions import RepositoryUnavailableError
from tenancy.ports.repositories import IUserRepository


class UserRepository(IUserRepository):
    """Repository reading User aggregates from PostgreSQL."""

    def __init__(
        self,
        session: AsyncSession,
        probe: UserRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultUserRepositoryProbe()

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Fetch a user by ID, active or not.

        Args:
            user_id: The unique identifier of the user

        Returns:
            The User aggregate, or None if not found

        Raises:
            RepositoryUnavailableError: If the query fails
        """
        stmt = select(UserModel).where(UserModel.id == user_id.value)
        try:
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self._probe.query_failed("get_by_id", e)
            raise RepositoryUnavailableError("User lookup failed") from e

        if model is None:
            self._probe.user_not_found(user_id.value)
            return None

        self._probe.user_retrieved(user_id.value)
        return User(
            id=UserId(value=model.id),
            tenant_id=model.tenant_id,
            email=model.email,
            role=model.role,
            is_active=model.is_active,
        )
