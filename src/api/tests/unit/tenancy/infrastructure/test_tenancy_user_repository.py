"""Unit tests for UserRepository."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from tenancy.domain.value_objects import UserId
from tenancy.infrastructure.models import UserModel
from tenancy.infrastructure.user_repository import UserRepository
from tenancy.ports.exceptions import RepositoryUnavailableError
from tenancy.ports.repositories import IUserRepository


@pytest.fixture
def mock_session():
    """Create mock async session."""
    return AsyncMock()


@pytest.fixture
def mock_probe():
    return MagicMock()


@pytest.fixture
def repository(mock_session, mock_probe):
    """Create repository with mock session."""
    return UserRepository(session=mock_session, probe=mock_probe)


def _returning(mock_session: AsyncMock, model: UserModel | None) -> None:
    result = MagicMock()
    result.scalar_one_or_none.return_value = model
    mock_session.execute.return_value = result


class TestProtocolCompliance:
    """Tests for protocol compliance."""

    def test_implements_protocol(self, repository):
        """Repository should implement IUserRepository protocol."""
        assert isinstance(repository, IUserRepository)


class TestGetById:
    """Tests for get_by_id method."""

    @pytest.mark.asyncio
    async def test_returns_user_with_binding_fields(self, repository, mock_session):
        _returning(
            mock_session,
            UserModel(
                id="user-1",
                tenant_id="01ARZ3NDEKTSV4RRFFQ69G5FAV",
                email="a@example.com",
                role="manager",
                is_active=False,
            ),
        )

        user = await repository.get_by_id(UserId("user-1"))

        assert user is not None
        assert user.tenant_id == "01ARZ3NDEKTSV4RRFFQ69G5FAV"
        assert user.role == "manager"
        assert user.is_active is False

    @pytest.mark.asyncio
    async def test_returns_none_when_missing(self, repository, mock_session, mock_probe):
        _returning(mock_session, None)

        assert await repository.get_by_id(UserId("ghost")) is None
        mock_probe.user_not_found.assert_called_once_with("ghost")

    @pytest.mark.asyncio
    async def test_driver_errors_become_repository_unavailable(
        self, repository, mock_session
    ):
        mock_session.execute.side_effect = OperationalError("SELECT", {}, Exception())

        with pytest.raises(RepositoryUnavailableError) as exc_info:
            await repository.get_by_id(UserId("user-1"))

        assert isinstance(exc_info.value.__cause__, OperationalError)
