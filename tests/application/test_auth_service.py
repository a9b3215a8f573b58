"""Tests for role resolution."""

import pytest

from textile_catalog.application.auth_service import AuthService
from textile_catalog.catalog.store import CatalogStore
from textile_catalog.domain.entities import AppUser, Role
from textile_catalog.domain.exceptions import PermissionDeniedError
from textile_catalog.infrastructure.document_store import InMemoryDocumentStore
from textile_catalog.infrastructure.identity import IdentityUser


@pytest.fixture
def auth(store: CatalogStore) -> AuthService:
    return AuthService(store, [" Owner@Example.com ", ""])


class TestResolveUser:
    """Tests for role precedence."""

    @pytest.mark.asyncio
    async def test_allowlisted_email_is_admin(self, auth: AuthService) -> None:
        user = await auth.resolve_user(IdentityUser(uid="u1", email="owner@example.COM"))
        assert user.role == Role.ADMIN

    @pytest.mark.asyncio
    async def test_default_is_user(self, auth: AuthService) -> None:
        user = await auth.resolve_user(IdentityUser(uid="u2", email="guest@example.com"))
        assert user == AppUser(uid="u2", email="guest@example.com", role=Role.USER)

    @pytest.mark.asyncio
    async def test_stored_role_wins(
        self, auth: AuthService, documents: InMemoryDocumentStore
    ) -> None:
        await documents.set("users", "u1", {"role": "user"})
        await documents.set("users", "u3", {"role": "admin"})

        owner = await auth.resolve_user(IdentityUser(uid="u1", email="owner@example.com"))
        other = await auth.resolve_user(IdentityUser(uid="u3", email=None))

        assert owner.role == Role.USER
        assert other.is_admin is True

    @pytest.mark.asyncio
    async def test_unknown_stored_role_falls_back(
        self, auth: AuthService, documents: InMemoryDocumentStore
    ) -> None:
        await documents.set("users", "u1", {"role": "superuser"})

        user = await auth.resolve_user(IdentityUser(uid="u1", email="owner@example.com"))

        assert user.role == Role.ADMIN


class TestRequireAdmin:
    def test_rejects_plain_user(self) -> None:
        with pytest.raises(PermissionDeniedError):
            AuthService.require_admin(AppUser(uid="u1"))

    def test_allows_admin(self) -> None:
        AuthService.require_admin(AppUser(uid="u1", role=Role.ADMIN))

    def test_missing_email_not_allowlisted(self, auth: AuthService) -> None:
        assert auth.is_allowlisted(None) is False
