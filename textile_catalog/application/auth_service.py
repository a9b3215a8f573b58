"""Role resolution for signed-in users."""

import structlog

from textile_catalog.catalog.store import CatalogStore, get_catalog_store
from textile_catalog.domain.entities import AppUser, Role
from textile_catalog.domain.exceptions import PermissionDeniedError
from textile_catalog.infrastructure.config import settings
from textile_catalog.infrastructure.identity import IdentityUser

logger = structlog.get_logger()


class AuthService:
    """Resolves an authenticated identity to an ``AppUser``.

    The role stored at ``users/{uid}`` wins. Without a usable record the
    user is an admin when their email is on the allowlist, otherwise a
    plain user.
    """

    def __init__(self, store: CatalogStore, admin_emails: list[str]) -> None:
        """Initialize service.

        Args:
            store: Catalog store client.
            admin_emails: Allowlisted admin emails, compared case-insensitively.
        """
        self.store = store
        self.admin_emails = {e.strip().lower() for e in admin_emails if e.strip()}

    def is_allowlisted(self, email: str | None) -> bool:
        return bool(email) and email.strip().lower() in self.admin_emails

    async def resolve_user(self, identity: IdentityUser) -> AppUser:
        """Build the app user for a verified identity.

        Raises:
            TransportError: If the role record cannot be read.
        """
        role = await self.store.get_user_role(identity.uid)
        if role is None:
            role = Role.ADMIN if self.is_allowlisted(identity.email) else Role.USER
            logger.debug("No role record, using allowlist", uid=identity.uid, role=role.value)
        return AppUser(uid=identity.uid, email=identity.email, role=role)

    @staticmethod
    def require_admin(user: AppUser) -> None:
        """Raise PermissionDeniedError unless the user is an admin."""
        if not user.is_admin:
            raise PermissionDeniedError(user.uid, Role.ADMIN.value)


def get_auth_service() -> AuthService:
    """Get auth service instance."""
    return AuthService(get_catalog_store(), settings.admin_email_list)
