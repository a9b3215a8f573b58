"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    api_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Document store ("memory" or "sql")
    document_store: str = "memory"
    database_url: str = "sqlite+aiosqlite:///./catalog.db"

    # Blob store ("memory" or "firebase")
    blob_store: str = "memory"
    storage_bucket: str = ""
    storage_base_url: str = "https://firebasestorage.googleapis.com"
    # Bearer token for Storage requests; empty sends none
    storage_auth_token: str = ""

    # Identity ("static" or "firebase")
    identity_provider: str = "static"
    firebase_api_key: str = ""
    identity_base_url: str = "https://identitytoolkit.googleapis.com"
    # Comma separated "token=uid:email" entries for the static provider
    static_tokens: str = "dev-token=dev-user:dev@example.com"

    # Comma separated; users without a role record whose email is listed are admins
    admin_emails: str = ""

    # Client-local state (persisted filters)
    local_state_dir: str = ".catalog-state"

    # Outbound HTTP
    http_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def admin_email_list(self) -> list[str]:
        """Admin allowlist, lowercased with blanks removed."""
        return [e.strip().lower() for e in self.admin_emails.split(",") if e.strip()]

    @property
    def static_token_table(self) -> dict[str, tuple[str, str | None]]:
        """Parse ``static_tokens`` into ``{token: (uid, email)}``."""
        table: dict[str, tuple[str, str | None]] = {}
        for entry in self.static_tokens.split(","):
            token, sep, identity = entry.strip().partition("=")
            if not sep or not token:
                continue
            uid, _, email = identity.partition(":")
            table[token] = (uid, email or None)
        return table


settings = Settings()
