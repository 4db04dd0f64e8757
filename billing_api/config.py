import logging
from typing import Any, ClassVar, FrozenSet

from pydantic_settings import BaseSettings, SettingsConfigDict

_logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./billing.db"

    # Database pool (applies to client/server DBs like Postgres; SQLite uses NullPool)
    DB_POOL_PRE_PING: bool = True
    DB_POOL_SIZE: int = 25
    DB_MAX_OVERFLOW: int = 0
    DB_POOL_TIMEOUT_SECONDS: int = 30
    DB_POOL_RECYCLE_SECONDS: int = 900

    # Postgres only. Conditional UPDATEs rely on READ COMMITTED re-evaluating the
    # version predicate after a concurrent writer commits; SERIALIZABLE would turn
    # the losing writer into a serialization failure instead of a version conflict.
    DB_POSTGRES_ISOLATION_LEVEL: str = "READ COMMITTED"

    # Upper bound for a single store call (read or conditional update).
    DB_OPERATION_TIMEOUT_SECONDS: float = 3.0

    # JWT
    # NOTE: This default is intentionally insecure and must never be used outside dev/test.
    DEFAULT_JWT_SECRET: ClassVar[str] = "dev-secret-change-me-please-32chars!!"
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 24 * 60

    # Application
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    # Environment
    # Used for guardrails. Suggested values: dev|staging|prod.
    ENV: str = "dev"

    # CORS (comma-separated origins, "*" = any)
    CORS_ALLOW_ORIGINS: str = "*"

    # Observability
    METRICS_ENABLED: bool = True

    # --- Guardrails ---
    # Fail-fast on obviously insecure secrets outside dev/test.
    _SAFE_ENVS: ClassVar[FrozenSet[str]] = frozenset({"dev", "development", "test", "testing"})
    _UNSAFE_PLACEHOLDERS: ClassVar[FrozenSet[str]] = frozenset(
        {
            "change-me-in-production",
            "change-me",
            "changeme",
            "",
        }
    )

    def model_post_init(self, __context: Any) -> None:
        # Runs on every Settings() instantiation (including module-level `settings = Settings()`).
        self._guardrail_default_secrets()

    def _guardrail_default_secrets(self) -> None:
        env = (self.ENV or "").strip().lower()
        if env in self._SAFE_ENVS:
            return

        jwt_secret = (self.JWT_SECRET or "").strip()
        lowered = jwt_secret.lower()
        unsafe = (
            jwt_secret == self.DEFAULT_JWT_SECRET
            or lowered in self._UNSAFE_PLACEHOLDERS
            or "change-me" in lowered
        )
        if unsafe:
            raise RuntimeError(
                "Refusing to start with insecure default/placeholder secrets outside dev/test: "
                "JWT_SECRET. "
                f"Got ENV={self.ENV!r}. "
                "Set a secure value via the JWT_SECRET environment variable, "
                "or run with ENV=dev/test."
            )

    def cors_origins(self) -> list[str]:
        raw = (self.CORS_ALLOW_ORIGINS or "").strip()
        if not raw:
            return []
        return [o.strip() for o in raw.split(",") if o.strip()]


settings = Settings()


def get_settings() -> Settings:
    """Return the global settings instance.

    Provided as a callable for FastAPI Depends() and test mocking convenience.
    """
    return settings
