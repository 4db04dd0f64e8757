from typing import AsyncGenerator, Awaitable, Callable

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from billing_api.config import settings
from billing_api.core.auth.permissions import Feature, PermissionService
from billing_api.core.auth.service import AuthService
from billing_api.core.tariffs.service import TariffAssignmentService
from billing_api.core.tariffs.store import TariffLinkStore
from billing_api.db.models.operator import Operator
from billing_api.db.session import get_db_session
from billing_api.utils.exceptions import AuthenticationRequiredException, ForbiddenException
from billing_api.utils.metrics import AUTH_EVENTS_TOTAL

# auto_error=False: a missing header must produce the API error envelope, not
# FastAPI's default {"detail": ...}.
optional_oauth2 = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_db_session():
        yield session


async def get_current_operator(
    request: Request,
    db: AsyncSession = Depends(get_db),
    token: str | None = Depends(optional_oauth2),
) -> Operator:
    if not token:
        raise AuthenticationRequiredException()

    auth = AuthService(db, timeout_seconds=settings.DB_OPERATION_TIMEOUT_SECONDS)
    operator = await auth.authenticate(token)
    request.state.operator_id = operator.id
    return operator


def require_permission(feature: Feature) -> Callable[..., Awaitable[Operator]]:
    """Dependency factory: the caller must hold `feature` through one of its groups."""

    async def _require(
        operator: Operator = Depends(get_current_operator),
        db: AsyncSession = Depends(get_db),
    ) -> Operator:
        permissions = PermissionService(db, timeout_seconds=settings.DB_OPERATION_TIMEOUT_SECONDS)
        allowed = await permissions.has_permission(operator.id, feature)
        if not allowed:
            try:
                AUTH_EVENTS_TOTAL.labels(event="authorize", result="forbidden").inc()
            except Exception:
                pass
            raise ForbiddenException(details={"required_fid": int(feature)})
        return operator

    return _require


def get_tariff_assignment_service(db: AsyncSession = Depends(get_db)) -> TariffAssignmentService:
    store = TariffLinkStore(db, timeout_seconds=settings.DB_OPERATION_TIMEOUT_SECONDS)
    return TariffAssignmentService(store)
