import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from billing_api.api import deps
from billing_api.core.auth.permissions import PermissionService
from billing_api.core.auth.service import AuthService
from billing_api.config import settings
from billing_api.db.models.operator import Operator
from billing_api.schemas.auth import LoginRequest, LoginResponse, WhoAmI
from billing_api.schemas.common import ErrorEnvelope
from billing_api.utils.exceptions import BillingException
from billing_api.utils.metrics import AUTH_EVENTS_TOTAL

router = APIRouter()

logger = logging.getLogger(__name__)


def _emit(event: str, result: str) -> None:
    try:
        AUTH_EVENTS_TOTAL.labels(event=event, result=result).inc()
    except Exception:
        pass


@router.post("/login", response_model=LoginResponse, responses={401: {"model": ErrorEnvelope}})
async def login(
    request: LoginRequest,
    http_request: Request,
    db: AsyncSession = Depends(deps.get_db),
):
    service = AuthService(db, timeout_seconds=settings.DB_OPERATION_TIMEOUT_SECONDS)
    client_host = (http_request.client.host if http_request.client else None) or "unknown"
    try:
        result = await service.login(request.login, request.password)
    except BillingException:
        _emit("login", "failure")
        logger.warning("auth.login failed login=%s ip=%s", request.login, client_host)
        raise
    except Exception:
        _emit("login", "error")
        logger.exception("auth.login crashed login=%s ip=%s", request.login, client_host)
        raise

    _emit("login", "success")
    logger.info("auth.login success login=%s ip=%s", request.login, client_host)
    return result


@router.get("/me", response_model=WhoAmI, responses={401: {"model": ErrorEnvelope}})
async def whoami(
    current_operator: Operator = Depends(deps.get_current_operator),
    db: AsyncSession = Depends(deps.get_db),
):
    service = PermissionService(db, timeout_seconds=settings.DB_OPERATION_TIMEOUT_SECONDS)
    permissions = await service.get_permissions(current_operator.id)
    return WhoAmI(id=current_operator.id, login=current_operator.login, permissions=permissions)
