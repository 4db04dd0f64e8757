from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from billing_api.db.calls import DEFAULT_TIMEOUT_SECONDS, run_db_call
from billing_api.db.models._types import fits_bigint
from billing_api.db.models.operator import Operator
from billing_api.schemas.auth import LoginResponse, OperatorPublic
from billing_api.utils.exceptions import InvalidCredentialsException, UnauthorizedException
from billing_api.utils.security import create_access_token, decode_token, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: AsyncSession, *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.db = db
        self.timeout_seconds = timeout_seconds

    async def get_by_login(self, login: str) -> Operator | None:
        async def _load() -> Operator | None:
            result = await self.db.execute(select(Operator).where(Operator.login == login))
            return result.scalar_one_or_none()

        return await run_db_call(
            self.db, "auth.get_by_login", _load, timeout_seconds=self.timeout_seconds, login=login
        )

    async def login(self, login: str, password: str) -> LoginResponse:
        operator = await self.get_by_login(login)
        if operator is None or not verify_password(password, operator.password_hash):
            raise InvalidCredentialsException()

        token, expires_at = create_access_token(operator.id, operator.login)
        return LoginResponse(
            token=token,
            expires_at=expires_at,
            operator=OperatorPublic.model_validate(operator),
        )

    async def authenticate(self, token: str) -> Operator:
        payload = decode_token(token)
        if not payload:
            raise UnauthorizedException()

        try:
            operator_id = int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            raise UnauthorizedException()
        if not fits_bigint(operator_id):
            raise UnauthorizedException()

        operator = await run_db_call(
            self.db,
            "auth.authenticate",
            lambda: self.db.get(Operator, operator_id),
            timeout_seconds=self.timeout_seconds,
            operator_id=operator_id,
        )
        if operator is None:
            logger.info("auth.authenticate operator_missing operator_id=%s", operator_id)
            raise UnauthorizedException()
        return operator
