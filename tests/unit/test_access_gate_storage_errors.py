import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from billing_api.core.auth.permissions import Feature, PermissionService
from billing_api.core.auth.service import AuthService
from billing_api.utils.exceptions import (
    ServiceUnavailableException,
    TimeoutException,
    UnauthorizedException,
)
from billing_api.utils.security import create_access_token


class _DownSession:
    """Every statement fails as if the database went away."""

    def __init__(self):
        self.rollbacks = 0

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    async def get(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    async def rollback(self):
        self.rollbacks += 1


class _HangingSession(_DownSession):
    async def execute(self, *args, **kwargs):
        await asyncio.sleep(5)

    async def get(self, *args, **kwargs):
        await asyncio.sleep(5)


@pytest.mark.asyncio
async def test_authenticate_during_outage_is_unavailable():
    token, _ = create_access_token(1, "alice")
    session = _DownSession()

    with pytest.raises(ServiceUnavailableException) as excinfo:
        await AuthService(session).authenticate(token)

    assert excinfo.value.status_code == 503
    assert session.rollbacks == 1


@pytest.mark.asyncio
async def test_authenticate_with_slow_database_times_out():
    token, _ = create_access_token(1, "alice")

    with pytest.raises(TimeoutException) as excinfo:
        await AuthService(_HangingSession(), timeout_seconds=0.05).authenticate(token)

    assert excinfo.value.status_code == 504


@pytest.mark.asyncio
async def test_authenticate_rejects_subject_beyond_bigint_without_querying():
    token, _ = create_access_token(2**64, "ghost")

    with pytest.raises(UnauthorizedException):
        await AuthService(_DownSession()).authenticate(token)


@pytest.mark.asyncio
async def test_permission_checks_translate_storage_errors():
    with pytest.raises(ServiceUnavailableException):
        await PermissionService(_DownSession()).has_permission(1, Feature.TARIFFS_UPDATE)

    with pytest.raises(TimeoutException):
        await PermissionService(_HangingSession(), timeout_seconds=0.05).get_permissions(1)


@pytest.mark.asyncio
async def test_login_lookup_during_outage_is_unavailable():
    with pytest.raises(ServiceUnavailableException):
        await AuthService(_DownSession()).login("alice", "secret-alice")
