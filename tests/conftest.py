"""
Billing API: pytest fixtures.

Provides:
- Per-test SQLite database (file based, so concurrent sessions see one DB)
- Session factory / session fixtures
- HTTP client bound to the ASGI app with the DB dependency overridden
- Seeded operators, group rights and tariff links
"""
from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from billing_api.api import deps
from billing_api.core.auth.permissions import Feature
from billing_api.db.models import Account, AccountTariffLink, Base, GroupMember, GroupRight, Operator
from billing_api.db.session import build_engine, build_session_factory
from billing_api.main import app
from billing_api.utils.security import create_access_token, hash_password


SEEDED_AT = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

# group_id -> fids
GROUP_RIGHTS = {
    1: [Feature.ACCOUNTS_READ, Feature.TARIFFS_READ, Feature.TARIFFS_UPDATE],
    2: [Feature.ACCOUNTS_READ, Feature.TARIFFS_READ],
}


# =============================================================================
# Database
# =============================================================================
@pytest_asyncio.fixture
async def db_engine(tmp_path):
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'billing_test.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# =============================================================================
# HTTP Client
# =============================================================================
@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def _get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[deps.get_db] = _get_test_db
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(deps.get_db, None)


# =============================================================================
# Seed data
# =============================================================================
def auth_headers(operator: Operator) -> dict[str, str]:
    token, _ = create_access_token(operator.id, operator.login)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def billing_data(db_session):
    """Operators with different rights plus two tariff links.

    - alice: group 1 (read + update)
    - bob: group 2 (read only)
    - mallory: no groups
    - link 7: account 3, tariff 2, version 3, never updated by an operator
    - link 8: account 4, tariff 1, version 1, last updated by alice
    """
    for group_id, fids in GROUP_RIGHTS.items():
        db_session.add_all([GroupRight(group_id=group_id, fid=int(fid)) for fid in fids])

    operators = {
        login: Operator(login=login, password_hash=hash_password(f"secret-{login}"))
        for login in ("alice", "bob", "mallory")
    }
    db_session.add_all(operators.values())
    await db_session.flush()

    db_session.add_all(
        [
            GroupMember(group_id=1, user_id=operators["alice"].id),
            GroupMember(group_id=2, user_id=operators["bob"].id),
            Account(id=3),
            Account(id=4),
        ]
    )
    await db_session.flush()

    db_session.add_all(
        [
            AccountTariffLink(id=7, account_id=3, tariff_id=2, version=3, updated_at=SEEDED_AT),
            AccountTariffLink(
                id=8,
                account_id=4,
                tariff_id=1,
                version=1,
                updated_at=SEEDED_AT,
                updated_by=operators["alice"].id,
            ),
        ]
    )
    await db_session.commit()

    return {
        "operators": operators,
        "headers": {login: auth_headers(op) for login, op in operators.items()},
        "link_id": 7,
        "account_id": 3,
    }
