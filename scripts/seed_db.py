"""Provision demo operators, group rights, accounts and tariff links.

Tariff links are created here (version=1) because the API never creates them.

Usage:
    python scripts/seed_db.py [--accounts 10] [--password admin]
    python scripts/seed_db.py --schema-only   # create tables, no data
"""
import argparse
import asyncio
import os
import sys

from sqlalchemy import select

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from billing_api.core.auth.permissions import Feature
from billing_api.db.models import Account, AccountTariffLink, Base, GroupMember, GroupRight, Operator
from billing_api.db.session import AsyncSessionLocal, engine
from billing_api.utils.security import hash_password

# group_id -> granted feature ids
GROUPS: dict[int, list[Feature]] = {
    1: [Feature.ACCOUNTS_READ, Feature.TARIFFS_READ, Feature.TARIFFS_UPDATE],
    2: [Feature.ACCOUNTS_READ, Feature.TARIFFS_READ],
}

# login -> group ids
OPERATORS: dict[str, list[int]] = {
    "admin": [1],
    "viewer": [2],
}


async def create_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed(*, accounts: int, password: str) -> None:
    await create_schema()

    async with AsyncSessionLocal() as session:
        for group_id, fids in GROUPS.items():
            for fid in fids:
                if await session.get(GroupRight, (group_id, int(fid))) is None:
                    session.add(GroupRight(group_id=group_id, fid=int(fid)))

        for login, group_ids in OPERATORS.items():
            operator = (
                await session.execute(select(Operator).where(Operator.login == login))
            ).scalar_one_or_none()
            if operator is None:
                operator = Operator(login=login, password_hash=hash_password(password))
                session.add(operator)
                await session.flush()
            for group_id in group_ids:
                if await session.get(GroupMember, (group_id, operator.id)) is None:
                    session.add(GroupMember(group_id=group_id, user_id=operator.id))

        existing = (await session.execute(select(Account.id))).scalars().all()
        for _ in range(max(0, accounts - len(existing))):
            session.add(Account())
        await session.flush()

        linked = set((await session.execute(select(AccountTariffLink.account_id))).scalars().all())
        account_ids = (await session.execute(select(Account.id).order_by(Account.id))).scalars().all()
        for account_id in account_ids:
            if account_id not in linked:
                session.add(AccountTariffLink(account_id=account_id, tariff_id=1, version=1))

        await session.commit()

    await engine.dispose()
    print(f"seeded operators={sorted(OPERATORS)} accounts={accounts}")


async def _schema_only() -> None:
    await create_schema()
    await engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the billing database with demo data")
    parser.add_argument("--accounts", type=int, default=10)
    parser.add_argument("--password", default="admin")
    parser.add_argument("--schema-only", action="store_true", help="create tables and exit")
    args = parser.parse_args()

    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    if args.schema_only:
        asyncio.run(_schema_only())
    else:
        asyncio.run(seed(accounts=args.accounts, password=args.password))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
