from __future__ import annotations

from enum import IntEnum

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from billing_api.db.calls import DEFAULT_TIMEOUT_SECONDS, run_db_call
from billing_api.db.models.group import GroupMember, GroupRight


class Feature(IntEnum):
    """Feature ids (fid) as stored in system_rights."""

    ACCOUNTS_READ = 1
    TARIFFS_READ = 2
    TARIFFS_UPDATE = 3


class PermissionService:
    def __init__(self, db: AsyncSession, *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.db = db
        self.timeout_seconds = timeout_seconds

    async def has_permission(self, operator_id: int, fid: int) -> bool:
        stmt = select(
            exists()
            .where(GroupMember.group_id == GroupRight.group_id)
            .where(GroupMember.user_id == operator_id)
            .where(GroupRight.fid == int(fid))
        )

        async def _check() -> bool:
            return bool((await self.db.execute(stmt)).scalar())

        return await run_db_call(
            self.db,
            "permissions.has_permission",
            _check,
            timeout_seconds=self.timeout_seconds,
            operator_id=operator_id,
            fid=int(fid),
        )

    async def get_permissions(self, operator_id: int) -> list[int]:
        stmt = (
            select(GroupRight.fid)
            .join(GroupMember, GroupMember.group_id == GroupRight.group_id)
            .where(GroupMember.user_id == operator_id)
            .distinct()
            .order_by(GroupRight.fid)
        )

        async def _load() -> list[int]:
            return [int(fid) for fid in (await self.db.execute(stmt)).scalars().all()]

        return await run_db_call(
            self.db,
            "permissions.get_permissions",
            _load,
            timeout_seconds=self.timeout_seconds,
            operator_id=operator_id,
        )
