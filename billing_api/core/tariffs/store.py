"""Versioned storage of account tariff links.

`conditional_update` is the single write path for a tariff link. It is one
UPDATE statement whose WHERE clause carries the expected version, so the
compare and the swap happen atomically inside the database. Reads join the
operator table to resolve who made the last change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, TypeVar

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from billing_api.db.calls import DEFAULT_TIMEOUT_SECONDS, rollback_quietly, run_db_call
from billing_api.db.models._types import fits_bigint
from billing_api.db.models.operator import Operator
from billing_api.db.models.tariff_link import AccountTariffLink
from billing_api.schemas.tariff_link import TariffLink, UpdatedByUser
from billing_api.utils.exceptions import BillingException, NotFoundException

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class VersionStamp:
    account_id: int
    version: int
    updated_at: datetime


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _view_query():
    return select(
        AccountTariffLink.id,
        AccountTariffLink.account_id,
        AccountTariffLink.tariff_id,
        AccountTariffLink.version,
        AccountTariffLink.updated_at,
        AccountTariffLink.updated_by,
        Operator.id.label("operator_id"),
        Operator.login.label("operator_login"),
    ).outerjoin(Operator, Operator.id == AccountTariffLink.updated_by)


def _to_view(row) -> TariffLink:
    updated_by_user = None
    if row.operator_id is not None and row.operator_login is not None:
        updated_by_user = UpdatedByUser(id=row.operator_id, login=row.operator_login)
    return TariffLink(
        id=row.id,
        account_id=row.account_id,
        tariff_id=row.tariff_id,
        version=row.version,
        updated_at=row.updated_at,
        updated_by=row.updated_by,
        updated_by_user=updated_by_user,
    )


class TariffLinkStore:
    def __init__(self, session: AsyncSession, *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.session = session
        self.timeout_seconds = timeout_seconds

    async def get(self, link_id: int) -> TariffLink:
        if not fits_bigint(link_id):
            raise NotFoundException("Tariff link not found", details={"id": link_id})

        async def _load() -> TariffLink:
            row = (
                await self.session.execute(_view_query().where(AccountTariffLink.id == link_id))
            ).one_or_none()
            if row is None:
                raise NotFoundException("Tariff link not found", details={"id": link_id})
            return _to_view(row)

        return await self._run("get", _load, id=link_id)

    async def get_by_account(self, account_id: int) -> TariffLink:
        if not fits_bigint(account_id):
            raise NotFoundException(
                "Tariff link not found for account", details={"account_id": account_id}
            )

        async def _load() -> TariffLink:
            row = (
                await self.session.execute(
                    _view_query().where(AccountTariffLink.account_id == account_id)
                )
            ).one_or_none()
            if row is None:
                raise NotFoundException(
                    "Tariff link not found for account", details={"account_id": account_id}
                )
            return _to_view(row)

        return await self._run("get_by_account", _load, account_id=account_id)

    async def conditional_update(
        self,
        link_id: int,
        *,
        tariff_id: int,
        expected_version: int,
        updated_by: int | None,
    ) -> VersionStamp:
        """Set tariff_id and bump the version iff the stored version matches.

        Raises StaleDataError when the row exists with another version and
        NotFoundException when there is no row. Nothing is written in either case.

        The UPDATE runs under the store deadline; the COMMIT does not, so a
        deadline miss always means nothing was written. A failing COMMIT leaves
        the outcome unknown and is reported as a non-transient error.
        """
        if not fits_bigint(link_id):
            raise NotFoundException("Tariff link not found", details={"id": link_id})

        stmt = (
            update(AccountTariffLink)
            .where(
                AccountTariffLink.id == link_id,
                AccountTariffLink.version == expected_version,
            )
            .values(
                tariff_id=tariff_id,
                version=AccountTariffLink.version + 1,
                updated_at=_utc_now(),
                updated_by=updated_by,
            )
            .returning(
                AccountTariffLink.account_id,
                AccountTariffLink.version,
                AccountTariffLink.updated_at,
            )
            .execution_options(synchronize_session=False)
        )

        async def _apply() -> VersionStamp:
            row = (await self.session.execute(stmt)).one_or_none()
            if row is not None:
                return VersionStamp(
                    account_id=row.account_id, version=row.version, updated_at=row.updated_at
                )

            # Zero rows matched: tell "absent" apart from "stale" without writing.
            exists = (
                await self.session.execute(
                    select(AccountTariffLink.id).where(AccountTariffLink.id == link_id)
                )
            ).scalar_one_or_none()
            await self.session.rollback()
            if exists is None:
                raise NotFoundException("Tariff link not found", details={"id": link_id})
            raise StaleDataError(
                f"account_tariff_link id={link_id} is no longer at version {expected_version}"
            )

        stamp = await self._run(
            "conditional_update",
            _apply,
            id=link_id,
            expected_version=expected_version,
        )
        await self._commit(link_id, stamp)
        return stamp

    async def _commit(self, link_id: int, stamp: VersionStamp) -> None:
        try:
            await self.session.commit()
        except (SQLAlchemyError, OSError) as exc:
            await rollback_quietly(self.session, "commit")
            logger.error(
                "tariff_link_store.commit_failed id=%s version=%s error=%s",
                link_id,
                stamp.version,
                exc,
            )
            raise BillingException(
                "Tariff link update could not be confirmed",
                details={"operation": "commit", "id": link_id, "outcome": "unknown"},
            ) from exc

    async def _run(self, operation: str, fn: Callable[[], Awaitable[T]], **fields: object) -> T:
        return await run_db_call(
            self.session, operation, fn, timeout_seconds=self.timeout_seconds, **fields
        )
