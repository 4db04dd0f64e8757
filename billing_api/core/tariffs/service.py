from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm.exc import StaleDataError

from billing_api.core.tariffs.conflicts import ConflictReporter
from billing_api.core.tariffs.store import TariffLinkStore, VersionStamp
from billing_api.db.models._types import BIGINT_MAX
from billing_api.schemas.tariff_link import TariffLink, UpdatedByUser
from billing_api.utils.exceptions import (
    BillingException,
    NotFoundException,
    ServiceUnavailableException,
    TimeoutException,
    ValidationException,
    VersionConflictException,
)
from billing_api.utils.metrics import TARIFF_UPDATE_EVENTS_TOTAL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateIntent:
    link_id: int
    requested_tariff_id: int
    expected_version: int
    acting_operator_id: Optional[int] = None
    acting_operator_login: Optional[str] = None


def _emit(result: str) -> None:
    try:
        TARIFF_UPDATE_EVENTS_TOTAL.labels(result=result).inc()
    except Exception:
        pass


def _check_positive_bigint(value: int) -> str | None:
    if value <= 0:
        return "must be a positive integer"
    if value > BIGINT_MAX:
        return f"must not exceed {BIGINT_MAX}"
    return None


def validate_intent(intent: UpdateIntent) -> None:
    errors: dict[str, str] = {}
    for field, value in (("tariff_id", intent.requested_tariff_id), ("version", intent.expected_version)):
        problem = _check_positive_bigint(value)
        if problem:
            errors[field] = problem
    if errors:
        raise ValidationException(errors)


def _committed_view(intent: UpdateIntent, stamp: VersionStamp) -> TariffLink:
    updated_by_user = None
    if intent.acting_operator_id is not None and intent.acting_operator_login:
        updated_by_user = UpdatedByUser(id=intent.acting_operator_id, login=intent.acting_operator_login)
    return TariffLink(
        id=intent.link_id,
        account_id=stamp.account_id,
        tariff_id=intent.requested_tariff_id,
        version=stamp.version,
        updated_at=stamp.updated_at,
        updated_by=intent.acting_operator_id,
        updated_by_user=updated_by_user,
    )


class TariffAssignmentService:
    def __init__(self, store: TariffLinkStore, conflicts: ConflictReporter | None = None):
        self.store = store
        self.conflicts = conflicts or ConflictReporter(store)

    async def get(self, link_id: int) -> TariffLink:
        return await self.store.get(link_id)

    async def get_by_account(self, account_id: int) -> TariffLink:
        return await self.store.get_by_account(account_id)

    async def change_tariff(self, intent: UpdateIntent) -> TariffLink:
        """Apply an UpdateIntent with a single conditional write.

        Returns the server record on success. Raises ValidationException,
        NotFoundException, VersionConflictException (with both sides of the
        conflict) or a transient storage error. Never retries.

        Transient errors are only raised before the write is committed. Once it
        is, the caller gets a 200 even if the follow-up read fails.
        """
        try:
            validate_intent(intent)
        except ValidationException as exc:
            _emit("invalid")
            logger.info("tariff.change invalid id=%s fields=%s", intent.link_id, sorted(exc.fields))
            raise

        try:
            stamp = await self.store.conditional_update(
                intent.link_id,
                tariff_id=intent.requested_tariff_id,
                expected_version=intent.expected_version,
                updated_by=intent.acting_operator_id,
            )
        except StaleDataError:
            _emit("conflict")
            logger.info(
                "tariff.change conflict id=%s expected_version=%s operator=%s",
                intent.link_id,
                intent.expected_version,
                intent.acting_operator_id,
            )
            conflict = await self.conflicts.report_conflict(
                intent.link_id,
                intent.requested_tariff_id,
                intent.expected_version,
            )
            raise VersionConflictException(conflict)
        except NotFoundException:
            _emit("not_found")
            raise
        except TimeoutException:
            _emit("timeout")
            raise
        except ServiceUnavailableException:
            _emit("unavailable")
            raise
        except BillingException:
            _emit("error")
            raise

        _emit("success")
        logger.info(
            "tariff.change success id=%s tariff_id=%s version=%s operator=%s",
            intent.link_id,
            intent.requested_tariff_id,
            stamp.version,
            intent.acting_operator_id,
        )

        try:
            return await self.store.get(intent.link_id)
        except BillingException as exc:
            logger.warning(
                "tariff.change reread_failed id=%s version=%s code=%s",
                intent.link_id,
                stamp.version,
                exc.code,
            )
            return _committed_view(intent, stamp)
