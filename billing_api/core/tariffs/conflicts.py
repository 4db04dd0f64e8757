from __future__ import annotations

import logging

from billing_api.core.tariffs.store import TariffLinkStore
from billing_api.schemas.tariff_link import (
    ConflictClientData,
    ConflictClientMeta,
    ConflictClientState,
    ConflictServerData,
    ConflictServerMeta,
    ConflictServerState,
    TariffLinkConflict,
)
from billing_api.utils.exceptions import BillingException, NotFoundException

logger = logging.getLogger(__name__)


class ConflictReporter:
    """Builds the server-vs-client view returned with a 409."""

    def __init__(self, store: TariffLinkStore):
        self.store = store

    async def report_conflict(
        self,
        link_id: int,
        client_tariff_id: int,
        client_expected_version: int,
    ) -> TariffLinkConflict:
        try:
            current = await self.store.get(link_id)
        except NotFoundException as exc:
            # A conflict means the row existed a moment ago.
            logger.error("tariff.conflict row_vanished id=%s", link_id)
            raise BillingException(
                "Tariff link disappeared while resolving an edit conflict",
                details={"id": link_id},
            ) from exc

        return TariffLinkConflict(
            server=ConflictServerState(
                data=ConflictServerData(
                    id=current.id,
                    account_id=current.account_id,
                    tariff_id=current.tariff_id,
                ),
                meta=ConflictServerMeta(
                    version=current.version,
                    updated_at=current.updated_at,
                    updated_by=current.updated_by_user,
                ),
            ),
            client=ConflictClientState(
                data=ConflictClientData(tariff_id=client_tariff_id),
                meta=ConflictClientMeta(expected_version=client_expected_version),
            ),
        )
