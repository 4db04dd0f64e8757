import pytest

from billing_api.core.tariffs.conflicts import ConflictReporter
from billing_api.core.tariffs.store import TariffLinkStore
from billing_api.utils.exceptions import BillingException, NotFoundException


@pytest.mark.asyncio
async def test_report_conflict_reflects_current_server_row(db_session, billing_data):
    alice = billing_data["operators"]["alice"]

    conflict = await ConflictReporter(TariffLinkStore(db_session)).report_conflict(8, 9, 1)

    assert conflict.server.data.model_dump() == {"id": 8, "account_id": 4, "tariff_id": 1}
    assert conflict.server.meta.version == 1
    assert conflict.server.meta.updated_by.model_dump() == {"id": alice.id, "login": "alice"}
    assert conflict.client.data.tariff_id == 9
    assert conflict.client.meta.expected_version == 1


@pytest.mark.asyncio
async def test_report_conflict_without_updater_serializes_null(db_session, billing_data):
    conflict = await ConflictReporter(TariffLinkStore(db_session)).report_conflict(7, 5, 2)

    payload = conflict.model_dump(mode="json")
    assert payload["server"]["meta"]["updated_by"] is None
    assert payload["server"]["meta"]["version"] == 3
    assert isinstance(payload["server"]["meta"]["updated_at"], str)
    assert payload["client"] == {"data": {"tariff_id": 5}, "meta": {"expected_version": 2}}


@pytest.mark.asyncio
async def test_report_conflict_for_vanished_row_is_internal_error():
    class _EmptyStore:
        async def get(self, link_id):
            raise NotFoundException(details={"id": link_id})

    with pytest.raises(BillingException) as excinfo:
        await ConflictReporter(_EmptyStore()).report_conflict(7, 5, 2)

    assert excinfo.value.status_code == 500
    assert not isinstance(excinfo.value, NotFoundException)
