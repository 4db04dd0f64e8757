import pytest

from billing_api.core.auth.permissions import Feature, PermissionService


@pytest.mark.asyncio
async def test_has_permission_follows_group_rights(db_session, billing_data):
    ops = billing_data["operators"]
    perms = PermissionService(db_session)

    assert await perms.has_permission(ops["alice"].id, Feature.TARIFFS_UPDATE) is True
    assert await perms.has_permission(ops["bob"].id, Feature.TARIFFS_READ) is True
    assert await perms.has_permission(ops["bob"].id, Feature.TARIFFS_UPDATE) is False
    assert await perms.has_permission(ops["mallory"].id, Feature.ACCOUNTS_READ) is False


@pytest.mark.asyncio
async def test_get_permissions_is_distinct_and_sorted(db_session, billing_data):
    from billing_api.db.models import GroupMember, GroupRight

    alice = billing_data["operators"]["alice"]
    # A second group granting an overlapping right must not duplicate fids.
    db_session.add_all([GroupRight(group_id=5, fid=2), GroupMember(group_id=5, user_id=alice.id)])
    await db_session.commit()

    perms = PermissionService(db_session)
    assert await perms.get_permissions(alice.id) == [1, 2, 3]
    assert await perms.get_permissions(billing_data["operators"]["mallory"].id) == []
