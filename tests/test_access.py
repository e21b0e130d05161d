import pytest

from waitlist_service.core.errors import ErrorCode, WaitlistError
from waitlist_service.core.options import WaitlistOptions
from waitlist_service.services.access import Principal, authorize

ADMIN = Principal(id=1, email="admin@test.com", role="admin")
MEMBER = Principal(id=2, email="member@test.com", role="user")


@pytest.mark.asyncio
async def test_missing_principal_is_unauthorized():
    with pytest.raises(WaitlistError) as exc_info:
        await authorize(None, WaitlistOptions())
    assert exc_info.value.code == ErrorCode.UNAUTHORIZED
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_admin_role_allowed_and_others_forbidden():
    assert await authorize(ADMIN, WaitlistOptions()) is ADMIN
    with pytest.raises(WaitlistError) as exc_info:
        await authorize(MEMBER, WaitlistOptions())
    assert exc_info.value.code == ErrorCode.FORBIDDEN
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_custom_admin_role():
    options = WaitlistOptions(admin_role="moderator")
    moderator = Principal(id=3, email="mod@test.com", role="moderator")
    assert await authorize(moderator, options) is moderator
    with pytest.raises(WaitlistError):
        await authorize(ADMIN, options)


@pytest.mark.asyncio
async def test_can_manage_replaces_role_check():
    async def only_members(principal):
        return principal.email.startswith("member@")

    options = WaitlistOptions(can_manage=only_members)
    assert await authorize(MEMBER, options) is MEMBER
    with pytest.raises(WaitlistError) as exc_info:
        await authorize(ADMIN, options)
    assert exc_info.value.code == ErrorCode.FORBIDDEN


@pytest.mark.asyncio
async def test_sync_can_manage():
    options = WaitlistOptions(can_manage=lambda principal: True)
    assert await authorize(MEMBER, options) is MEMBER
