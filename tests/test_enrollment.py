import pytest

from stardust.core.errors import EnrollmentStateError
from stardust.services import enrollment
from stardust.services.weekly import compute_and_store

from tests.conftest import ADMIN_ID, GUILD_ID


async def test_enroll_new_moderator(db):
    assert await enrollment.activate(db, GUILD_ID, "mod-1", ADMIN_ID) is True

    status = await enrollment.get_enrollment(db, GUILD_ID, "mod-1")
    assert status.active is True
    assert status.enrolled_by_id == ADMIN_ID
    assert await enrollment.active_user_ids(db, GUILD_ID) == ["mod-1"]


async def test_enroll_twice_is_rejected(db):
    await enrollment.activate(db, GUILD_ID, "mod-1", ADMIN_ID)
    with pytest.raises(EnrollmentStateError):
        await enrollment.activate(db, GUILD_ID, "mod-1", ADMIN_ID)


async def test_deactivate_without_history_deletes(db):
    await enrollment.activate(db, GUILD_ID, "mod-1", ADMIN_ID)

    assert await enrollment.deactivate(db, GUILD_ID, "mod-1", ADMIN_ID) == enrollment.DELETED
    assert await enrollment.get_enrollment(db, GUILD_ID, "mod-1") is None

    # indistinguishable from never enrolled
    assert await enrollment.activate(db, GUILD_ID, "mod-1", ADMIN_ID) is True


async def test_deactivate_with_history_keeps_row(db):
    await enrollment.activate(db, GUILD_ID, "mod-1", ADMIN_ID)
    await compute_and_store(db, GUILD_ID, "mod-1", 40, 2025, {"cases_handled": 1})

    assert await enrollment.deactivate(db, GUILD_ID, "mod-1", "admin-2") == enrollment.INACTIVE

    status = await enrollment.get_enrollment(db, GUILD_ID, "mod-1")
    assert status.active is False
    assert status.deactivated_by_id == "admin-2"
    assert status.deactivated_at is not None
    assert await enrollment.active_user_ids(db, GUILD_ID) == []


async def test_reactivation_clears_deactivation(db):
    await enrollment.activate(db, GUILD_ID, "mod-1", ADMIN_ID)
    await compute_and_store(db, GUILD_ID, "mod-1", 40, 2025, {"cases_handled": 1})
    await enrollment.deactivate(db, GUILD_ID, "mod-1", ADMIN_ID)

    assert await enrollment.activate(db, GUILD_ID, "mod-1", "admin-2") is False

    status = await enrollment.get_enrollment(db, GUILD_ID, "mod-1")
    assert status.active is True
    assert status.enrolled_by_id == "admin-2"
    assert status.deactivated_at is None
    assert status.deactivated_by_id is None


async def test_deactivate_invalid_states(db):
    with pytest.raises(EnrollmentStateError):
        await enrollment.deactivate(db, GUILD_ID, "ghost", ADMIN_ID)

    await enrollment.activate(db, GUILD_ID, "mod-1", ADMIN_ID)
    await compute_and_store(db, GUILD_ID, "mod-1", 40, 2025, {"cases_handled": 1})
    await enrollment.deactivate(db, GUILD_ID, "mod-1", ADMIN_ID)
    with pytest.raises(EnrollmentStateError):
        await enrollment.deactivate(db, GUILD_ID, "mod-1", ADMIN_ID)


async def test_batch_activation_reports_each_user(db):
    await enrollment.activate(db, GUILD_ID, "mod-1", ADMIN_ID)
    await enrollment.activate(db, GUILD_ID, "mod-2", ADMIN_ID)
    await compute_and_store(db, GUILD_ID, "mod-2", 40, 2025, {"cases_handled": 1})
    await enrollment.deactivate(db, GUILD_ID, "mod-2", ADMIN_ID)

    outcome = await enrollment.activate_batch(db, GUILD_ID, ["mod-1", "mod-2", "mod-3"], ADMIN_ID)

    assert outcome["mod-1"].startswith("skipped")
    assert outcome["mod-2"] == "reactivated"
    assert outcome["mod-3"] == "enrolled"
    assert sorted(await enrollment.active_user_ids(db, GUILD_ID)) == ["mod-1", "mod-2", "mod-3"]


async def test_enrollment_is_per_guild(db):
    await enrollment.activate(db, GUILD_ID, "mod-1", ADMIN_ID)
    await enrollment.activate(db, "other-guild", "mod-1", ADMIN_ID)

    await enrollment.deactivate(db, "other-guild", "mod-1", ADMIN_ID)

    assert await enrollment.active_user_ids(db, GUILD_ID) == ["mod-1"]
