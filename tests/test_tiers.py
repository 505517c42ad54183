"""
Tests for tier payouts, administration and the opt-in adjustment policy.
"""
import pytest

from stardust.config import settings
from stardust.core.errors import InvalidTier, PolicyDisabled
from stardust.services import enrollment
from stardust.services.tier_policy import adjust_tiers, next_tier
from stardust.services.tiers import get_current_tier, get_tier_status, list_tiers, payout_table, set_tier, tier_payout
from stardust.services.weekly import compute_and_store

from tests.conftest import ADMIN_ID, GUILD_ID


@pytest.fixture
def tier_4(monkeypatch):
    monkeypatch.setattr(settings, "TIER_4_ENABLED", True)


@pytest.fixture
def auto_adjust(monkeypatch):
    monkeypatch.setattr(settings, "TIER_AUTO_ADJUST_ENABLED", True)


class TestPayouts:
    def test_payout_table(self):
        assert payout_table() == {0: 0, 1: 600, 2: 1200, 3: 1800}

    @pytest.mark.parametrize("tier,payout", [(-2, 0), (0, 0), (2, 1200), (3, 1800), (4, 1800), (9, 1800)])
    def test_out_of_range_tiers_are_clamped(self, tier, payout):
        assert tier_payout(tier) == payout

    def test_tier_4_when_enabled(self, tier_4):
        assert tier_payout(4) == 2800
        assert tier_payout(9) == 2800


class TestSetTier:
    async def test_default_tier_is_full_payout(self, db):
        assert await get_current_tier(db, GUILD_ID, "mod-1") == 3
        assert await get_tier_status(db, GUILD_ID, "mod-1") is None

    async def test_set_and_read_back(self, db):
        status = await set_tier(db, GUILD_ID, "mod-1", 1, ADMIN_ID)

        assert status.current_tier == 1
        assert status.updated_by_id == ADMIN_ID
        assert await get_current_tier(db, GUILD_ID, "mod-1") == 1

    @pytest.mark.parametrize("tier", [-1, 4, 7])
    async def test_rejects_out_of_range(self, db, tier):
        with pytest.raises(InvalidTier):
            await set_tier(db, GUILD_ID, "mod-1", tier, ADMIN_ID)
        assert await get_tier_status(db, GUILD_ID, "mod-1") is None

    async def test_tier_4_allowed_when_enabled(self, db, tier_4):
        status = await set_tier(db, GUILD_ID, "mod-1", 4, ADMIN_ID)
        assert status.current_tier == 4

    async def test_list_orders_by_tier(self, db):
        await set_tier(db, GUILD_ID, "mod-a", 1, ADMIN_ID)
        await set_tier(db, GUILD_ID, "mod-b", 2, ADMIN_ID)
        await set_tier(db, "other-guild", "mod-c", 3, ADMIN_ID)

        assert [s.user_id for s in await list_tiers(db, GUILD_ID)] == ["mod-b", "mod-a"]


@pytest.mark.parametrize("current,active_now,active_before,expected", [
    (1, True, False, 2),
    (3, True, True, 3),
    (4, True, True, 4),
    (2, False, True, 2),
    (2, False, False, 1),
    (0, False, False, 0),
])
def test_next_tier(current, active_now, active_before, expected):
    assert next_tier(current, active_now, active_before) == expected


class TestAdjustTiers:
    async def test_disabled_by_default(self, db):
        with pytest.raises(PolicyDisabled):
            await adjust_tiers(db, GUILD_ID, 40, 2025)

    async def test_promotes_and_demotes(self, db, auto_adjust):
        for user_id in ("busy", "idle", "returning"):
            await enrollment.activate(db, GUILD_ID, user_id, ADMIN_ID)
            await set_tier(db, GUILD_ID, user_id, 2, ADMIN_ID)

        # 5 cases keep 60 points, well above the activity threshold
        await compute_and_store(db, GUILD_ID, "busy", 40, 2025, {"cases_handled": 5})
        await compute_and_store(db, GUILD_ID, "returning", 39, 2025, {"cases_handled": 5})

        changes = await adjust_tiers(db, GUILD_ID, 40, 2025)

        assert changes == {"busy": (2, 3), "idle": (2, 1)}
        assert await get_current_tier(db, GUILD_ID, "returning") == 2
        idle = await get_tier_status(db, GUILD_ID, "idle")
        assert idle.weeks_inactive == 1
        assert idle.updated_by_id == "auto-adjust"

    async def test_weekly_computation_never_adjusts(self, db, auto_adjust):
        await enrollment.activate(db, GUILD_ID, "mod-1", ADMIN_ID)
        await set_tier(db, GUILD_ID, "mod-1", 1, ADMIN_ID)

        await compute_and_store(db, GUILD_ID, "mod-1", 40, 2025, {"cases_handled": 5})

        assert await get_current_tier(db, GUILD_ID, "mod-1") == 1
