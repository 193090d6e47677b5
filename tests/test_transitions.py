"""
미납 → 연체 전환 테스트
"""
import pytest
from datetime import datetime

from dues.transitions import StatusTransitioner


@pytest.mark.asyncio
class TestStatusTransitioner:
    """연체 전환 스윕"""

    @pytest.fixture
    def monthly_db(self, db, make_charge):
        db.add_club("club-1", monthly_fee=25, due_day=25)
        db.add_charge(make_charge("monthly", 2025, 3))
        return db

    @pytest.mark.parametrize("day", [24, 25])
    async def test_not_overdue_until_day_after_due(self, monthly_db, day):
        """마감일 당일까지는 미납 유지"""
        result = await StatusTransitioner(monthly_db).run(datetime(2025, 3, day, 4, 0))

        assert result.transitioned == 0
        assert result.skipped == 1
        assert monthly_db.charges_of("monthly")[0].status == "unpaid"

    async def test_overdue_day_after_due(self, monthly_db):
        result = await StatusTransitioner(monthly_db).run(datetime(2025, 3, 26, 0, 5))

        assert result.transitioned == 1
        assert monthly_db.charges_of("monthly")[0].status == "overdue"

    async def test_second_sweep_is_noop(self, monthly_db):
        transitioner = StatusTransitioner(monthly_db)
        await transitioner.run(datetime(2025, 3, 26, 4, 0))
        result = await transitioner.run(datetime(2025, 3, 27, 4, 0))

        assert result.scanned == 0
        assert result.transitioned == 0

    async def test_paid_charge_untouched(self, db, make_charge):
        db.add_club("club-1", monthly_fee=25, due_day=25)
        db.add_charge(make_charge("monthly", 2025, 3, status="paid"))

        result = await StatusTransitioner(db).run(datetime(2025, 4, 1, 4, 0))

        assert result.transitioned == 0
        assert db.charges_of("monthly")[0].status == "paid"

    async def test_uses_current_club_due_day(self, db, make_charge):
        """마감일 변경 시 현재 설정 기준으로 판정"""
        db.add_club("club-1", monthly_fee=25, due_day=20)
        db.add_charge(make_charge("monthly", 2025, 3))

        result = await StatusTransitioner(db).run(datetime(2025, 3, 21, 4, 0))
        assert result.transitioned == 1

    async def test_missing_club_uses_default_due_day(self, db, make_charge):
        db.add_charge(make_charge("monthly", 2025, 3, club_id="club-gone"))

        before = await StatusTransitioner(db).run(datetime(2025, 3, 25, 4, 0))
        after = await StatusTransitioner(db).run(datetime(2025, 3, 26, 4, 0))

        assert before.transitioned == 0
        assert after.transitioned == 1

    async def test_join_fee_overdue_after_30_days(self, db, make_charge):
        db.add_club("club-1")
        db.add_charge(make_charge("join", None, None, created_at=datetime(2025, 3, 1, 9, 0)))
        transitioner = StatusTransitioner(db)

        assert (await transitioner.run(datetime(2025, 3, 31, 4, 0))).transitioned == 0
        assert (await transitioner.run(datetime(2025, 4, 1, 4, 0))).transitioned == 1

    async def test_yearly_due_previous_december(self, db, make_charge):
        db.add_club("club-1", due_day=25)
        db.add_charge(make_charge("yearly", 2025, None))
        transitioner = StatusTransitioner(db)

        assert (await transitioner.run(datetime(2024, 12, 25, 4, 0))).transitioned == 0
        assert (await transitioner.run(datetime(2024, 12, 26, 4, 0))).transitioned == 1

    async def test_late_fee_never_transitions(self, db, make_charge):
        db.add_club("club-1")
        db.add_charge(make_charge("late_fee", None, None))

        result = await StatusTransitioner(db).run(datetime(2026, 1, 1, 4, 0))

        assert result.transitioned == 0
        assert db.charges_of("late_fee")[0].status == "unpaid"

    async def test_club_lookup_cached_per_sweep(self, db, make_charge):
        """같은 클럽 설정은 스윕당 1회 조회"""
        db.add_club("club-1")
        for user_id in ("user-1", "user-2", "user-3"):
            db.add_charge(make_charge("monthly", 2025, 3, user_id=user_id))

        await StatusTransitioner(db).run(datetime(2025, 3, 26, 4, 0))

        assert db.get_club_calls == 1

    async def test_club_filter(self, db, make_charge):
        db.add_club("club-1")
        db.add_club("club-2")
        db.add_charge(make_charge("monthly", 2025, 3, club_id="club-1"))
        db.add_charge(make_charge("monthly", 2025, 3, club_id="club-2"))

        result = await StatusTransitioner(db).run(datetime(2025, 3, 26, 4, 0), club_id="club-2")

        assert result.scanned == 1
        assert result.transitioned == 1

    async def test_listing_failure_propagates(self, db):
        db.fail_unpaid_listing = True
        with pytest.raises(ConnectionError):
            await StatusTransitioner(db).run(datetime(2025, 3, 26, 4, 0))
