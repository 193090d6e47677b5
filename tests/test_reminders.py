"""
납부 마감 임박 알림 테스트
"""
import pytest
from datetime import datetime

from dues.reminders import ReminderDispatcher


@pytest.mark.asyncio
class TestReminderDispatcher:
    """마감 1~3일 전 알림"""

    @pytest.fixture
    def reminder_db(self, db, make_charge):
        db.add_club("club-1", monthly_fee=25, due_day=25, name="Seoul Fencing")
        db.add_recipient("user-1")
        db.add_charge(make_charge("monthly", 2025, 3))
        return db

    @pytest.mark.parametrize("day,days_remaining", [(22, 3), (23, 2), (24, 1)])
    async def test_sends_within_window(self, reminder_db, push_sender, day, days_remaining):
        result = await ReminderDispatcher(reminder_db, push_sender=push_sender).run(
            datetime(2025, 3, day, 10, 0)
        )

        assert result.sent == 1
        assert push_sender.sent[0]["data"]["daysRemaining"] == days_remaining
        assert f"{days_remaining} day(s)" in push_sender.sent[0]["body"]

    @pytest.mark.parametrize("day", [21, 25, 26])
    async def test_no_send_outside_window(self, reminder_db, push_sender, day):
        """D-4, 마감 당일, 마감 이후에는 발송 안 함"""
        result = await ReminderDispatcher(reminder_db, push_sender=push_sender).run(
            datetime(2025, 3, day, 10, 0)
        )

        assert result.sent == 0
        assert push_sender.sent == []

    async def test_three_days_three_sends(self, reminder_db, push_sender):
        """중복 방지 없음: D-3, D-2, D-1 각각 발송"""
        dispatcher = ReminderDispatcher(reminder_db, push_sender=push_sender)
        for day in range(20, 27):
            await dispatcher.run(datetime(2025, 3, day, 10, 0))

        assert len(push_sender.sent) == 3
        assert reminder_db.charges_of("monthly")[0].reminder_count == 3

    async def test_same_day_rerun_sends_again(self, reminder_db, push_sender):
        dispatcher = ReminderDispatcher(reminder_db, push_sender=push_sender)
        await dispatcher.run(datetime(2025, 3, 22, 10, 0))
        await dispatcher.run(datetime(2025, 3, 22, 11, 0))

        assert len(push_sender.sent) == 2

    async def test_notification_persisted(self, reminder_db, push_sender):
        await ReminderDispatcher(reminder_db, push_sender=push_sender).run(
            datetime(2025, 3, 22, 10, 0)
        )

        record = reminder_db.notifications[0]
        assert record.recipient_id == "user-1"
        assert record.type == "DUES_REMINDER"
        assert record.status == "unread"
        assert record.period == "2025/3"
        assert record.dues_type == "monthly"
        assert record.metadata["deep_link"] == "club/club-1/my-dues"
        assert "Seoul Fencing" in record.message

    async def test_push_payload(self, reminder_db, push_sender):
        await ReminderDispatcher(reminder_db, push_sender=push_sender).run(
            datetime(2025, 3, 22, 10, 0)
        )

        sent = push_sender.sent[0]
        assert sent["token"] == "ExponentPushToken[test]"
        assert sent["title"] == "Dues Reminder"
        assert sent["data"]["type"] == "dues_reminder"
        assert sent["data"]["clubId"] == "club-1"
        assert sent["data"]["duesType"] == "monthly"
        assert sent["body"] == "[Seoul Fencing] Your 2025/3 Monthly Dues of $25 is due in 3 day(s)."

    async def test_no_token_skipped(self, db, make_charge, push_sender):
        db.add_club("club-1")
        db.add_recipient("user-1", push_token=None)
        db.add_charge(make_charge("monthly", 2025, 3))

        result = await ReminderDispatcher(db, push_sender=push_sender).run(
            datetime(2025, 3, 22, 10, 0)
        )

        assert result.no_token == 1
        assert result.sent == 0
        assert db.notifications == []

    async def test_failed_push_keeps_count(self, reminder_db, failing_push_sender):
        """발송 실패 시 reminder_count 유지, 앱 내 알림은 저장"""
        result = await ReminderDispatcher(reminder_db, push_sender=failing_push_sender).run(
            datetime(2025, 3, 22, 10, 0)
        )

        assert result.sent == 0
        assert result.failed == 1
        assert reminder_db.charges_of("monthly")[0].reminder_count == 0
        assert len(reminder_db.notifications) == 1

    async def test_localized_message(self, db, make_charge, push_sender):
        db.add_club("club-1", name="서울클럽")
        db.add_recipient("user-1", language="ko")
        db.add_charge(make_charge("monthly", 2025, 3))

        await ReminderDispatcher(db, push_sender=push_sender).run(datetime(2025, 3, 23, 10, 0))

        sent = push_sender.sent[0]
        assert sent["title"] == "회비 납부 안내"
        assert "월회비" in sent["body"]
        assert "2일" in sent["body"]

    async def test_yearly_reminder(self, db, make_charge, push_sender):
        db.add_club("club-1", due_day=25)
        db.add_recipient("user-1")
        db.add_charge(make_charge("yearly", 2025, None, amount=300))

        result = await ReminderDispatcher(db, push_sender=push_sender).run(
            datetime(2024, 12, 24, 10, 0)
        )

        assert result.sent == 1
        assert "Annual Dues" in push_sender.sent[0]["body"]

    async def test_join_and_late_fee_not_reminded(self, db, make_charge, push_sender):
        db.add_club("club-1")
        db.add_recipient("user-1")
        db.add_charge(make_charge("join", None, None, created_at=datetime(2025, 2, 20, 9, 0)))
        db.add_charge(make_charge("late_fee", None, None))

        result = await ReminderDispatcher(db, push_sender=push_sender).run(
            datetime(2025, 3, 20, 10, 0)
        )

        assert result.scanned == 0
        assert push_sender.sent == []

    async def test_overdue_charge_not_reminded(self, db, make_charge, push_sender):
        db.add_club("club-1")
        db.add_recipient("user-1")
        db.add_charge(make_charge("monthly", 2025, 3, status="overdue"))

        result = await ReminderDispatcher(db, push_sender=push_sender).run(
            datetime(2025, 3, 22, 10, 0)
        )
        assert result.sent == 0

    async def test_send_error_isolated(self, db, make_charge, push_sender):
        """한 건 발송 오류가 다른 건을 막지 않음"""
        db.add_club("club-1")
        db.add_recipient("user-1")
        db.add_recipient("user-2")
        db.add_charge(make_charge("monthly", 2025, 3, user_id="user-1"))
        db.add_charge(make_charge("monthly", 2025, 3, user_id="user-2"))

        original_send = push_sender.send

        async def flaky_send(token, title, body, data):
            if not push_sender.sent:
                push_sender.sent.append({"failed": True})
                raise ConnectionError("push 서버 오류")
            return await original_send(token, title, body, data)

        push_sender.send = flaky_send

        result = await ReminderDispatcher(db, push_sender=push_sender).run(
            datetime(2025, 3, 22, 10, 0)
        )

        assert result.errors == 1
        assert result.sent == 1
