"""
납부 마감 임박 알림

매일 미납 월회비/연회비 레코드를 스캔하여 마감 1~3일 전이면 푸시 알림을 보냅니다.

주의: 이 알림은 발송 이력(중복 방지)을 확인하지 않습니다.
마감 3일 전, 2일 전, 1일 전 각각 발송을 시도합니다.
"""
from datetime import datetime
from typing import Callable, Optional

from loguru import logger

from .config import dues_settings
from .due_dates import effective_due_date, local_now
from .fee_config import ClubMap, FeeConfigReader
from .messages import build_reminder_message
from .models import Charge, DuesType, NotificationRecord, PushResult, ReminderResult
from .notifications import ExpoPushSender

REMINDER_DUES_TYPES = (DuesType.MONTHLY, DuesType.YEARLY)


class ReminderDispatcher:
    """납부 임박 알림 스윕"""

    def __init__(
        self,
        db,
        push_sender=None,
        clock: Optional[Callable[[], datetime]] = None,
        window_days: int = dues_settings.reminder_window_days
    ):
        """
        Args:
            db: DuesDB
            push_sender: send(token, title, body, data) 구현체 (기본: Expo)
            window_days: 마감 며칠 전부터 알림
        """
        self.db = db
        self.push_sender = push_sender or ExpoPushSender()
        self.fee_configs = FeeConfigReader(db)
        self.clock = clock or local_now
        self.window_days = window_days

    async def run(self, now: Optional[datetime] = None, club_id: Optional[str] = None) -> ReminderResult:
        """알림 스윕 실행"""
        now = now or self.clock()
        today = now.date()
        result = ReminderResult()
        clubs: ClubMap = {}

        logger.info(f"🔔 납부 임박 알림 스윕 시작: {today.isoformat()}")

        charges = await self.db.list_unpaid_charges(REMINDER_DUES_TYPES, club_id=club_id)

        for charge in charges:
            result.scanned += 1
            try:
                fee = await self.fee_configs.get(charge.club_id, clubs)
                due_date = effective_due_date(charge, fee.due_day)
                if due_date is None:
                    continue

                days_remaining = (due_date - today).days
                if not 0 < days_remaining <= self.window_days:
                    continue

                push = await self._remind(charge, days_remaining, now, clubs)
                if push is None:
                    result.no_token += 1
                elif push.success_count > 0:
                    result.sent += 1
                else:
                    result.failed += 1
            except Exception as e:
                result.errors += 1
                result.error_messages.append(f"{charge.id}: {e}")
                logger.error(f"❌ 레코드 {charge.id} 알림 오류: {e}")

        logger.info(
            f"납부 임박 알림 완료 - 스캔 {result.scanned}건, 발송 {result.sent}건, "
            f"발송 실패 {result.failed}건, 토큰 없음 {result.no_token}건, 오류 {result.errors}건"
        )
        return result

    async def _remind(
        self, charge: Charge, days_remaining: int, now: datetime, clubs: ClubMap
    ) -> Optional[PushResult]:
        """회원 1명 알림 발송 (토큰 없으면 None)"""
        recipient = await self.db.get_push_recipient(charge.user_id)
        if not recipient or not recipient.push_token:
            logger.debug(f"푸시 토큰 없음: {charge.user_id}")
            return None

        club = await self.fee_configs.get_club(charge.club_id, clubs)
        club_name = club.name if club else "Unknown Club"
        period = charge.period.display() if charge.period else ""

        title, body = build_reminder_message(
            lang=recipient.language,
            club_name=club_name,
            dues_type=charge.dues_type,
            period=period,
            amount=charge.amount,
            currency=charge.currency,
            days_remaining=days_remaining,
        )

        push = await self.push_sender.send(
            recipient.push_token,
            title,
            body,
            {
                "type": "dues_reminder",
                "notificationType": "dues_reminder",
                "clubId": charge.club_id,
                "recordId": charge.id or "",
                "duesType": charge.dues_type,
                "daysRemaining": days_remaining,
            },
        )
        logger.info(
            f"📤 알림 발송: {charge.user_id} ({period} {charge.dues_type}, D-{days_remaining}) "
            f"성공 {push.success_count} / 실패 {push.failure_count}"
        )

        await self.db.create_notification(NotificationRecord(
            recipient_id=charge.user_id,
            club_id=charge.club_id,
            message=body,
            amount=charge.amount,
            dues_type=charge.dues_type,
            period=period,
            created_at=now,
            metadata={
                "notification_type": "dues_reminder",
                "record_id": charge.id,
                "deep_link": f"club/{charge.club_id}/my-dues",
            },
        ))

        if charge.id and push.success_count > 0:
            await self.db.record_reminder(charge.id, charge.reminder_count + 1, now)

        return push
