"""
미납 → 연체 상태 전환

매일 미납 레코드를 스캔하여 마감일이 지난 레코드를 overdue로 전환합니다.
마감일은 생성 시점이 아닌 현재 클럽 설정으로 다시 계산합니다.
상태 전환 시 알림은 보내지 않습니다 (알림은 reminders 모듈 담당).
"""
from datetime import datetime
from typing import Callable, Optional

from loguru import logger

from .due_dates import effective_due_date, local_now
from .fee_config import ClubMap, FeeConfigReader
from .models import TransitionResult


class StatusTransitioner:
    """연체 전환 스윕"""

    def __init__(self, db, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.fee_configs = FeeConfigReader(db)
        self.clock = clock or local_now

    async def run(self, now: Optional[datetime] = None, club_id: Optional[str] = None) -> TransitionResult:
        """
        연체 전환 실행

        Args:
            now: 기준 시각 (기본: 현재)
            club_id: 특정 클럽만 처리 (수동 실행용)
        """
        now = now or self.clock()
        today = now.date()
        result = TransitionResult()
        clubs: ClubMap = {}

        logger.info(f"⏰ 연체 전환 스윕 시작: {today.isoformat()}")

        charges = await self.db.list_unpaid_charges(club_id=club_id)

        for charge in charges:
            result.scanned += 1
            try:
                fee = await self.fee_configs.get(charge.club_id, clubs)
                due_date = effective_due_date(charge, fee.due_day)

                if due_date is None or today <= due_date:
                    result.skipped += 1
                    continue

                if await self.db.mark_overdue(charge.id, now):
                    result.transitioned += 1
                    logger.info(
                        f"🔴 연체 전환: {charge.id} ({charge.user_id}, {charge.dues_type}, 마감 {due_date})"
                    )
                else:
                    result.skipped += 1
            except Exception as e:
                result.errors += 1
                result.error_messages.append(f"{charge.id}: {e}")
                logger.error(f"❌ 레코드 {charge.id} 연체 전환 오류: {e}")

        logger.info(
            f"연체 전환 완료 - 스캔 {result.scanned}건, 전환 {result.transitioned}건, "
            f"오류 {result.errors}건"
        )
        return result
