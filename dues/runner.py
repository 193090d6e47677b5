"""
회비 작업 실행기

스케줄러, CLI, 운영자 API가 공통으로 사용하는 진입점
"""
from typing import Optional
from loguru import logger

from database.supabase_client import DuesDB
from scheduler.scheduler import DuesScheduler

from .generator import ChargeGenerator
from .models import GenerationResult, ReminderResult, TransitionResult, YearMonth
from .reminders import ReminderDispatcher
from .transitions import StatusTransitioner


class DuesRunner:
    """회비 작업 실행기"""

    def __init__(self, db=None, push_sender=None):
        self.db = db
        self.push_sender = push_sender
        self._initialized = db is not None

    async def initialize(self):
        """초기화"""
        try:
            self.db = DuesDB()
            self._initialized = True
            logger.info("회비 작업 실행기 초기화 완료")
        except Exception as e:
            logger.error(f"초기화 오류: {e}")
            raise

    async def _ensure_initialized(self):
        if not self._initialized:
            await self.initialize()

    async def generate_daily(self) -> GenerationResult:
        """일일 월회비 생성"""
        await self._ensure_initialized()
        return await ChargeGenerator(self.db).run_daily()

    async def generate_manual(
        self,
        club_id: Optional[str] = None,
        year: Optional[int] = None,
        month: Optional[int] = None
    ) -> GenerationResult:
        """수동 월회비 생성 (연/월 미지정 시 다음 달)"""
        await self._ensure_initialized()
        period = None
        if year is not None or month is not None:
            if year is None or month is None:
                raise ValueError("year와 month는 함께 지정해야 합니다")
            period = YearMonth(year, month)
        return await ChargeGenerator(self.db).generate_for_period(period, club_id=club_id)

    async def sweep_overdue(self, club_id: Optional[str] = None) -> TransitionResult:
        """연체 전환"""
        await self._ensure_initialized()
        return await StatusTransitioner(self.db).run(club_id=club_id)

    async def send_reminders(self, club_id: Optional[str] = None) -> ReminderResult:
        """납부 임박 알림"""
        await self._ensure_initialized()
        return await ReminderDispatcher(self.db, push_sender=self.push_sender).run(club_id=club_id)

    def build_scheduler(self) -> DuesScheduler:
        return DuesScheduler(
            generate_func=self.generate_daily,
            overdue_func=self.sweep_overdue,
            reminder_func=self.send_reminders
        )

