"""
회비 스케줄러
"""
from typing import Optional, Callable, Awaitable, Any, Dict
from datetime import datetime
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from dues.config import scheduler_config

JOB_GENERATE = "generate"
JOB_OVERDUE = "overdue"
JOB_REMINDERS = "reminders"


class DuesScheduler:
    """회비 일일 작업 스케줄러"""

    def __init__(
        self,
        generate_func: Callable[[], Awaitable[Any]],
        overdue_func: Callable[[], Awaitable[Any]],
        reminder_func: Callable[[], Awaitable[Any]],
        retry_count: Optional[int] = None
    ):
        """
        Args:
            generate_func: 월회비 생성 함수 (async)
            overdue_func: 연체 전환 함수 (async)
            reminder_func: 납부 임박 알림 함수 (async)
            retry_count: 전체 실행 실패 시 재시도 횟수
        """
        self.scheduler = AsyncIOScheduler(timezone=scheduler_config.timezone)
        self.jobs: Dict[str, Callable[[], Awaitable[Any]]] = {
            JOB_GENERATE: generate_func,
            JOB_OVERDUE: overdue_func,
            JOB_REMINDERS: reminder_func,
        }
        self.retry_count = scheduler_config.retry_count if retry_count is None else retry_count
        self._running: Dict[str, bool] = {name: False for name in self.jobs}
        self._last_run: Dict[str, Optional[datetime]] = {name: None for name in self.jobs}
        self._last_result: Dict[str, Any] = {name: None for name in self.jobs}

    def setup(self):
        """스케줄러 설정"""
        # 매일 새벽 월회비 생성
        self.scheduler.add_job(
            self._run_job,
            CronTrigger(hour=scheduler_config.generation_hour, minute=0),
            args=[JOB_GENERATE],
            id="daily_dues_generation",
            name="Daily Dues Generation",
            replace_existing=True
        )
        logger.info(f"매일 {scheduler_config.generation_hour}시 월회비 생성 스케줄 등록")

        # 매일 연체 전환
        self.scheduler.add_job(
            self._run_job,
            CronTrigger(hour=scheduler_config.overdue_hour, minute=0),
            args=[JOB_OVERDUE],
            id="daily_overdue_sweep",
            name="Daily Overdue Sweep",
            replace_existing=True
        )
        logger.info(f"매일 {scheduler_config.overdue_hour}시 연체 전환 스케줄 등록")

        # 매일 납부 임박 알림
        self.scheduler.add_job(
            self._run_job,
            CronTrigger(hour=scheduler_config.reminder_hour, minute=0),
            args=[JOB_REMINDERS],
            id="daily_due_soon_reminders",
            name="Daily Due-Soon Reminders",
            replace_existing=True
        )
        logger.info(f"매일 {scheduler_config.reminder_hour}시 납부 임박 알림 스케줄 등록")

    async def _run_job(self, job_name: str) -> Any:
        """
        작업 실행

        같은 작업이 실행 중이면 스킵합니다.
        실행 전체가 실패하면 retry_count 만큼 처음부터 다시 실행합니다.
        (모든 쓰기는 멱등이므로 재실행해도 중복 생성되지 않음)
        """
        if self._running[job_name]:
            logger.warning(f"이미 {job_name} 작업이 진행 중입니다")
            return None

        self._running[job_name] = True
        logger.info(f"=== {job_name} 작업 시작 ===")

        try:
            for attempt in range(self.retry_count + 1):
                try:
                    result = await self.jobs[job_name]()
                except Exception as e:
                    if attempt < self.retry_count:
                        logger.warning(f"{job_name} 작업 실패, 재시도 {attempt + 1}/{self.retry_count}: {e}")
                        continue
                    logger.error(f"❌ {job_name} 작업 오류 (재시도 소진): {e}")
                    return None

                self._last_run[job_name] = datetime.now()
                self._last_result[job_name] = result
                logger.info(f"✅ {job_name} 작업 완료: {self._last_run[job_name]}")
                return result
        finally:
            self._running[job_name] = False

    def start(self):
        """스케줄러 시작"""
        self.setup()
        self.scheduler.start()
        logger.info("스케줄러 시작됨")

    def stop(self):
        """스케줄러 중지"""
        self.scheduler.shutdown()
        logger.info("스케줄러 중지됨")

    def get_status(self) -> dict:
        """스케줄러 상태 조회"""
        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": job.next_run_time.isoformat() if getattr(job, "next_run_time", None) else None
            })

        last_results = {}
        for name, result in self._last_result.items():
            last_results[name] = result.model_dump() if hasattr(result, "model_dump") else result

        return {
            "running": dict(self._running),
            "last_run": {
                name: ts.isoformat() if ts else None
                for name, ts in self._last_run.items()
            },
            "last_result": last_results,
            "jobs": jobs
        }

    async def run_now(self, job_name: str = JOB_GENERATE) -> Any:
        """즉시 실행"""
        if job_name not in self.jobs:
            logger.warning(f"알 수 없는 작업 타입: {job_name}")
            return None
        return await self._run_job(job_name)
