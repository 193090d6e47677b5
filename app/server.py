"""
Club Dues - FastAPI 운영 서버

회비 작업 수동 실행 API + (선택) 일일 스케줄러 내장 실행
"""
from fastapi import FastAPI
from loguru import logger
from dotenv import load_dotenv

from app.dues import dues_router
from dues.config import scheduler_config

# 환경변수 로드
load_dotenv()

# FastAPI 앱
app = FastAPI(
    title="Club Dues",
    description="클럽 회비 생성 / 연체 전환 / 납부 임박 알림",
    version="1.0.0"
)

# Dues 운영 라우터 등록
app.include_router(dues_router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    """서버 시작 시 스케줄러 구동 (DUES_SCHEDULER_ENABLED=true)"""
    app.state.dues_scheduler = None

    if not scheduler_config.enabled:
        logger.info("✅ 서버 시작 완료 - 스케줄러 비활성 (수동 실행만 가능)")
        return

    from dues.runner import DuesRunner

    runner = DuesRunner()
    await runner.initialize()

    scheduler = runner.build_scheduler()
    scheduler.start()
    app.state.dues_scheduler = scheduler
    logger.info("✅ 서버 시작 완료 - 회비 스케줄러 실행 중")


@app.on_event("shutdown")
async def shutdown_event():
    """서버 종료 시 정리"""
    scheduler = getattr(app.state, "dues_scheduler", None)
    if scheduler is not None:
        scheduler.stop()
    logger.info("서버 종료됨")


@app.get("/api/health")
async def health():
    """헬스 체크"""
    scheduler = getattr(app.state, "dues_scheduler", None)
    return {
        "status": "ok",
        "scheduler": scheduler is not None,
    }
