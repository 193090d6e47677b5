"""
클럽 회비 라이프사이클 메인

- 일일 월회비 생성
- 연체 전환 스윕
- 납부 마감 임박 알림 스윕
- 수동 실행 (클럽/연/월 지정)
"""
import asyncio
import sys
from loguru import logger

from dues.runner import DuesRunner


# 로깅 설정
logger.remove()
logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level="INFO"
)
logger.add(
    "logs/dues_{time:YYYY-MM-DD}.log",
    rotation="1 day",
    retention="30 days",
    level="DEBUG"
)


async def main():
    """메인 함수"""
    import argparse

    parser = argparse.ArgumentParser(description="클럽 회비 라이프사이클 작업")
    parser.add_argument(
        "--mode",
        choices=["generate", "manual", "overdue", "reminders", "scheduler"],
        default="generate",
        help="실행 모드"
    )
    parser.add_argument("--club-id", default=None, help="대상 클럽 ID (수동 실행)")
    parser.add_argument("--year", type=int, default=None, help="대상 연도 (수동 생성)")
    parser.add_argument("--month", type=int, default=None, help="대상 월 (수동 생성)")

    args = parser.parse_args()

    runner = DuesRunner()

    if args.mode == "generate":
        result = await runner.generate_daily()
        print(result.model_dump_json(indent=2))

    elif args.mode == "manual":
        result = await runner.generate_manual(args.club_id, args.year, args.month)
        print(result.model_dump_json(indent=2))

    elif args.mode == "overdue":
        result = await runner.sweep_overdue(args.club_id)
        print(result.model_dump_json(indent=2))

    elif args.mode == "reminders":
        result = await runner.send_reminders(args.club_id)
        print(result.model_dump_json(indent=2))

    elif args.mode == "scheduler":
        # 스케줄러 모드
        await runner.initialize()

        scheduler = runner.build_scheduler()
        scheduler.start()

        logger.info("스케줄러 모드로 실행 중... (Ctrl+C로 종료)")

        try:
            # 무한 대기
            while True:
                await asyncio.sleep(60)
                status = scheduler.get_status()
                logger.debug(f"스케줄러 상태: {status}")
        except (KeyboardInterrupt, asyncio.CancelledError):
            scheduler.stop()
            logger.info("스케줄러 종료됨")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except Exception as e:
        logger.error(f"실행 실패: {e}")
        sys.exit(1)
