"""
Supabase 마이그레이션 실행 스크립트 (회비 스키마)

실행: python -m database.run_migration
"""
import sys
from pathlib import Path
from loguru import logger

from database.supabase_client import get_supabase_client

logger.remove()
logger.add(sys.stdout, format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}")

MIGRATIONS_DIR = Path(__file__).parent / "migrations"
MIGRATION_FILE = MIGRATIONS_DIR / "001_dues_schema.sql"

# 스키마 적용 여부 확인용 테이블
REQUIRED_TABLES = [
    "clubs",
    "club_members",
    "member_dues_records",
    "member_yearly_exemptions",
    "member_quarterly_exemptions",
    "member_custom_exemptions",
    "users",
    "notifications",
]


def find_missing_tables(client) -> list:
    """존재하지 않는 테이블 목록"""
    missing = []
    for table in REQUIRED_TABLES:
        try:
            client.table(table).select("*").limit(1).execute()
        except Exception as e:
            if "does not exist" in str(e) or "relation" in str(e).lower():
                missing.append(table)
            else:
                logger.warning(f"{table} 확인 중 오류: {e}")
    return missing


def run_migration() -> bool:
    """마이그레이션 SQL 안내"""
    try:
        client = get_supabase_client()
    except ValueError as e:
        logger.error(str(e))
        return False

    if not MIGRATION_FILE.exists():
        logger.error(f"마이그레이션 파일을 찾을 수 없습니다: {MIGRATION_FILE}")
        return False

    sql_content = MIGRATION_FILE.read_text(encoding="utf-8")

    logger.info("회비 스키마 확인 중...")
    missing = find_missing_tables(client)
    if not missing:
        logger.info("✅ 회비 테이블이 모두 존재합니다")
        return True

    logger.info(f"누락된 테이블: {', '.join(missing)}")

    # Supabase Python 클라이언트는 직접 SQL 실행을 지원하지 않으므로
    # Dashboard SQL Editor에서 실행
    logger.info("=" * 60)
    logger.info("Supabase Dashboard에서 아래 SQL을 실행해주세요:")
    logger.info("=" * 60)
    logger.info("1. https://supabase.com/dashboard 접속")
    logger.info("2. 프로젝트 선택 → SQL Editor")
    logger.info("3. 아래 SQL 복사하여 실행")
    logger.info("=" * 60)
    print("\n" + sql_content + "\n")

    return True


if __name__ == "__main__":
    sys.exit(0 if run_migration() else 1)
