"""
회비 마감일 계산

- 생성 트리거일 판정 (마감일 N일 전)
- 생성 대상 기간 선택
- 회비 레코드의 실제 마감일 계산 (현재 클럽 설정 기준)
"""
import calendar
from zoneinfo import ZoneInfo
from datetime import date, datetime, timedelta
from typing import Optional

from .config import dues_settings, scheduler_config
from .models import Charge, DuesType, YearMonth


def local_now() -> datetime:
    """스케줄 기준 시간대의 현재 시각"""
    return datetime.now(ZoneInfo(scheduler_config.timezone))


def due_date_in_month(year: int, month: int, due_day: int) -> date:
    """해당 월의 마감일 (월말보다 큰 마감일은 월말로 맞춤)"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(due_day, last_day))


def next_due_date(due_day: int, today: date) -> date:
    """오늘 이후(오늘 포함) 가장 가까운 마감일"""
    due = due_date_in_month(today.year, today.month, due_day)
    if due < today:
        nxt = YearMonth.of(today).next()
        due = due_date_in_month(nxt.year, nxt.month, due_day)
    return due


def should_generate(
    due_day: int,
    today: date,
    lead_days: int = dues_settings.generation_lead_days
) -> bool:
    """
    오늘이 회비 생성일(마감일 lead_days일 전)인지 확인

    Args:
        due_day: 클럽의 납부 마감일 (1-31)
        today: 기준 날짜

    Returns:
        생성일이면 True
    """
    if isinstance(today, datetime):
        today = today.date()
    trigger = next_due_date(due_day, today) - timedelta(days=lead_days)
    return today == trigger


def target_period(
    due_day: int,
    today: date,
    lead_days: int = dues_settings.generation_lead_days
) -> YearMonth:
    """생성 대상 기간 (마감일이 lead_days 안쪽이면 다음 달)"""
    if isinstance(today, datetime):
        today = today.date()
    current = YearMonth.of(today)
    if due_day < today.day + lead_days:
        return current.next()
    return current


def effective_due_date(
    charge: Charge,
    due_day: int,
    join_grace_days: int = dues_settings.join_grace_days
) -> Optional[date]:
    """
    회비 레코드의 마감일

    - monthly: 해당 연/월의 마감일
    - yearly: 전년도 12월 마감일
    - join: 생성일 + join_grace_days
    - late_fee: 계산 불가 (None)
    """
    if charge.dues_type == DuesType.MONTHLY:
        if not charge.period or charge.period.month is None:
            return None
        return due_date_in_month(charge.period.year, charge.period.month, due_day)

    if charge.dues_type == DuesType.YEARLY:
        if not charge.period:
            return None
        return due_date_in_month(charge.period.year - 1, 12, due_day)

    if charge.dues_type == DuesType.JOIN:
        created_at = charge.created_at
        if created_at.tzinfo is not None:
            created_at = created_at.astimezone(ZoneInfo(scheduler_config.timezone))
        return (created_at + timedelta(days=join_grace_days)).date()

    return None
