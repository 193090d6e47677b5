"""
회비 면제 / 크레딧 판정

우선순위 (먼저 걸리는 것에서 종료):
1. 연회비 면제 기간
2. 분기회비 면제 기간
3. 커스텀 금액 면제 기간
4. 커스텀 크레딧 (면제 아님, 금액 차감만)

같은 유형의 면제 기간이 겹치면 조회 순서상 첫 번째가 적용됩니다.
"""
from typing import Tuple

from loguru import logger

from .models import (
    YearMonth, ExemptionResult,
    YearlyExemption, QuarterlyExemption, CustomExemption,
)

WAIVER_ORDER = ("yearly", "quarterly", "custom")


class ExemptionResolver:
    """회원별 면제/크레딧 판정"""

    def __init__(self, db):
        self.db = db

    async def resolve(self, club_id: str, user_id: str, year: int, month: int) -> ExemptionResult:
        """
        대상 월의 면제 여부와 크레딧 조회

        Args:
            club_id: 클럽 ID
            user_id: 회원 ID
            year, month: 대상 기간

        Returns:
            ExemptionResult(exempt, credit)
        """
        target = YearMonth(year, month)
        custom_grants = []

        for kind in WAIVER_ORDER:
            grants = await self.db.list_exemptions(kind, club_id, user_id)
            if kind == "custom":
                custom_grants = grants

            for grant in grants:
                if grant.covers(target):
                    logger.debug(
                        f"면제 대상: {user_id} ({kind}: {grant.start} - {grant.end}), 대상 {target}"
                    )
                    return ExemptionResult(exempt=True, credit=0)

        for grant in custom_grants:
            credit = grant.credit_for(target)
            if credit > 0:
                logger.debug(f"크레딧 적용 대상: {user_id} ${credit} ({target})")
                return ExemptionResult(exempt=False, credit=credit)

        return ExemptionResult(exempt=False, credit=0)


# =============================================
# 면제 기간 계산 헬퍼
# =============================================

def yearly_grant_range(start: YearMonth) -> Tuple[YearMonth, YearMonth]:
    """연회비: 시작월 포함 12개월"""
    return start, start.shift(11)


def quarterly_grant_range(start: YearMonth) -> Tuple[YearMonth, YearMonth]:
    """분기회비: 시작월 포함 3개월"""
    return start, start.shift(2)


def split_custom_payment(paid_amount: float, monthly_fee: float) -> Tuple[int, float]:
    """
    커스텀 금액 → (완전히 커버되는 개월 수, 나머지 크레딧)

    예: $70 / 월 $25 → (2, 20.0)
    """
    if monthly_fee <= 0:
        return 0, 0
    full_months = int(paid_amount // monthly_fee)
    remaining = round(paid_amount - full_months * monthly_fee, 2)
    return full_months, remaining


def custom_grant_range(start: YearMonth, full_months: int) -> Tuple[YearMonth, YearMonth, YearMonth]:
    """
    커스텀 면제 기간 → (시작, 종료, 크레딧 적용월)

    full_months가 0 이하이면 면제 없이(빈 범위) 시작월에 크레딧만 적용됩니다.
    """
    if full_months <= 0:
        # 시작월 면제 없음: 한 달 미만 납부는 크레딧으로만 반영
        return start, start.shift(-1), start
    end = start.shift(full_months - 1)
    return start, end, end.next()


def build_yearly_exemption(club_id: str, user_id: str, start: YearMonth) -> YearlyExemption:
    """연회비 납부 면제 기간 생성"""
    start, end = yearly_grant_range(start)
    return YearlyExemption(
        club_id=club_id, user_id=user_id,
        start_year=start.year, start_month=start.month,
        end_year=end.year, end_month=end.month,
    )


def build_quarterly_exemption(club_id: str, user_id: str, start: YearMonth) -> QuarterlyExemption:
    """분기회비 납부 면제 기간 생성"""
    start, end = quarterly_grant_range(start)
    return QuarterlyExemption(
        club_id=club_id, user_id=user_id,
        start_year=start.year, start_month=start.month,
        end_year=end.year, end_month=end.month,
    )


def build_custom_exemption(
    club_id: str,
    user_id: str,
    start: YearMonth,
    paid_amount: float,
    monthly_fee: float
) -> CustomExemption:
    """커스텀 금액 납부 면제 기간 + 크레딧 생성"""
    full_months, remaining = split_custom_payment(paid_amount, monthly_fee)
    start, end, credit_month = custom_grant_range(start, full_months)
    return CustomExemption(
        club_id=club_id, user_id=user_id,
        start_year=start.year, start_month=start.month,
        end_year=end.year, end_month=end.month,
        remaining_credit=remaining,
        credit_apply_year=credit_month.year if remaining > 0 else None,
        credit_apply_month=credit_month.month if remaining > 0 else None,
    )
