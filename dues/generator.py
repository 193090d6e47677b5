"""
월회비 자동 생성

매일 실행되어 납부 마감일 10일 전에 해당 월 월회비 레코드를 생성합니다.

로직:
1. 회비 설정이 있는 모든 클럽 조회
2. 오늘이 클럽 마감일 10일 전인 경우에만 진행
3. 클럽의 활성 회원 조회
4. 이미 레코드가 있거나 면제 기간인 회원 제외
5. 크레딧이 있으면 차감하여 월회비 레코드 생성
"""
from datetime import datetime
from typing import Callable, Optional

from loguru import logger

from .config import dues_settings
from .due_dates import local_now, should_generate, target_period
from .exemptions import ExemptionResolver
from .models import (
    Charge, ChargePeriod, Club, DuesType, GenerationResult, YearMonth, charge_key,
)


class ChargeGenerator:
    """회비 레코드 생성기"""

    def __init__(
        self,
        db,
        resolver: Optional[ExemptionResolver] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Args:
            db: DuesDB (또는 동일한 메서드를 가진 저장소)
            resolver: 면제 판정기 (기본: 같은 db 사용)
            clock: 현재 시각 함수 (테스트용)
        """
        self.db = db
        self.resolver = resolver or ExemptionResolver(db)
        self.clock = clock or local_now

    async def run_daily(self, now: Optional[datetime] = None) -> GenerationResult:
        """일일 월회비 생성 (트리거일인 클럽만)"""
        now = now or self.clock()
        today = now.date()
        result = GenerationResult()

        logger.info(f"💰 월회비 생성 체크 시작: {today.isoformat()}")

        # 클럽 조회 실패는 전체 실행 실패로 전파
        clubs = await self.db.list_clubs()

        for club in clubs:
            try:
                fee = club.fee_config
                if fee.monthly_fee <= 0:
                    continue

                if not should_generate(fee.due_day, today):
                    continue

                period = target_period(fee.due_day, today)
            except Exception as e:
                self._record_club_error(club, e, result)
                continue

            result.clubs_processed += 1
            logger.info(f"🏢 클럽 {club.id}: dueDay={fee.due_day}, {period} 월회비 생성")

            await self._generate_for_club(club, period, now, result)

        logger.info(
            f"🎉 월회비 생성 완료 - 클럽 {result.clubs_processed}개, "
            f"생성 {result.created}건, 스킵 {result.skipped}건, 오류 {result.errors}건"
        )
        return result

    async def generate_for_period(
        self,
        period: Optional[YearMonth] = None,
        club_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> GenerationResult:
        """
        수동 실행 (백필/테스트용)

        트리거일 확인 없이 지정 기간의 월회비를 생성합니다.

        Args:
            period: 대상 기간 (기본: 다음 달)
            club_id: 대상 클럽 (기본: 전체)
        """
        now = now or self.clock()
        period = period or YearMonth.of(now.date()).next()
        result = GenerationResult()

        logger.info(f"💰 [수동] {period} 월회비 생성 (club={club_id or '전체'})")

        clubs = await self.db.list_clubs(club_id)
        for club in clubs:
            try:
                if club.fee_config.monthly_fee <= 0:
                    continue
            except Exception as e:
                self._record_club_error(club, e, result)
                continue
            result.clubs_processed += 1
            await self._generate_for_club(club, period, now, result)

        logger.info(
            f"[수동] 완료 - 생성 {result.created}건, 스킵 {result.skipped}건, 오류 {result.errors}건"
        )
        return result

    def _record_club_error(self, club: Club, error: Exception, result: GenerationResult) -> None:
        """클럽 단위 오류 기록 (다른 클럽은 계속 처리)"""
        result.errors += 1
        result.error_messages.append(f"{club.id}: {error}")
        logger.error(f"❌ 클럽 {club.id} 처리 오류: {error}")

    async def _generate_for_club(
        self,
        club: Club,
        period: YearMonth,
        now: datetime,
        result: GenerationResult
    ) -> None:
        """클럽 단위 생성 (회원별 오류는 격리)"""
        try:
            members = await self.db.list_active_members(club.id)
        except Exception as e:
            self._record_club_error(club, e, result)
            return

        logger.info(f"👥 활성 회원 {len(members)}명")

        for member in members:
            try:
                created = await self._bill_member(club, member.user_id, period, now)
            except Exception as e:
                result.errors += 1
                result.error_messages.append(f"{club.id}/{member.user_id}: {e}")
                logger.error(f"❌ 회원 {member.user_id} 회비 생성 오류: {e}")
                continue

            if created:
                result.created += 1
            else:
                result.skipped += 1

    async def _bill_member(self, club: Club, user_id: str, period: YearMonth, now: datetime) -> bool:
        """회원 1명 월회비 생성 (생성 시 True, 스킵 시 False)"""
        fee = club.fee_config
        key = charge_key(club.id, user_id, DuesType.MONTHLY, period.year, period.month)

        if await self.db.find_charge(key):
            logger.debug(f"⏭️ 이미 레코드 존재: {user_id} ({period})")
            return False

        exemption = await self.resolver.resolve(club.id, user_id, period.year, period.month)
        if exemption.exempt:
            return False

        charge = Charge(
            club_id=club.id,
            user_id=user_id,
            dues_type=DuesType.MONTHLY,
            period=ChargePeriod(year=period.year, month=period.month),
            amount=fee.monthly_fee,
            currency=fee.currency,
            created_at=now,
            updated_at=now,
            idempotency_key=key,
        )

        if exemption.credit > 0:
            charge.amount = round(max(0.0, fee.monthly_fee - exemption.credit), 2)
            charge.original_amount = fee.monthly_fee
            charge.credit_applied = exemption.credit
            charge.notes = f"크레딧 ${exemption.credit} 적용 (원래 금액: ${fee.monthly_fee})"

        created = await self.db.create_charge_if_absent(charge)
        if created is None:
            logger.debug(f"⏭️ 동시 생성됨: {user_id} ({period})")
            return False

        if exemption.credit > 0:
            logger.info(f"✅ {user_id} 레코드 생성 (크레딧 ${exemption.credit} 적용)")
        else:
            logger.info(f"✅ {user_id} 레코드 생성")
        return True

    # ==================== 가입비 / 연체료 ====================

    async def create_join_charge(
        self,
        club_id: str,
        user_id: str,
        amount: float,
        currency: str = dues_settings.default_currency,
        now: Optional[datetime] = None
    ) -> Charge:
        """가입비 레코드 생성 (회원당 1건, 이미 있으면 기존 레코드 반환)"""
        now = now or self.clock()
        key = charge_key(club_id, user_id, DuesType.JOIN)

        existing = await self.db.find_charge(key)
        if existing:
            logger.warning(f"⚠️ 가입비 레코드가 이미 존재합니다: {user_id}")
            return existing

        charge = Charge(
            club_id=club_id,
            user_id=user_id,
            dues_type=DuesType.JOIN,
            amount=amount,
            currency=currency,
            created_at=now,
            updated_at=now,
            idempotency_key=key,
        )
        created = await self.db.create_charge_if_absent(charge)
        if created is None:
            return await self.db.find_charge(key)

        logger.info(f"✅ 가입비 레코드 생성: {user_id} ${amount}")
        return created

    async def add_late_fee(
        self,
        club_id: str,
        user_id: str,
        amount: float,
        related_charge_id: Optional[str] = None,
        notes: Optional[str] = None,
        currency: str = dues_settings.default_currency,
        now: Optional[datetime] = None
    ) -> Charge:
        """
        연체료 레코드 추가

        related_charge_id가 있으면 원 레코드당 1건만 생성됩니다.
        """
        now = now or self.clock()
        if related_charge_id:
            key = charge_key(club_id, user_id, DuesType.LATE_FEE) + f":{related_charge_id}"
        else:
            key = charge_key(club_id, user_id, DuesType.LATE_FEE) + f":{now.isoformat()}"

        existing = await self.db.find_charge(key)
        if existing:
            logger.warning(f"⚠️ 연체료 레코드가 이미 존재합니다: {related_charge_id}")
            return existing

        charge = Charge(
            club_id=club_id,
            user_id=user_id,
            dues_type=DuesType.LATE_FEE,
            amount=amount,
            currency=currency,
            created_at=now,
            updated_at=now,
            idempotency_key=key,
            notes=notes,
            related_charge_id=related_charge_id,
        )
        created = await self.db.create_charge_if_absent(charge)
        if created is None:
            return await self.db.find_charge(key)

        logger.info(f"✅ 연체료 레코드 생성: {user_id} ${amount}")
        return created
