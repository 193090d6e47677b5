"""
회비 데이터 모델 정의 (Pydantic)
"""
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Any, Dict, Literal, Union

from pydantic import BaseModel, Field

from .config import dues_settings


class DuesType(str, Enum):
    """회비 유형"""
    JOIN = "join"             # 가입비
    MONTHLY = "monthly"       # 월회비
    YEARLY = "yearly"         # 연회비
    LATE_FEE = "late_fee"     # 연체료


class ChargeStatus(str, Enum):
    """납부 상태"""
    UNPAID = "unpaid"
    OVERDUE = "overdue"
    PAID = "paid"


class MembershipStatus(str, Enum):
    """회원 상태"""
    ACTIVE = "active"
    INACTIVE = "inactive"


@dataclass(frozen=True, order=True)
class YearMonth:
    """
    연/월 값 타입

    absolute = year * 12 + month 기준으로 정렬/비교되며
    면제 기간 포함 여부 판정과 마감일 계산에 공통으로 사용합니다.
    """
    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month는 1-12 범위여야 합니다: {self.month}")

    @classmethod
    def of(cls, d: date) -> "YearMonth":
        return cls(d.year, d.month)

    @classmethod
    def from_absolute(cls, absolute: int) -> "YearMonth":
        year, month = divmod(absolute - 1, 12)
        return cls(year, month + 1)

    @property
    def absolute(self) -> int:
        return self.year * 12 + self.month

    def shift(self, months: int) -> "YearMonth":
        return YearMonth.from_absolute(self.absolute + months)

    def next(self) -> "YearMonth":
        return self.shift(1)

    def within(self, start: "YearMonth", end: "YearMonth") -> bool:
        """start~end 포함 범위 안에 있는지 (end < start 이면 빈 범위)"""
        return start <= self <= end

    def __str__(self) -> str:
        return f"{self.year}/{self.month}"


# =============================================
# 클럽 / 회원
# =============================================

class FeeConfig(BaseModel):
    """클럽 회비 설정 (읽기 전용)"""
    monthly_fee: float = Field(default=0, description="월회비 금액")
    due_day: int = Field(default=dues_settings.default_due_day, description="납부 마감일 (1-31)")
    currency: str = Field(default=dues_settings.default_currency, description="통화")

    @classmethod
    def from_settings(cls, settings: Optional[Dict[str, Any]]) -> "FeeConfig":
        """clubs.settings JSON → FeeConfig (구버전 키 포함)"""
        settings = settings or {}
        monthly_fee = settings.get("membershipFee") or settings.get("monthlyFee") or 0
        due_day = settings.get("dueDate") or settings.get("dueDay") or dues_settings.default_due_day
        try:
            due_day = int(due_day)
        except (TypeError, ValueError):
            due_day = dues_settings.default_due_day
        if not 1 <= due_day <= 31:
            due_day = dues_settings.default_due_day
        try:
            monthly_fee = float(monthly_fee)
        except (TypeError, ValueError):
            monthly_fee = 0

        return cls(
            monthly_fee=monthly_fee,
            due_day=due_day,
            currency=settings.get("currency") or dues_settings.default_currency,
        )


class Club(BaseModel):
    """클럽"""
    id: str
    name: str = Field(default="Unknown Club")
    settings: Dict[str, Any] = Field(default_factory=dict)

    @property
    def fee_config(self) -> FeeConfig:
        return FeeConfig.from_settings(self.settings)


class Membership(BaseModel):
    """클럽 회원"""
    club_id: str
    user_id: str
    status: MembershipStatus = MembershipStatus.ACTIVE

    class Config:
        use_enum_values = True


# =============================================
# 면제 / 크레딧
# =============================================

class _ExemptionGrantBase(BaseModel):
    """면제 기간 공통 필드 (시작/종료 모두 포함)"""
    id: Optional[str] = None
    club_id: str
    user_id: str
    start_year: int
    start_month: int
    end_year: int
    end_month: int

    @property
    def start(self) -> YearMonth:
        return YearMonth(self.start_year, self.start_month)

    @property
    def end(self) -> YearMonth:
        return YearMonth(self.end_year, self.end_month)

    def covers(self, target: YearMonth) -> bool:
        return target.within(self.start, self.end)


class YearlyExemption(_ExemptionGrantBase):
    """연회비 납부 → 12개월 면제"""
    kind: Literal["yearly"] = "yearly"


class QuarterlyExemption(_ExemptionGrantBase):
    """분기회비 납부 → 3개월 면제"""
    kind: Literal["quarterly"] = "quarterly"


class CustomExemption(_ExemptionGrantBase):
    """커스텀 금액 납부 → N개월 면제 + 다음 달 크레딧"""
    kind: Literal["custom"] = "custom"
    remaining_credit: float = Field(default=0, description="나머지 크레딧")
    credit_apply_year: Optional[int] = None
    credit_apply_month: Optional[int] = None

    def credit_for(self, target: YearMonth) -> float:
        if self.credit_apply_year is None or self.credit_apply_month is None:
            return 0
        if (self.credit_apply_year, self.credit_apply_month) != (target.year, target.month):
            return 0
        return self.remaining_credit if self.remaining_credit > 0 else 0


ExemptionGrant = Union[YearlyExemption, QuarterlyExemption, CustomExemption]


class ExemptionResult(BaseModel):
    """면제 판정 결과"""
    exempt: bool = False
    credit: float = 0


# =============================================
# 회비 레코드
# =============================================

class ChargePeriod(BaseModel):
    """회비 기간 (월회비만 month 존재)"""
    year: int
    month: Optional[int] = None

    @property
    def year_month(self) -> Optional[YearMonth]:
        if self.month is None:
            return None
        return YearMonth(self.year, self.month)

    def display(self) -> str:
        if self.month is None:
            return str(self.year)
        return f"{self.year}/{self.month}"


def charge_key(
    club_id: str,
    user_id: str,
    dues_type: Union[DuesType, str],
    year: Optional[int] = None,
    month: Optional[int] = None
) -> str:
    """(club, user, 유형, 연, 월) 멱등성 키"""
    dues_type = DuesType(dues_type).value
    return ":".join([
        club_id,
        user_id,
        dues_type,
        str(year) if year is not None else "-",
        str(month) if month is not None else "-",
    ])


class Charge(BaseModel):
    """회비 청구 레코드 (member_dues_records)"""
    id: Optional[str] = None
    club_id: str
    user_id: str
    dues_type: DuesType
    period: Optional[ChargePeriod] = None
    amount: float
    original_amount: Optional[float] = None
    credit_applied: Optional[float] = None
    currency: str = Field(default=dues_settings.default_currency)
    status: ChargeStatus = ChargeStatus.UNPAID
    reminder_count: int = 0
    created_at: datetime
    updated_at: datetime
    idempotency_key: str = ""
    notes: Optional[str] = None
    related_charge_id: Optional[str] = None

    class Config:
        use_enum_values = True

    def model_post_init(self, __context: Any) -> None:
        if not self.idempotency_key:
            self.idempotency_key = charge_key(
                self.club_id,
                self.user_id,
                self.dues_type,
                self.period.year if self.period else None,
                self.period.month if self.period else None,
            )

    def to_record(self) -> Dict[str, Any]:
        """Supabase 저장용 dict"""
        return self.model_dump(mode="json", exclude_none=True)


# =============================================
# 알림
# =============================================

class PushRecipient(BaseModel):
    """푸시 수신자 (토큰 + 선호 언어)"""
    user_id: str
    push_token: Optional[str] = None
    language: str = "en"


class PushResult(BaseModel):
    """푸시 발송 결과"""
    success_count: int = 0
    failure_count: int = 0


class NotificationRecord(BaseModel):
    """앱 내 알림 레코드 (notifications)"""
    recipient_id: str
    type: str = "DUES_REMINDER"
    club_id: str
    message: str
    amount: float
    dues_type: DuesType
    period: str
    status: str = "unread"
    created_at: datetime
    metadata: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        use_enum_values = True


# =============================================
# 실행 결과
# =============================================

class GenerationResult(BaseModel):
    """회비 생성 결과"""
    created: int = Field(default=0)
    skipped: int = Field(default=0)
    errors: int = Field(default=0)
    clubs_processed: int = Field(default=0)
    error_messages: List[str] = Field(default_factory=list)


class TransitionResult(BaseModel):
    """연체 전환 결과"""
    scanned: int = Field(default=0)
    transitioned: int = Field(default=0)
    skipped: int = Field(default=0)
    errors: int = Field(default=0)
    error_messages: List[str] = Field(default_factory=list)


class ReminderResult(BaseModel):
    """납부 임박 알림 결과"""
    scanned: int = Field(default=0)
    sent: int = Field(default=0)
    failed: int = Field(default=0, description="푸시 티켓 실패")
    no_token: int = Field(default=0)
    errors: int = Field(default=0)
    error_messages: List[str] = Field(default_factory=list)
