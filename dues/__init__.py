"""
클럽 회비 라이프사이클 패키지

- 월회비 자동 생성 (마감일 10일 전)
- 면제/크레딧 판정
- 미납 → 연체 전환
- 납부 마감 임박 알림
"""

from .models import (
    DuesType,
    ChargeStatus,
    MembershipStatus,
    YearMonth,
    FeeConfig,
    Club,
    Membership,
    YearlyExemption,
    QuarterlyExemption,
    CustomExemption,
    ExemptionResult,
    Charge,
    ChargePeriod,
    GenerationResult,
    TransitionResult,
    ReminderResult,
    charge_key,
)
from .due_dates import should_generate, target_period, effective_due_date
from .exemptions import ExemptionResolver
from .fee_config import FeeConfigReader
from .generator import ChargeGenerator
from .transitions import StatusTransitioner
from .reminders import ReminderDispatcher
from .notifications import ExpoPushSender

__all__ = [
    # Models
    "DuesType",
    "ChargeStatus",
    "MembershipStatus",
    "YearMonth",
    "FeeConfig",
    "Club",
    "Membership",
    "YearlyExemption",
    "QuarterlyExemption",
    "CustomExemption",
    "ExemptionResult",
    "Charge",
    "ChargePeriod",
    "GenerationResult",
    "TransitionResult",
    "ReminderResult",
    "charge_key",
    # Due dates
    "should_generate",
    "target_period",
    "effective_due_date",
    # Services
    "ExemptionResolver",
    "FeeConfigReader",
    "ChargeGenerator",
    "StatusTransitioner",
    "ReminderDispatcher",
    "ExpoPushSender",
]
