"""
Dues Operator Router

회비 작업 수동 실행 (백필/테스트/관리용)
- 월회비 생성 (클럽/연/월 지정)
- 연체 전환 스윕
- 납부 임박 알림 스윕
- 가입비 / 연체료 / 면제 기간 등록
- 스케줄러 상태
"""

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from dues.config import dues_settings
from dues.exemptions import (
    build_yearly_exemption,
    build_quarterly_exemption,
    build_custom_exemption,
)
from dues.generator import ChargeGenerator
from dues.models import (
    Charge,
    GenerationResult,
    TransitionResult,
    ReminderResult,
    YearMonth,
)
from dues.reminders import ReminderDispatcher
from dues.transitions import StatusTransitioner

from .dependencies import require_operator, get_dues_db, get_push_sender, get_scheduler
from .models import (
    ManualGenerateRequest,
    ManualSweepRequest,
    JoinFeeCreate,
    LateFeeCreate,
    ExemptionCreate,
)

router = APIRouter(
    prefix="/dues",
    tags=["Dues Operations"],
    dependencies=[Depends(require_operator)]
)


# =============================================
# 일일 작업 수동 실행
# =============================================

@router.post("/generate", response_model=GenerationResult)
async def generate_dues(
    request: ManualGenerateRequest,
    db=Depends(get_dues_db)
):
    """
    월회비 수동 생성

    트리거일 확인 없이 지정 기간(기본: 다음 달)의 월회비를 생성합니다.
    이미 생성된 레코드는 스킵되므로 반복 실행해도 안전합니다.
    """
    if (request.year is None) != (request.month is None):
        raise HTTPException(status_code=400, detail="year와 month는 함께 지정해야 합니다")

    period = YearMonth(request.year, request.month) if request.year is not None else None

    try:
        return await ChargeGenerator(db).generate_for_period(period, club_id=request.club_id)
    except Exception as e:
        logger.error(f"❌ 수동 월회비 생성 실패: {e}")
        raise HTTPException(status_code=500, detail=f"월회비 생성 실패: {str(e)}")


@router.post("/overdue-sweep", response_model=TransitionResult)
async def sweep_overdue(
    request: ManualSweepRequest,
    db=Depends(get_dues_db)
):
    """연체 전환 수동 실행"""
    try:
        return await StatusTransitioner(db).run(club_id=request.club_id)
    except Exception as e:
        logger.error(f"❌ 수동 연체 전환 실패: {e}")
        raise HTTPException(status_code=500, detail=f"연체 전환 실패: {str(e)}")


@router.post("/reminders", response_model=ReminderResult)
async def send_reminders(
    request: ManualSweepRequest,
    db=Depends(get_dues_db),
    push_sender=Depends(get_push_sender)
):
    """납부 임박 알림 수동 실행 (중복 발송 방지 없음)"""
    try:
        return await ReminderDispatcher(db, push_sender=push_sender).run(club_id=request.club_id)
    except Exception as e:
        logger.error(f"❌ 수동 알림 발송 실패: {e}")
        raise HTTPException(status_code=500, detail=f"알림 발송 실패: {str(e)}")


# =============================================
# 레코드 / 면제 등록
# =============================================

@router.post("/join-fee", response_model=Charge)
async def create_join_fee(
    request: JoinFeeCreate,
    db=Depends(get_dues_db)
):
    """가입비 레코드 생성 (회원당 1건)"""
    try:
        return await ChargeGenerator(db).create_join_charge(
            request.club_id,
            request.user_id,
            request.amount,
            currency=request.currency or dues_settings.default_currency
        )
    except Exception as e:
        logger.error(f"❌ 가입비 생성 실패: {e}")
        raise HTTPException(status_code=500, detail=f"가입비 생성 실패: {str(e)}")


@router.post("/late-fee", response_model=Charge)
async def create_late_fee(
    request: LateFeeCreate,
    db=Depends(get_dues_db)
):
    """연체료 레코드 추가"""
    try:
        return await ChargeGenerator(db).add_late_fee(
            request.club_id,
            request.user_id,
            request.amount,
            related_charge_id=request.related_charge_id,
            notes=request.notes,
            currency=request.currency or dues_settings.default_currency
        )
    except Exception as e:
        logger.error(f"❌ 연체료 생성 실패: {e}")
        raise HTTPException(status_code=500, detail=f"연체료 생성 실패: {str(e)}")


@router.post("/exemptions")
async def create_exemption(
    request: ExemptionCreate,
    db=Depends(get_dues_db)
):
    """
    면제 기간 등록

    - yearly: 시작월 포함 12개월
    - quarterly: 시작월 포함 3개월
    - custom: 납부 금액 / 월회비 → N개월 면제 + 나머지 크레딧
    """
    start = YearMonth(request.start_year, request.start_month)

    if request.kind == "yearly":
        grant = build_yearly_exemption(request.club_id, request.user_id, start)
    elif request.kind == "quarterly":
        grant = build_quarterly_exemption(request.club_id, request.user_id, start)
    else:
        if request.paid_amount is None or request.monthly_fee is None:
            raise HTTPException(
                status_code=400,
                detail="custom 면제는 paid_amount와 monthly_fee가 필요합니다"
            )
        grant = build_custom_exemption(
            request.club_id, request.user_id, start,
            request.paid_amount, request.monthly_fee
        )

    try:
        grant_id = await db.create_exemption(grant)
    except Exception as e:
        logger.error(f"❌ 면제 기간 저장 실패: {e}")
        raise HTTPException(status_code=500, detail=f"면제 기간 저장 실패: {str(e)}")

    return {"id": grant_id, "exemption": grant.model_dump()}


# =============================================
# 스케줄러
# =============================================

@router.get("/scheduler/status")
async def get_scheduler_status(scheduler=Depends(get_scheduler)):
    """스케줄러 상태"""
    if scheduler is None:
        return {"enabled": False}
    return {"enabled": True, **scheduler.get_status()}
