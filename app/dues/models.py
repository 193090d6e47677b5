"""
Dues Operator API Models

수동 실행 요청 모델
"""

from typing import Optional, Literal
from pydantic import BaseModel, Field


class ManualGenerateRequest(BaseModel):
    """수동 월회비 생성 (연/월 미지정 시 다음 달)"""
    club_id: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=2000, le=2100)
    month: Optional[int] = Field(default=None, ge=1, le=12)


class ManualSweepRequest(BaseModel):
    """수동 스윕 (연체 전환 / 임박 알림)"""
    club_id: Optional[str] = None


class JoinFeeCreate(BaseModel):
    """가입비 생성"""
    club_id: str
    user_id: str
    amount: float = Field(..., gt=0)
    currency: Optional[str] = None


class LateFeeCreate(BaseModel):
    """연체료 추가"""
    club_id: str
    user_id: str
    amount: float = Field(..., gt=0)
    related_charge_id: Optional[str] = None
    notes: Optional[str] = None
    currency: Optional[str] = None


class ExemptionCreate(BaseModel):
    """면제 기간 등록"""
    kind: Literal["yearly", "quarterly", "custom"]
    club_id: str
    user_id: str
    start_year: int = Field(..., ge=2000, le=2100)
    start_month: int = Field(..., ge=1, le=12)
    paid_amount: Optional[float] = Field(default=None, ge=0)  # custom 전용
    monthly_fee: Optional[float] = Field(default=None, gt=0)  # custom 전용
