"""
Dues Operator Dependencies

운영자 인증 및 저장소 의존성
"""

import hmac
from typing import Optional
from fastapi import Header, HTTPException, Request, status

from dues.config import admin_config


def require_operator(x_admin_key: Optional[str] = Header(default=None)) -> str:
    """운영자 API 키 확인 (X-Admin-Key)"""
    expected = admin_config.admin_api_key
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="운영자 API 키가 설정되지 않았습니다"
        )

    if not x_admin_key or not hmac.compare_digest(x_admin_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="유효하지 않은 운영자 키입니다"
        )
    return x_admin_key


def get_dues_db():
    """회비 저장소 (Supabase)"""
    from database.supabase_client import DuesDB

    try:
        return DuesDB()
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )


def get_push_sender():
    """푸시 발송기 (기본: Expo)"""
    from dues.notifications import ExpoPushSender
    return ExpoPushSender()


def get_scheduler(request: Request):
    """실행 중인 스케줄러 (없으면 None)"""
    return getattr(request.app.state, "dues_scheduler", None)
