"""
Dues Operations Module

회비 작업 수동 실행 API (운영자 전용)
"""

from .router import router as dues_router
from .dependencies import require_operator, get_dues_db, get_push_sender

__all__ = [
    "dues_router",
    "require_operator",
    "get_dues_db",
    "get_push_sender",
]
