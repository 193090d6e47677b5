"""
클럽 회비 설정 조회 (읽기 전용)
"""
from typing import Dict, Optional

from loguru import logger

from .models import Club, FeeConfig

# 스윕 1회 동안 유지되는 클럽 조회 결과 (club_id → Club, 없으면 None)
ClubMap = Dict[str, Optional[Club]]


class FeeConfigReader:
    """클럽 회비 설정 리더"""

    def __init__(self, db):
        self.db = db

    async def get_club(self, club_id: str, clubs: Optional[ClubMap] = None) -> Optional[Club]:
        """클럽 조회 (clubs 맵이 주어지면 그 안에서 재사용)"""
        if clubs is not None and club_id in clubs:
            return clubs[club_id]

        club = await self.db.get_club(club_id)
        if club is None:
            logger.warning(f"⚠️ 클럽을 찾을 수 없습니다: {club_id} (기본 설정 사용)")
        if clubs is not None:
            clubs[club_id] = club
        return club

    async def get(self, club_id: str, clubs: Optional[ClubMap] = None) -> FeeConfig:
        """클럽 회비 설정 (미설정 항목은 기본값)"""
        club = await self.get_club(club_id, clubs)
        if club is None:
            return FeeConfig()
        return club.fee_config
