"""
Supabase 데이터베이스 클라이언트 (회비 시스템)
"""
from datetime import datetime
from typing import List, Optional, Dict, Any, Iterable

from supabase import create_client, Client
from loguru import logger

from dues.config import supabase_config
from dues.models import (
    Club, Membership, MembershipStatus, Charge, ChargeStatus, DuesType,
    ExemptionGrant, YearlyExemption, QuarterlyExemption, CustomExemption,
    PushRecipient, NotificationRecord,
)


# 싱글톤 클라이언트
_supabase_client: Optional[Client] = None

# PostgREST 기본 최대 행 수
PAGE_SIZE = 1000

EXEMPTION_TABLES = {
    "yearly": ("member_yearly_exemptions", YearlyExemption),
    "quarterly": ("member_quarterly_exemptions", QuarterlyExemption),
    "custom": ("member_custom_exemptions", CustomExemption),
}

SUPPORTED_LANGUAGES = {"ko", "en", "ja", "zh", "de", "fr", "es", "it", "pt", "ru"}


def get_supabase_client() -> Client:
    """
    Supabase 클라이언트 인스턴스 반환 (싱글톤)
    """
    global _supabase_client
    if _supabase_client is None:
        if not supabase_config.supabase_url or not supabase_config.supabase_key:
            raise ValueError("SUPABASE_URL과 SUPABASE_KEY 환경변수를 설정해주세요")
        _supabase_client = create_client(
            supabase_config.supabase_url,
            supabase_config.supabase_key
        )
    return _supabase_client


class DuesDB:
    """
    회비 시스템 데이터 접근

    조회 실패는 호출자에게 그대로 전파합니다.
    (클럽/레코드 목록 조회 실패 = 전체 실행 실패 → 스케줄러 재시도)
    """

    def __init__(self, client: Optional[Client] = None):
        self.client: Client = client or get_supabase_client()

    def _fetch_all(self, build_query) -> List[Dict[str, Any]]:
        """페이지 단위로 전체 행 조회"""
        rows: List[Dict[str, Any]] = []
        offset = 0
        while True:
            result = build_query().range(offset, offset + PAGE_SIZE - 1).execute()
            batch = result.data or []
            rows.extend(batch)
            if len(batch) < PAGE_SIZE:
                return rows
            offset += PAGE_SIZE

    # ==================== 클럽 / 회원 ====================

    async def list_clubs(self, club_id: Optional[str] = None) -> List[Club]:
        """클럽 목록 (club_id 지정 시 해당 클럽만)"""
        def query():
            q = self.client.table("clubs").select("id, name, settings")
            if club_id:
                q = q.eq("id", club_id)
            return q.order("id")

        return [Club.model_validate(row) for row in self._fetch_all(query)]

    async def get_club(self, club_id: str) -> Optional[Club]:
        """클럽 단건 조회"""
        result = self.client.table("clubs").select(
            "id, name, settings"
        ).eq("id", club_id).limit(1).execute()

        if result.data:
            return Club.model_validate(result.data[0])
        return None

    async def list_active_members(self, club_id: str) -> List[Membership]:
        """클럽의 활성 회원 목록"""
        def query():
            return self.client.table("club_members").select(
                "club_id, user_id, status"
            ).eq("club_id", club_id).eq(
                "status", MembershipStatus.ACTIVE.value
            ).order("user_id")

        return [Membership.model_validate(row) for row in self._fetch_all(query)]

    # ==================== 면제 기간 ====================

    async def list_exemptions(self, kind: str, club_id: str, user_id: str) -> List[ExemptionGrant]:
        """회원의 면제 기간 목록 (생성 순)"""
        table, model = EXEMPTION_TABLES[kind]
        result = self.client.table(table).select("*").eq(
            "club_id", club_id
        ).eq("user_id", user_id).order("created_at").execute()

        return [model.model_validate(row) for row in (result.data or [])]

    async def create_exemption(self, grant: ExemptionGrant) -> Optional[str]:
        """면제 기간 저장"""
        table, _ = EXEMPTION_TABLES[grant.kind]
        data = grant.model_dump(mode="json", exclude_none=True, exclude={"id", "kind"})
        data["created_at"] = datetime.now().isoformat()

        result = self.client.table(table).insert(data).execute()
        if result.data:
            logger.info(f"✅ {grant.kind} 면제 기간 저장: {grant.user_id} {grant.start} ~ {grant.end}")
            return result.data[0].get("id")
        return None

    # ==================== 회비 레코드 ====================

    async def find_charge(self, idempotency_key: str) -> Optional[Charge]:
        """멱등성 키로 회비 레코드 조회"""
        result = self.client.table("member_dues_records").select("*").eq(
            "idempotency_key", idempotency_key
        ).limit(1).execute()

        if result.data:
            return Charge.model_validate(result.data[0])
        return None

    async def create_charge_if_absent(self, charge: Charge) -> Optional[Charge]:
        """
        회비 레코드 조건부 생성

        idempotency_key 유니크 인덱스 기준으로 중복이면 무시합니다.

        Returns:
            새로 생성된 레코드, 이미 존재하면 None
        """
        result = self.client.table("member_dues_records").upsert(
            charge.to_record(),
            on_conflict="idempotency_key",
            ignore_duplicates=True
        ).execute()

        if result.data:
            return Charge.model_validate(result.data[0])
        return None

    async def list_unpaid_charges(
        self,
        dues_types: Optional[Iterable[DuesType]] = None,
        club_id: Optional[str] = None
    ) -> List[Charge]:
        """미납 회비 레코드 목록"""
        type_values = [DuesType(t).value for t in dues_types] if dues_types else None

        def query():
            q = self.client.table("member_dues_records").select("*").eq(
                "status", ChargeStatus.UNPAID.value
            )
            if type_values:
                q = q.in_("dues_type", type_values)
            if club_id:
                q = q.eq("club_id", club_id)
            return q.order("id")

        return [Charge.model_validate(row) for row in self._fetch_all(query)]

    async def mark_overdue(self, charge_id: str, now: datetime) -> bool:
        """unpaid → overdue (unpaid 상태인 경우에만)"""
        result = self.client.table("member_dues_records").update({
            "status": ChargeStatus.OVERDUE.value,
            "updated_at": now.isoformat()
        }).eq("id", charge_id).eq("status", ChargeStatus.UNPAID.value).execute()

        return bool(result.data)

    async def record_reminder(self, charge_id: str, reminder_count: int, now: datetime) -> None:
        """알림 발송 횟수 기록"""
        self.client.table("member_dues_records").update({
            "reminder_count": reminder_count,
            "reminder_sent_at": now.isoformat(),
            "updated_at": now.isoformat()
        }).eq("id", charge_id).execute()

    # ==================== 알림 ====================

    async def get_push_recipient(self, user_id: str) -> Optional[PushRecipient]:
        """푸시 토큰 + 선호 언어 조회"""
        result = self.client.table("users").select(
            "id, push_token, preferred_language, language"
        ).eq("id", user_id).limit(1).execute()

        if not result.data:
            return None

        row = result.data[0]
        lang = row.get("preferred_language") or row.get("language") or "en"
        if lang not in SUPPORTED_LANGUAGES:
            lang = "en"

        return PushRecipient(
            user_id=user_id,
            push_token=row.get("push_token"),
            language=lang
        )

    async def create_notification(self, record: NotificationRecord) -> Optional[str]:
        """앱 내 알림 저장"""
        result = self.client.table("notifications").insert(
            record.model_dump(mode="json")
        ).execute()

        if result.data:
            return result.data[0].get("id")
        return None
