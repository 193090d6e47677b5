"""
Pytest configuration and fixtures for club dues tests
"""

import pytest
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dues.models import (
    Charge, ChargePeriod, ChargeStatus, Club, DuesType, Membership,
    NotificationRecord, PushRecipient, PushResult,
)


class InMemoryDuesDB:
    """DuesDB와 같은 메서드를 가진 메모리 저장소"""

    def __init__(self):
        self.clubs: Dict[str, Club] = {}
        self.members: List[Membership] = []
        self.exemptions: Dict[str, list] = {"yearly": [], "quarterly": [], "custom": []}
        self.charges: Dict[str, Charge] = {}
        self.recipients: Dict[str, PushRecipient] = {}
        self.notifications: List[NotificationRecord] = []
        self.reminders: List[dict] = []

        # 장애 주입
        self.fail_list_clubs = False
        self.fail_members_for: set = set()
        self.fail_create_for: set = set()
        self.fail_unpaid_listing = False

        self.get_club_calls = 0
        self._next_id = 1

    # ==================== 테스트 데이터 ====================

    def add_club(self, club_id: str, monthly_fee: float = 25, due_day: int = 25,
                 name: Optional[str] = None, currency: str = "USD") -> Club:
        settings = {"currency": currency}
        if monthly_fee:
            settings["membershipFee"] = monthly_fee
        if due_day is not None:
            settings["dueDate"] = due_day
        club = Club(id=club_id, name=name or f"Club {club_id}", settings=settings)
        self.clubs[club_id] = club
        return club

    def add_member(self, club_id: str, user_id: str, status: str = "active") -> None:
        self.members.append(Membership(club_id=club_id, user_id=user_id, status=status))

    def add_recipient(self, user_id: str, push_token: Optional[str] = "ExponentPushToken[test]",
                      language: str = "en") -> None:
        self.recipients[user_id] = PushRecipient(user_id=user_id, push_token=push_token, language=language)

    def add_charge(self, charge: Charge) -> Charge:
        if charge.id is None:
            charge.id = f"rec-{self._next_id}"
            self._next_id += 1
        self.charges[charge.idempotency_key] = charge
        return charge

    def charges_of(self, dues_type: Optional[str] = None) -> List[Charge]:
        return [
            c for c in self.charges.values()
            if dues_type is None or c.dues_type == dues_type
        ]

    # ==================== DuesDB 인터페이스 ====================

    async def list_clubs(self, club_id: Optional[str] = None) -> List[Club]:
        if self.fail_list_clubs:
            raise ConnectionError("clubs 조회 실패")
        if club_id:
            return [self.clubs[club_id]] if club_id in self.clubs else []
        return list(self.clubs.values())

    async def get_club(self, club_id: str) -> Optional[Club]:
        self.get_club_calls += 1
        return self.clubs.get(club_id)

    async def list_active_members(self, club_id: str) -> List[Membership]:
        if club_id in self.fail_members_for:
            raise ConnectionError(f"{club_id} 회원 조회 실패")
        return [m for m in self.members if m.club_id == club_id and m.status == "active"]

    async def list_exemptions(self, kind: str, club_id: str, user_id: str) -> list:
        return [g for g in self.exemptions[kind] if g.club_id == club_id and g.user_id == user_id]

    async def create_exemption(self, grant) -> Optional[str]:
        grant.id = f"ex-{self._next_id}"
        self._next_id += 1
        self.exemptions[grant.kind].append(grant)
        return grant.id

    async def find_charge(self, idempotency_key: str) -> Optional[Charge]:
        return self.charges.get(idempotency_key)

    async def create_charge_if_absent(self, charge: Charge) -> Optional[Charge]:
        if charge.user_id in self.fail_create_for:
            raise ConnectionError(f"{charge.user_id} 레코드 저장 실패")
        if charge.idempotency_key in self.charges:
            return None
        stored = charge.model_copy()
        return self.add_charge(stored)

    async def list_unpaid_charges(self, dues_types=None, club_id: Optional[str] = None) -> List[Charge]:
        if self.fail_unpaid_listing:
            raise ConnectionError("미납 레코드 조회 실패")
        type_values = [DuesType(t).value for t in dues_types] if dues_types else None
        return [
            c for c in self.charges.values()
            if c.status == ChargeStatus.UNPAID.value
            and (type_values is None or c.dues_type in type_values)
            and (club_id is None or c.club_id == club_id)
        ]

    async def mark_overdue(self, charge_id: str, now: datetime) -> bool:
        for charge in self.charges.values():
            if charge.id == charge_id and charge.status == ChargeStatus.UNPAID.value:
                charge.status = ChargeStatus.OVERDUE.value
                charge.updated_at = now
                return True
        return False

    async def record_reminder(self, charge_id: str, reminder_count: int, now: datetime) -> None:
        self.reminders.append({"id": charge_id, "count": reminder_count, "at": now})
        for charge in self.charges.values():
            if charge.id == charge_id:
                charge.reminder_count = reminder_count

    async def get_push_recipient(self, user_id: str) -> Optional[PushRecipient]:
        return self.recipients.get(user_id)

    async def create_notification(self, record: NotificationRecord) -> Optional[str]:
        self.notifications.append(record)
        return f"noti-{len(self.notifications)}"


class FakePushSender:
    """발송 내역만 기록하는 푸시 발송기"""

    def __init__(self, success: bool = True):
        self.success = success
        self.sent: List[dict] = []

    async def send(self, token, title, body, data) -> PushResult:
        self.sent.append({"token": token, "title": title, "body": body, "data": data})
        if self.success:
            return PushResult(success_count=1)
        return PushResult(failure_count=1)


@pytest.fixture(scope="function")
def db():
    """빈 메모리 저장소"""
    return InMemoryDuesDB()


@pytest.fixture(scope="function")
def push_sender():
    """성공 응답 푸시 발송기"""
    return FakePushSender()


@pytest.fixture(scope="function")
def failing_push_sender():
    """실패 응답 푸시 발송기"""
    return FakePushSender(success=False)


@pytest.fixture(scope="function")
def make_charge():
    """회비 레코드 팩토리"""
    def _make(
        dues_type: str = "monthly",
        year: Optional[int] = 2025,
        month: Optional[int] = 3,
        club_id: str = "club-1",
        user_id: str = "user-1",
        amount: float = 25,
        status: str = "unpaid",
        created_at: Optional[datetime] = None,
    ) -> Charge:
        created_at = created_at or datetime(2025, 3, 15, 3, 0)
        period = None
        if dues_type == "monthly":
            period = ChargePeriod(year=year, month=month)
        elif dues_type == "yearly":
            period = ChargePeriod(year=year)
        return Charge(
            club_id=club_id,
            user_id=user_id,
            dues_type=dues_type,
            period=period,
            amount=amount,
            status=status,
            created_at=created_at,
            updated_at=created_at,
        )
    return _make
