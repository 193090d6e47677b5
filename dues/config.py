"""
회비 시스템 설정
"""
from pydantic_settings import BaseSettings
from pydantic import Field
from dotenv import load_dotenv

load_dotenv()


class SupabaseConfig(BaseSettings):
    """Supabase 설정"""

    supabase_url: str = Field(default="", description="Supabase Project URL")
    supabase_key: str = Field(default="", description="Supabase service role key")

    class Config:
        env_prefix = ""
        case_sensitive = False


class SchedulerConfig(BaseSettings):
    """스케줄러 설정"""

    enabled: bool = Field(default=False, description="API 서버에서 스케줄러 실행 여부")
    timezone: str = Field(default="America/New_York", description="스케줄 기준 시간대")
    generation_hour: int = Field(default=3, description="매일 월회비 생성 시간")
    overdue_hour: int = Field(default=4, description="매일 연체 전환 시간")
    reminder_hour: int = Field(default=10, description="매일 납부 임박 알림 시간")
    retry_count: int = Field(default=3, description="전체 실행 실패 시 재시도 횟수")

    class Config:
        env_prefix = "DUES_SCHEDULER_"
        case_sensitive = False


class DuesSettings(BaseSettings):
    """회비 규칙 설정"""

    default_due_day: int = Field(default=25, description="기본 납부 마감일")
    default_currency: str = Field(default="USD", description="기본 통화")
    generation_lead_days: int = Field(default=10, description="마감일 며칠 전에 회비 생성")
    reminder_window_days: int = Field(default=3, description="마감 임박 알림 기간 (일)")
    join_grace_days: int = Field(default=30, description="가입비 납부 기한 (생성일 기준)")

    class Config:
        env_prefix = "DUES_"
        case_sensitive = False


class PushConfig(BaseSettings):
    """푸시 알림 설정"""

    expo_push_url: str = Field(
        default="https://exp.host/--/api/v2/push/send",
        description="Expo Push API 엔드포인트"
    )
    request_timeout: float = Field(default=10.0, description="요청 타임아웃 (초)")
    channel_id: str = Field(default="club_dues", description="Android 알림 채널")

    class Config:
        env_prefix = "PUSH_"
        case_sensitive = False


class AdminConfig(BaseSettings):
    """운영자 API 설정"""

    admin_api_key: str = Field(default="", description="수동 실행 API 키 (X-Admin-Key)")

    class Config:
        env_prefix = "DUES_"
        case_sensitive = False


# 전역 설정 인스턴스
supabase_config = SupabaseConfig()
scheduler_config = SchedulerConfig()
dues_settings = DuesSettings()
push_config = PushConfig()
admin_config = AdminConfig()
