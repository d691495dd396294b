"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./internship_platform.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Notifications
    NOTIFICATION_PAGE_LIMIT_DEFAULT: int = 20
    NOTIFICATION_PAGE_LIMIT_MAX: int = 50
    NEW_INTERNSHIP_MATCH_LIMIT: int = 100
    HEARTBEAT_INTERVAL_SECONDS: int = 30

    # Reminder scheduler
    SCHEDULER_ENABLED: bool = True
    TASK_DEADLINE_SWEEP_HOURS: int = 1
    INTERNSHIP_DEADLINE_SWEEP_HOURS: int = 6
    PENDING_APPLICATION_SWEEP_HOURS: int = 12
    LOW_APPLICATION_SWEEP_HOURS: int = 24
    # 기동 직후 DB 부하가 몰리지 않도록 sweep별 첫 실행을 엇갈리게 둔다.
    TASK_DEADLINE_STARTUP_DELAY_SECONDS: int = 10
    INTERNSHIP_DEADLINE_STARTUP_DELAY_SECONDS: int = 20
    PENDING_APPLICATION_STARTUP_DELAY_SECONDS: int = 30
    LOW_APPLICATION_STARTUP_DELAY_SECONDS: int = 40

    TASK_DEADLINE_LOOKAHEAD_DAYS: int = 3
    INTERNSHIP_DEADLINE_LOOKAHEAD_DAYS: int = 7
    PENDING_APPLICATION_MIN_DAYS: int = 7
    LOW_APPLICATION_MIN_DAYS_ACTIVE: int = 7
    LOW_APPLICATION_THRESHOLD: int = 5

    # 같은 대상에 대한 리마인더 재발송 억제 기간(일)
    TASK_DEADLINE_DEDUP_DAYS: int = 1
    INTERNSHIP_DEADLINE_DEDUP_DAYS: int = 1
    PENDING_APPLICATION_DEDUP_DAYS: int = 3
    LOW_APPLICATION_DEDUP_DAYS: int = 7

    class Config:
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
