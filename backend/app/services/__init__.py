"""서비스 레이어 패키지 초기화 모듈입니다."""

from app.services import (
    auth_service,
    user_service,
    company_service,
    internship_service,
    application_service,
    task_service,
    course_service,
    message_service,
    notification_service,
    # 실시간 알림/리마인더
    notification_events,
    reminder_service,
)
