"""업무 이벤트별 알림 문구와 발송 규칙을 모아둔 모듈입니다.

라우터/서비스는 상태 변경을 커밋한 뒤 여기의 notify_* 함수를 호출합니다.
모든 notify_* 함수는 best-effort이며 예외를 호출자에게 올리지 않습니다.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.config import settings
from app.models.application import Application
from app.models.internship import Internship
from app.models.notification import Notification
from app.models.task import Task
from app.models.user import User
from app.services.connection_registry import ConnectionRegistry
from app.services.notification_service import broadcast_to_role, notify_safely
from app.utils.permissions import ADMIN, COMPANY, STUDENT

logger = logging.getLogger(__name__)

ANNOUNCEMENT_ROLES = (STUDENT, COMPANY, ADMIN)


def application_status_text(status: str, internship_title: str, company_name: str) -> Tuple[str, str, str]:
    if status == "accepted":
        return (
            "지원이 합격되었습니다!",
            f"축하합니다! {company_name}의 \"{internship_title}\" 지원이 합격 처리되었습니다.",
            "success",
        )
    if status == "rejected":
        return (
            "지원 결과 안내",
            f"{company_name}의 \"{internship_title}\" 지원은 이번에 선발되지 않았습니다. 다른 공고에도 계속 도전해 보세요!",
            "info",
        )
    if status == "shortlisted":
        return (
            "서류 전형에 통과했습니다!",
            f"{company_name}의 \"{internship_title}\" 지원이 후보자 명단에 올랐습니다.",
            "success",
        )
    if status == "interview_scheduled":
        return (
            "면접 일정이 잡혔습니다",
            f"{company_name}의 \"{internship_title}\" 면접 일정이 등록되었습니다.",
            "info",
        )
    return (
        "지원 상태 변경",
        f"{company_name}의 \"{internship_title}\" 지원 상태가 {status}(으)로 변경되었습니다.",
        "info",
    )


def task_deadline_text(task_title: str, days_left: int) -> Tuple[str, str, str]:
    if days_left <= 0:
        return "과제 기한이 지났습니다!", f"과제 \"{task_title}\"의 기한이 지났습니다. 가능한 빨리 완료해 주세요.", "error"
    if days_left == 1:
        return "과제 마감이 내일입니다!", f"과제 \"{task_title}\"의 마감이 내일입니다. 잊지 말고 완료해 주세요!", "warning"
    return "과제 마감 알림", f"과제 \"{task_title}\"의 마감이 {days_left}일 남았습니다.", "warning"


def internship_deadline_text(internship_title: str, days_left: int) -> Tuple[str, str, str]:
    noti_type = "error" if days_left <= 1 else "warning" if days_left <= 3 else "info"
    if days_left <= 0:
        return (
            "인턴십 모집이 마감되었습니다!",
            f"\"{internship_title}\" 모집 기한이 지났습니다. 기한 연장 또는 모집 종료를 검토해 주세요.",
            noti_type,
        )
    if days_left == 1:
        return "인턴십 모집 마감이 내일입니다!", f"\"{internship_title}\" 모집 마감이 내일입니다.", noti_type
    return "인턴십 모집 마감 알림", f"\"{internship_title}\" 모집 마감이 {days_left}일 남았습니다.", noti_type


def pending_application_text(student_name: str, internship_title: str, days_pending: int) -> Tuple[str, str, str]:
    return (
        "검토 대기 중인 지원서",
        f"{student_name}님의 \"{internship_title}\" 지원서가 {days_pending}일째 검토 대기 중입니다. 확인해 주세요.",
        "warning",
    )


def low_application_text(internship_title: str, application_count: int, days_active: int) -> Tuple[str, str, str]:
    return (
        "지원자 수 부족 알림",
        f"\"{internship_title}\" 공고에 {days_active}일 동안 지원서가 {application_count}건만 접수되었습니다. "
        "공고 내용이나 자격 요건을 점검해 보세요.",
        "warning",
    )


def notify_application_status_change(db: Session, registry: Optional[ConnectionRegistry], application: Application):
    internship = application.internship
    company_name = internship.company_name if internship else ""
    title, message, noti_type = application_status_text(
        application.status, internship.title if internship else "", company_name or ""
    )
    return notify_safely(db, registry, application.student_id, title, message, noti_type, "/applications")


def notify_new_application(db: Session, registry: Optional[ConnectionRegistry], application: Application):
    internship = application.internship
    if internship is None or internship.company is None:
        return None
    student_name = application.student_name or "지원자"
    return notify_safely(
        db,
        registry,
        internship.company.user_id,
        "새 지원서가 접수되었습니다",
        f"{student_name}님이 \"{internship.title}\"에 지원했습니다. 지원서를 검토해 주세요.",
        "info",
        f"/applications?highlight={application.application_id}",
    )


def notify_internship_published(db: Session, registry: Optional[ConnectionRegistry], internship: Internship):
    if internship.company is None:
        return None
    return notify_safely(
        db,
        registry,
        internship.company.user_id,
        "인턴십 공고가 게시되었습니다",
        f"\"{internship.title}\" 공고가 게시되어 학생들에게 노출됩니다.",
        "success",
        f"/my-internships?highlight={internship.internship_id}",
    )


def _matching_student_ids(db: Session, internship: Internship) -> List[int]:
    conditions = [User.location.is_(None)]
    if internship.skills_required:
        for skill in [s.strip() for s in internship.skills_required.split(",") if s.strip()]:
            conditions.append(User.skills.ilike(f"%{skill}%"))
    if internship.field:
        conditions.append(User.major.ilike(f"%{internship.field}%"))
    if internship.location:
        conditions.append(User.location.ilike(f"%{internship.location}%"))
    rows = (
        db.query(User.user_id)
        .filter(User.role == STUDENT, User.is_active == True, or_(*conditions))  # noqa: E712
        .order_by(User.user_id)
        .limit(settings.NEW_INTERNSHIP_MATCH_LIMIT)
        .all()
    )
    return [row[0] for row in rows]


def notify_new_internship_posting(db: Session, registry: Optional[ConnectionRegistry], internship: Internship) -> int:
    """조건이 맞는 학생에게 새 공고를 알립니다. 매칭되는 학생이 없으면 전체 학생에게 보냅니다."""
    company_name = internship.company_name or ""
    try:
        student_ids = _matching_student_ids(db, internship)
        if not student_ids:
            return len(broadcast_to_role(
                db,
                registry,
                STUDENT,
                "새 인턴십 공고",
                f"{company_name}에서 새 인턴십 \"{internship.title}\" 공고를 게시했습니다. 확인해 보세요!",
                "info",
                "/internships",
            ))
        sent = 0
        for student_id in student_ids:
            noti = notify_safely(
                db,
                registry,
                student_id,
                "새 인턴십 기회",
                f"{company_name}에서 \"{internship.title}\" 인턴십을 게시했습니다. 확인해 보세요!",
                "info",
                "/internships",
            )
            if noti is not None:
                sent += 1
        return sent
    except Exception as exc:
        logger.warning("[notifications] new internship notifications failed for %s: %s", internship.internship_id, exc)
        return 0


def notify_task_assigned(db: Session, registry: Optional[ConnectionRegistry], task: Task):
    due = f" 마감: {task.due_date:%Y-%m-%d}." if task.due_date else ""
    return notify_safely(
        db, registry, task.assigned_to, "새 과제가 배정되었습니다", f"과제 \"{task.title}\"이(가) 배정되었습니다.{due}", "info", "/tasks"
    )


def notify_task_completion(db: Session, registry: Optional[ConnectionRegistry], user_id: int, task_title: str):
    return notify_safely(
        db, registry, user_id, "과제 제출 완료", f"\"{task_title}\" 과제를 제출했습니다. 수고하셨습니다!", "success", "/tasks"
    )


def notify_task_rejection(db: Session, registry: Optional[ConnectionRegistry], task: Task):
    return notify_safely(
        db,
        registry,
        task.assigned_to,
        "과제 제출이 반려되었습니다",
        f"\"{task.title}\" 제출물이 반려되었습니다. 피드백을 확인하고 다시 제출해 주세요.",
        "warning",
        "/tasks",
    )


def notify_new_message(
    db: Session, registry: Optional[ConnectionRegistry], recipient_id: int, sender_name: str, subject: Optional[str] = None
):
    message = f"{sender_name}님이 메시지를 보냈습니다: \"{subject}\"" if subject else f"{sender_name}님이 메시지를 보냈습니다."
    return notify_safely(db, registry, recipient_id, "새 메시지", message, "info", "/messages")


def notify_course_enrollment(db: Session, registry: Optional[ConnectionRegistry], user_id: int, course_title: str):
    return notify_safely(
        db,
        registry,
        user_id,
        "수강 신청 완료",
        f"\"{course_title}\" 강좌에 등록되었습니다. 지금 학습을 시작해 보세요!",
        "success",
        "/learning",
    )


def send_system_announcement(
    db: Session,
    registry: Optional[ConnectionRegistry],
    title: str,
    message: str,
    target_role: Optional[str] = None,
    action_url: Optional[str] = None,
) -> List[Notification]:
    roles = (target_role,) if target_role else ANNOUNCEMENT_ROLES
    sent: List[Notification] = []
    for role in roles:
        sent.extend(broadcast_to_role(db, registry, role, title, message, "info", action_url))
    return sent
