"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from app.models.user import User
from app.models.company import Company
from app.models.internship import Internship
from app.models.application import Application
from app.models.task import Task
from app.models.course import Course, CourseEnrollment
from app.models.message import Message
from app.models.notification import Notification, ReminderLog

__all__ = [
    "User",
    "Company",
    "Internship",
    "Application",
    "Task",
    "Course", "CourseEnrollment",
    "Message",
    "Notification", "ReminderLog",
]
