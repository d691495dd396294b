"""Seed the database with demo accounts, a published internship and welcome notifications."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import timedelta
from app.database import SessionLocal, engine, Base
import app.models  # noqa: F401

from app.models.user import User
from app.models.company import Company
from app.models.internship import Internship
from app.models.task import Task
from app.services.auth_service import hash_password
from app.services.notification_service import send_notification
from app.utils.helpers import utcnow

DEMO_PASSWORD = "password123"

WELCOME = [
    ("InternshipPro에 오신 것을 환영합니다!", "계정이 생성되었습니다. 지금 인턴십 공고를 둘러보세요!", "success", "/internships"),
    ("프로필을 완성해 주세요", "전공과 보유 기술을 입력하면 맞춤 공고 알림을 받을 수 있습니다.", "info", "/profile"),
]


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        password_hash = hash_password(DEMO_PASSWORD)
        users = [
            User(email="admin@example.com", password_hash=password_hash, full_name="관리자 김철수", role="admin"),
            User(email="hr@acme.example.com", password_hash=password_hash, full_name="인사팀 이영희", role="company"),
            User(email="student1@example.com", password_hash=password_hash, full_name="정수연", role="student",
                 university="한국대학교", major="컴퓨터공학", skills="Python, SQL", location="서울"),
            User(email="student2@example.com", password_hash=password_hash, full_name="최동현", role="student",
                 university="한국대학교", major="경영학", skills="Excel, 마케팅"),
        ]
        db.add_all(users)
        db.flush()

        company = Company(user_id=users[1].user_id, name="에이크미", industry="IT", location="서울",
                          website="https://acme.example.com")
        db.add(company)
        db.flush()

        now = utcnow()
        db.add(Internship(
            company_id=company.company_id,
            title="백엔드 개발 인턴",
            description="FastAPI 기반 API 서버 개발에 참여합니다.",
            skills_required="Python, SQL",
            field="컴퓨터공학",
            location="서울",
            location_type="hybrid",
            duration="3개월",
            application_deadline=now + timedelta(days=5),
            status="published",
        ))
        db.add(Task(
            title="자기소개서 초안 제출",
            assigned_to=users[2].user_id,
            assigned_by=users[0].user_id,
            due_date=now + timedelta(days=2),
            priority="high",
        ))
        db.commit()

        for user in users:
            for title, message, noti_type, action_url in WELCOME:
                send_notification(db, None, user.user_id, title, message, noti_type, action_url)

        print(f"Seeded {len(users)} users (password: {DEMO_PASSWORD}).")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
