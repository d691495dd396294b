"""공고 게시 → 지원 → 상태 변경 흐름에서 발생하는 알림을 검증하는 테스트입니다."""

from datetime import timedelta

import pytest

from app.models.application import Application
from app.models.company import Company
from app.models.notification import Notification
from app.models.user import User
from app.services import notification_service
from app.services.auth_service import hash_password
from app.utils.helpers import utcnow
from tests.conftest import RecordingConnection, auth_headers

COVER_LETTER = "귀사의 백엔드 인턴 포지션에 지원합니다. 파이썬과 데이터베이스 경험을 살려 기여하고 싶습니다. 잘 부탁드립니다."


def _titles(client, headers):
    return [n["title"] for n in client.get("/api/notifications", headers=headers).json()["notifications"]]


@pytest.fixture
def company_headers(client, seed_company):
    return auth_headers(client, "company@test.com")


@pytest.fixture
def published(client, company_headers):
    resp = client.post(
        "/api/internships",
        json={
            "title": "백엔드 인턴",
            "description": "API 서버 개발",
            "skills_required": "Python, SQL",
            "location": "서울",
            "status": "published",
            "application_deadline": (utcnow() + timedelta(days=14)).isoformat(),
        },
        headers=company_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_requires_company_profile(client, seed_users):
    resp = client.post(
        "/api/internships",
        json={"title": "인턴", "description": "설명"},
        headers=auth_headers(client, "company@test.com"),
    )
    assert resp.status_code == 404


def test_student_cannot_post_internship(client, seed_users):
    resp = client.post(
        "/api/internships",
        json={"title": "인턴", "description": "설명"},
        headers=auth_headers(client, "student@test.com"),
    )
    assert resp.status_code == 403


def test_publish_notifies_students_and_owner(client, published, company_headers, seed_users):
    assert published["company_name"] == "테스트컴퍼니"
    # 위치 미지정 학생은 매칭 대상, 부산 학생은 조건 불일치
    assert _titles(client, auth_headers(client, "student@test.com")) == ["새 인턴십 기회"]
    assert _titles(client, auth_headers(client, "student2@test.com")) == []
    assert _titles(client, company_headers) == ["인턴십 공고가 게시되었습니다"]


def test_publish_falls_back_to_all_students(client, db, company_headers, seed_users):
    seed_users["student"].location = "대구"
    db.commit()
    resp = client.post(
        "/api/internships",
        json={"title": "디자인 인턴", "description": "UI 디자인", "location": "제주", "status": "published"},
        headers=company_headers,
    )
    assert resp.status_code == 201
    assert _titles(client, auth_headers(client, "student@test.com")) == ["새 인턴십 공고"]
    assert _titles(client, auth_headers(client, "student2@test.com")) == ["새 인턴십 공고"]


def test_draft_then_publish(client, company_headers, seed_users):
    created = client.post(
        "/api/internships",
        json={"title": "데이터 인턴", "description": "분석"},
        headers=company_headers,
    ).json()
    assert created["status"] == "draft"
    assert _titles(client, company_headers) == []
    assert client.get("/api/internships").json() == []

    resp = client.put(
        f"/api/internships/{created['internship_id']}",
        json={"status": "published"},
        headers=company_headers,
    )
    assert resp.status_code == 200
    assert _titles(client, company_headers) == ["인턴십 공고가 게시되었습니다"]
    assert len(client.get("/api/internships").json()) == 1

    # 이미 게시된 공고 수정은 다시 알리지 않음
    client.put(f"/api/internships/{created['internship_id']}", json={"title": "데이터 분석 인턴"}, headers=company_headers)
    assert len(_titles(client, company_headers)) == 1


def test_application_notifies_company_live(client, published, company_headers, registry, seed_users):
    live = RecordingConnection()
    registry.register(seed_users["company"].user_id, "company", live)

    resp = client.post(
        "/api/applications",
        json={"internship_id": published["internship_id"], "cover_letter": COVER_LETTER},
        headers=auth_headers(client, "student@test.com"),
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["status"] == "pending"

    (event,) = live.of_type("notification")
    assert event["notification"]["title"] == "새 지원서가 접수되었습니다"
    assert "김학생" in event["notification"]["message"]


def test_duplicate_application(client, published, seed_users):
    headers = auth_headers(client, "student@test.com")
    body = {"internship_id": published["internship_id"], "cover_letter": COVER_LETTER}
    assert client.post("/api/applications", json=body, headers=headers).status_code == 201
    assert client.post("/api/applications", json=body, headers=headers).status_code == 409


def test_short_cover_letter_rejected(client, published, seed_users):
    resp = client.post(
        "/api/applications",
        json={"internship_id": published["internship_id"], "cover_letter": "짧은 글"},
        headers=auth_headers(client, "student@test.com"),
    )
    assert resp.status_code == 422


@pytest.mark.parametrize(
    "status,title,noti_type",
    [
        ("accepted", "지원이 합격되었습니다!", "success"),
        ("rejected", "지원 결과 안내", "info"),
        ("shortlisted", "서류 전형에 통과했습니다!", "success"),
        ("reviewed", "지원 상태 변경", "info"),
    ],
)
def test_status_change_notifies_student(client, published, company_headers, seed_users, status, title, noti_type):
    student_headers = auth_headers(client, "student@test.com")
    application = client.post(
        "/api/applications",
        json={"internship_id": published["internship_id"], "cover_letter": COVER_LETTER},
        headers=student_headers,
    ).json()

    resp = client.put(
        f"/api/applications/{application['application_id']}/status",
        json={"status": status, "response_message": "검토 결과입니다."},
        headers=company_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == status

    latest = client.get("/api/notifications", headers=student_headers).json()["notifications"][0]
    assert latest["title"] == title
    assert latest["type"] == noti_type
    assert "테스트컴퍼니" in latest["message"]


def test_company_cannot_update_foreign_application(client, db, published, seed_users):
    other = User(email="other@test.com", password_hash=hash_password("password123"), full_name="타사", role="company")
    db.add(other)
    db.commit()
    db.add(Company(user_id=other.user_id, name="타사"))
    db.commit()

    application = client.post(
        "/api/applications",
        json={"internship_id": published["internship_id"], "cover_letter": COVER_LETTER},
        headers=auth_headers(client, "student@test.com"),
    ).json()
    resp = client.put(
        f"/api/applications/{application['application_id']}/status",
        json={"status": "accepted"},
        headers=auth_headers(client, "other@test.com"),
    )
    assert resp.status_code == 404


def test_status_change_survives_notification_failure(client, db, published, company_headers, seed_users, monkeypatch):
    student = seed_users["student"]
    application = client.post(
        "/api/applications",
        json={"internship_id": published["internship_id"], "cover_letter": COVER_LETTER},
        headers=auth_headers(client, "student@test.com"),
    ).json()
    before = db.query(Notification).filter(Notification.user_id == student.user_id).count()

    def failing_send(*args, **kwargs):
        raise RuntimeError("notification store unavailable")

    monkeypatch.setattr(notification_service, "send_notification", failing_send)

    resp = client.put(
        f"/api/applications/{application['application_id']}/status",
        json={"status": "accepted"},
        headers=company_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "accepted"

    db.expire_all()
    stored = db.query(Application).filter(Application.application_id == application["application_id"]).one()
    assert stored.status == "accepted"
    assert stored.reviewed_at is not None
    assert db.query(Notification).filter(Notification.user_id == student.user_id).count() == before
