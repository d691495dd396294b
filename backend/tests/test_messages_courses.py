from tests.conftest import RecordingConnection, auth_headers


def test_send_message_notifies_recipient(client, seed_users, registry):
    live = RecordingConnection()
    registry.register(seed_users["company"].user_id, "company", live)

    resp = client.post(
        "/api/messages/send",
        json={"recipient_id": seed_users["company"].user_id, "subject": "면접 문의", "content": "일정이 궁금합니다."},
        headers=auth_headers(client, "student@test.com"),
    )
    assert resp.status_code == 201, resp.text

    (event,) = live.of_type("notification")
    assert event["notification"]["title"] == "새 메시지"
    assert "김학생" in event["notification"]["message"]
    assert "면접 문의" in event["notification"]["message"]


def test_send_message_to_self(client, seed_users):
    resp = client.post(
        "/api/messages/send",
        json={"recipient_id": seed_users["student"].user_id, "content": "메모"},
        headers=auth_headers(client, "student@test.com"),
    )
    assert resp.status_code == 400


def test_conversation_marks_read(client, seed_users):
    student_headers = auth_headers(client, "student@test.com")
    company_headers = auth_headers(client, "company@test.com")
    client.post(
        "/api/messages/send",
        json={"recipient_id": seed_users["company"].user_id, "content": "안녕하세요"},
        headers=student_headers,
    )

    conversations = client.get("/api/messages/conversations", headers=company_headers).json()
    assert conversations[0]["user_id"] == seed_users["student"].user_id
    assert conversations[0]["unread_count"] == 1

    thread = client.get(f"/api/messages/{seed_users['student'].user_id}", headers=company_headers).json()
    assert [m["content"] for m in thread] == ["안녕하세요"]
    conversations = client.get("/api/messages/conversations", headers=company_headers).json()
    assert conversations[0]["unread_count"] == 0


def test_course_enrollment_notifies(client, seed_users):
    course = client.post(
        "/api/courses",
        json={"title": "면접 준비 과정", "category": "career"},
        headers=auth_headers(client, "admin@test.com"),
    ).json()
    student_headers = auth_headers(client, "student@test.com")

    resp = client.post(f"/api/courses/{course['course_id']}/enroll", headers=student_headers)
    assert resp.status_code == 201
    latest = client.get("/api/notifications", headers=student_headers).json()["notifications"][0]
    assert latest["title"] == "수강 신청 완료"
    assert latest["type"] == "success"

    again = client.post(f"/api/courses/{course['course_id']}/enroll", headers=student_headers)
    assert again.status_code == 409
