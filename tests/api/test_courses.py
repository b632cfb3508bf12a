"""Course workflow through the HTTP surface.

submit -> pending (hidden from the catalogue) -> approve -> listed.
"""

from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient

from tests.conftest import auth, seed_course

TUTOR = "tutor@example.com"


def _submit(client: TestClient, **overrides) -> str:
    body = {
        "name": "Conversational French",
        "instructorEmail": TUTOR,
        "instructorName": "Claire",
        "imageUrl": "https://img.example.com/fr.png",
        "availableSeats": 5,
        "price": 49.99,
    }
    body.update(overrides)
    resp = client.post("/courses", json=body)
    assert resp.status_code == 200, resp.text
    return resp.json()["insertedId"]


def test_submit_approve_list_scenario(client: TestClient) -> None:
    course_id = _submit(client, status="approved")

    # Pending courses are not in the public catalogue, whatever was sent.
    assert client.get("/courses").json() == []
    pending = client.get("/courses", params={"status": "pending"}).json()
    assert [c["id"] for c in pending] == [course_id]

    resp = client.patch(f"/courses/approve/{course_id}")
    assert resp.json() == {"acknowledged": True, "matchedCount": 1, "modifiedCount": 1}

    listed = client.get("/courses").json()
    assert len(listed) == 1
    assert listed[0]["status"] == "approved"
    assert listed[0]["price"] == 49.99
    assert listed[0]["enrolledCount"] == 0


def test_minimal_submission_walks_the_workflow(client: TestClient) -> None:
    resp = client.post(
        "/courses",
        json={"instructorEmail": "a@x.com", "availableSeats": 5, "status": "pending"},
    )
    assert resp.status_code == 200, resp.text
    course_id = resp.json()["insertedId"]

    mine = client.get(
        "/coursesByEmail", params={"email": "a@x.com"}, headers=auth("a@x.com")
    )
    assert mine.status_code == 200
    (course,) = mine.json()
    assert course["id"] == course_id
    assert course["instructorEmail"] == "a@x.com"
    assert course["availableSeats"] == 5
    assert course["status"] == "pending"

    resp = client.patch(f"/courses/approve/{course_id}")
    assert resp.json()["modifiedCount"] == 1

    listed = client.get("/courses").json()
    assert [c["id"] for c in listed] == [course_id]
    assert listed[0]["status"] == "approved"


def test_deny_with_feedback(client: TestClient) -> None:
    course_id = _submit(client)
    client.patch(
        f"/courses/feedback/{course_id}", json={"feedback": "Add a syllabus"}
    )
    resp = client.patch(f"/courses/denied/{course_id}")
    assert resp.json()["modifiedCount"] == 1

    course = client.get(f"/courses/{course_id}").json()
    assert course["status"] == "denied"
    assert course["feedback"] == "Add a syllabus"


def test_transition_out_of_denied_is_conflict(client: TestClient) -> None:
    course_id = _submit(client)
    client.patch(f"/courses/denied/{course_id}")
    resp = client.patch(f"/courses/approve/{course_id}")
    assert resp.status_code == 409


def test_instructor_sees_own_courses_any_status(client: TestClient) -> None:
    pending_id = _submit(client)
    approved = seed_course(instructor_email=TUTOR)
    seed_course(instructor_email="someone-else@example.com")

    resp = client.get(
        "/coursesByEmail", params={"email": TUTOR}, headers=auth(TUTOR)
    )
    assert resp.status_code == 200
    assert {c["id"] for c in resp.json()} == {pending_id, str(approved.id)}


def test_instructor_cannot_list_other_instructor(client: TestClient) -> None:
    resp = client.get(
        "/coursesByEmail",
        params={"email": "someone-else@example.com"},
        headers=auth(TUTOR),
    )
    assert resp.status_code == 403
    assert resp.json()["detail"] == "forbidden access"


def test_patch_course_fields(client: TestClient) -> None:
    course_id = _submit(client)
    resp = client.patch(
        f"/courses/{course_id}", json={"availableSeats": 12, "price": 55}
    )
    assert resp.json()["modifiedCount"] == 1

    course = client.get(f"/courses/{course_id}").json()
    assert course["availableSeats"] == 12
    assert course["price"] == 55.0
    assert course["status"] == "pending"


def test_patch_rejects_negative_seats(client: TestClient) -> None:
    course_id = _submit(client)
    resp = client.patch(f"/courses/{course_id}", json={"availableSeats": -1})
    assert resp.status_code == 422


def test_patch_unknown_course_matches_nothing(client: TestClient) -> None:
    resp = client.patch(f"/courses/{uuid4()}", json={"name": "Ghost"})
    assert resp.json()["matchedCount"] == 0


def test_get_unknown_course_is_404(client: TestClient) -> None:
    assert client.get(f"/courses/{uuid4()}").status_code == 404


def test_unknown_status_filter_is_422(client: TestClient) -> None:
    assert client.get("/courses", params={"status": "archived"}).status_code == 422


def test_popular_courses_limit(client: TestClient) -> None:
    for i in range(8):
        seed_course(name=f"Course {i}")
    assert len(client.get("/courses/popular").json()) == 6
    assert len(client.get("/courses/popular", params={"limit": 3}).json()) == 3


def test_all_courses_for_admin(client: TestClient, admin_email: str) -> None:
    _submit(client)
    seed_course()
    resp = client.get("/courses/all", headers=auth(admin_email))
    assert resp.status_code == 200
    assert {c["status"] for c in resp.json()} == {"pending", "approved"}
