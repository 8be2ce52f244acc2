from datetime import datetime, timedelta, timezone

from conftest import API, borrow, make_student
from library_app.config.settings import settings
from library_app.modules.borrows.service import overdue_days


def test_overdue_days():
    due = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert overdue_days(due, now=due - timedelta(days=1)) == 0
    assert overdue_days(due, now=due) == 0
    assert overdue_days(due, now=due + timedelta(days=3)) == 3
    assert overdue_days(due, returned_at=due + timedelta(days=1)) == 1
    assert overdue_days(datetime(2026, 3, 1), now=datetime(2026, 3, 5, tzinfo=timezone.utc)) == 4


def test_request_and_approve_issues_a_copy(client, admin, student, book, fake_db):
    request = client.post(f"{API}/borrows/requests", json={"book_id": book["id"]}, headers=student["headers"])
    assert request.status_code == 201
    assert request.json()["status"] == "pending"
    assert request.json()["book_title"] == "Dune"

    decision = client.post(
        f"{API}/borrows/requests/{request.json()['id']}/decision",
        json={"action": "approve", "notes": "Enjoy"},
        headers=admin["headers"],
    )

    assert decision.status_code == 200
    assert decision.json()["status"] == "approved"
    assert decision.json()["notes"] == "Enjoy"

    issues = fake_db.rows("book_issues", user_id=student["user_id"])
    assert len(issues) == 1
    assert issues[0]["copy_number"] == "DUN-001"
    assert fake_db.rows("books", id=book["id"])[0]["available_quantity"] == 1
    assert fake_db.rows("book_copies", copy_number="DUN-001")[0]["status"] == "issued"

    due = datetime.fromisoformat(issues[0]["due_date"])
    issued = datetime.fromisoformat(issues[0]["issued_at"])
    assert due - issued == timedelta(days=14)


def test_reject_leaves_inventory_untouched(client, admin, student, book, fake_db):
    request = client.post(f"{API}/borrows/requests", json={"book_id": book["id"]}, headers=student["headers"]).json()

    decision = client.post(
        f"{API}/borrows/requests/{request['id']}/decision",
        json={"action": "reject"},
        headers=admin["headers"],
    )

    assert decision.json()["status"] == "rejected"
    assert fake_db.rows("book_issues") == []
    assert fake_db.rows("books", id=book["id"])[0]["available_quantity"] == 2


def test_request_cannot_be_processed_twice(client, admin, student, book):
    request = client.post(f"{API}/borrows/requests", json={"book_id": book["id"]}, headers=student["headers"]).json()
    url = f"{API}/borrows/requests/{request['id']}/decision"
    client.post(url, json={"action": "reject"}, headers=admin["headers"])

    again = client.post(url, json={"action": "approve"}, headers=admin["headers"])

    assert again.status_code == 400


def test_duplicate_pending_request_rejected(client, student, book):
    client.post(f"{API}/borrows/requests", json={"book_id": book["id"]}, headers=student["headers"])
    response = client.post(f"{API}/borrows/requests", json={"book_id": book["id"]}, headers=student["headers"])
    assert response.status_code == 400
    assert "pending" in response.json()["detail"]


def test_cannot_request_a_book_already_held(client, admin, student, book):
    borrow(client, student, admin, book["id"])
    response = client.post(f"{API}/borrows/requests", json={"book_id": book["id"]}, headers=student["headers"])
    assert response.status_code == 400


def test_request_unavailable_book(client, admin, book):
    first = make_student(client, student_id="S3001")
    second = make_student(client, student_id="S3002")
    third = make_student(client, student_id="S3003")
    borrow(client, first, admin, book["id"])
    borrow(client, second, admin, book["id"])

    response = client.post(f"{API}/borrows/requests", json={"book_id": book["id"]}, headers=third["headers"])

    assert response.status_code == 400
    assert response.json()["detail"] == "No available copies"


def test_request_unknown_book(client, student):
    response = client.post(f"{API}/borrows/requests", json={"book_id": "missing"}, headers=student["headers"])
    assert response.status_code == 404


def test_active_issue_limit(client, admin, student, monkeypatch):
    monkeypatch.setattr(settings, "max_active_issues", 1)
    ids = []
    for title in ("Emma", "Ulysses"):
        created = client.post(f"{API}/books", json={
            "title": title, "author": "Someone", "category": "Classics", "quantity": 1
        }, headers=admin["headers"]).json()
        ids.append(created["id"])
    borrow(client, student, admin, ids[0])

    response = client.post(f"{API}/borrows/requests", json={"book_id": ids[1]}, headers=student["headers"])

    assert response.status_code == 400
    assert "at most 1" in response.json()["detail"]


def test_borrow_cost_is_deducted(client, admin, student, book, fake_db, monkeypatch):
    monkeypatch.setattr(settings, "borrow_coin_cost", 10)

    issue = borrow(client, student, admin, book["id"])

    profile = fake_db.rows("profiles", user_id=student["user_id"])[0]
    assert profile["coin_balance"] == 90
    charges = fake_db.rows("coin_transactions", user_id=student["user_id"], type="deducted")
    assert [c["amount"] for c in charges] == [-10]
    assert charges[0]["reference_id"] == issue["id"]


def test_manual_issue_by_student_id(client, admin, student, book):
    response = client.post(
        f"{API}/borrows/issues",
        json={"student_id": student["student_id"], "book_id": book["id"]},
        headers=admin["headers"],
    )

    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] == student["user_id"]
    assert body["student_id"] == student["student_id"]
    assert body["request_id"] is None
    assert body["is_overdue"] is False


def test_manual_issue_unknown_student(client, admin, book):
    response = client.post(
        f"{API}/borrows/issues",
        json={"student_id": "GHOST", "book_id": book["id"]},
        headers=admin["headers"],
    )
    assert response.status_code == 404


def test_return_flow_restores_inventory(client, admin, student, book, fake_db):
    issue = borrow(client, student, admin, book["id"])

    requested = client.post(f"{API}/borrows/issues/{issue['id']}/return-request", headers=student["headers"])
    assert requested.status_code == 200
    assert requested.json()["status"] == "return_requested"

    approved = client.post(
        f"{API}/borrows/issues/{issue['id']}/return-decision",
        json={"action": "approve"},
        headers=admin["headers"],
    )

    assert approved.status_code == 200
    assert approved.json()["status"] == "returned"
    assert approved.json()["returned_at"] is not None
    assert fake_db.rows("books", id=book["id"])[0]["available_quantity"] == 2
    assert fake_db.rows("book_copies", id=issue["book_copy_id"])[0]["status"] == "available"


def test_rejected_return_keeps_book_issued(client, admin, student, book, fake_db):
    issue = borrow(client, student, admin, book["id"])
    client.post(f"{API}/borrows/issues/{issue['id']}/return-request", headers=student["headers"])

    rejected = client.post(
        f"{API}/borrows/issues/{issue['id']}/return-decision",
        json={"action": "reject"},
        headers=admin["headers"],
    )

    assert rejected.json()["status"] == "issued"
    assert fake_db.rows("books", id=book["id"])[0]["available_quantity"] == 1


def test_student_cannot_return_someone_elses_book(client, admin, student, book):
    issue = borrow(client, student, admin, book["id"])
    other = make_student(client, student_id="S3010")

    response = client.post(f"{API}/borrows/issues/{issue['id']}/return-request", headers=other["headers"])

    assert response.status_code == 403


def test_late_return_applies_penalty(client, admin, student, book, fake_db, monkeypatch):
    monkeypatch.setattr(settings, "overdue_penalty_per_day", 2)
    issue = borrow(client, student, admin, book["id"])
    row = fake_db.rows("book_issues", id=issue["id"])[0]
    row["due_date"] = (datetime.now(timezone.utc) - timedelta(days=3)).isoformat()

    response = client.post(f"{API}/borrows/issues/{issue['id']}/returned", headers=admin["headers"])

    assert response.status_code == 200
    assert response.json()["days_overdue"] == 3
    penalties = fake_db.rows("coin_transactions", user_id=student["user_id"], type="penalty")
    assert [p["amount"] for p in penalties] == [-6]
    assert fake_db.rows("profiles", user_id=student["user_id"])[0]["coin_balance"] == 94


def test_overdue_filter(client, admin, student, book, fake_db):
    issue = borrow(client, student, admin, book["id"])
    assert client.get(f"{API}/borrows/issues", params={"state": "overdue"}, headers=admin["headers"]).json() == []

    fake_db.rows("book_issues", id=issue["id"])[0]["due_date"] = (
        datetime.now(timezone.utc) - timedelta(days=2)
    ).isoformat()
    overdue = client.get(f"{API}/borrows/issues", params={"state": "overdue"}, headers=admin["headers"]).json()

    assert [i["id"] for i in overdue] == [issue["id"]]
    assert overdue[0]["is_overdue"] is True
    assert overdue[0]["days_overdue"] == 2


def test_students_only_see_their_own_requests(client, admin, student, book):
    other = make_student(client, student_id="S3020")
    client.post(f"{API}/borrows/requests", json={"book_id": book["id"]}, headers=student["headers"])
    client.post(f"{API}/borrows/requests", json={"book_id": book["id"]}, headers=other["headers"])

    mine = client.get(f"{API}/borrows/requests", headers=student["headers"]).json()
    everyone = client.get(f"{API}/borrows/requests", headers=admin["headers"]).json()

    assert [r["user_id"] for r in mine] == [student["user_id"]]
    assert len(everyone) == 2


def test_students_cannot_approve(client, student, book):
    request = client.post(f"{API}/borrows/requests", json={"book_id": book["id"]}, headers=student["headers"]).json()
    response = client.post(
        f"{API}/borrows/requests/{request['id']}/decision",
        json={"action": "approve"},
        headers=student["headers"],
    )
    assert response.status_code == 403


def _single_copy_books(client, admin, titles):
    ids = []
    for title in titles:
        created = client.post(f"{API}/books", json={
            "title": title, "author": "Someone", "category": "Classics", "quantity": 1
        }, headers=admin["headers"]).json()
        ids.append(created["id"])
    return ids


def test_pending_requests_count_towards_the_limit(client, admin, student, monkeypatch):
    monkeypatch.setattr(settings, "max_active_issues", 2)
    ids = _single_copy_books(client, admin, ("Emma", "Ulysses", "Middlemarch"))

    first = client.post(f"{API}/borrows/requests", json={"book_id": ids[0]}, headers=student["headers"])
    second = client.post(f"{API}/borrows/requests", json={"book_id": ids[1]}, headers=student["headers"])
    third = client.post(f"{API}/borrows/requests", json={"book_id": ids[2]}, headers=student["headers"])

    assert first.status_code == second.status_code == 201
    assert third.status_code == 400
    assert "at most 2" in third.json()["detail"]


def test_approvals_cannot_exceed_the_limit(client, admin, student, fake_db, monkeypatch):
    ids = _single_copy_books(client, admin, ("Emma", "Ulysses", "Middlemarch"))
    requests = [
        client.post(f"{API}/borrows/requests", json={"book_id": book_id}, headers=student["headers"]).json()
        for book_id in ids
    ]
    monkeypatch.setattr(settings, "max_active_issues", 2)

    statuses = [
        client.post(
            f"{API}/borrows/requests/{request['id']}/decision",
            json={"action": "approve"},
            headers=admin["headers"],
        ).status_code
        for request in requests
    ]

    assert statuses == [200, 200, 400]
    assert len(fake_db.rows("book_issues", user_id=student["user_id"])) == 2
    assert fake_db.rows("books", id=ids[2])[0]["available_quantity"] == 1


def test_manual_issue_respects_the_limit(client, admin, student, monkeypatch):
    monkeypatch.setattr(settings, "max_active_issues", 1)
    ids = _single_copy_books(client, admin, ("Emma", "Ulysses"))
    borrow(client, student, admin, ids[0])

    response = client.post(
        f"{API}/borrows/issues",
        json={"student_id": student["student_id"], "book_id": ids[1]},
        headers=admin["headers"],
    )

    assert response.status_code == 400


def test_overdue_filter_pages_after_filtering(client, admin, student, book, fake_db):
    late = borrow(client, student, admin, book["id"])
    other = make_student(client, student_id="S3030")
    borrow(client, other, admin, book["id"])
    row = fake_db.rows("book_issues", id=late["id"])[0]
    row["issued_at"] = (datetime.now(timezone.utc) - timedelta(days=20)).isoformat()
    row["due_date"] = (datetime.now(timezone.utc) - timedelta(days=6)).isoformat()

    page = client.get(
        f"{API}/borrows/issues",
        params={"state": "overdue", "limit": 1, "offset": 0},
        headers=admin["headers"],
    ).json()

    assert [i["id"] for i in page] == [late["id"]]
