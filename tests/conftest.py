import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from fastapi.testclient import TestClient

from fake_supabase import FakeSupabase
from library_app.main import app
from library_app.core.rate_limit import limiter
from library_app.database.supabase_client import get_supabase, get_admin_supabase
from library_app.modules.auth.service import clear_auth_cache

API = "/api/v1"


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def client(fake_db):
    limiter.enabled = False
    clear_auth_cache()
    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_admin_supabase] = lambda: fake_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    clear_auth_cache()


def sign_up(client, student_id="S1001", email=None, password="secret123", **extra):
    body = {
        "full_name": extra.pop("full_name", "Asha Rao"),
        "date_of_birth": extra.pop("date_of_birth", "2009-04-12"),
        "class_grade": extra.pop("class_grade", "9B"),
        "student_id": student_id,
        "email": email or f"{student_id.lower()}@school.org",
        "password": password,
    }
    return client.post(f"{API}/auth/sign-up", json=body)


def sign_in(client, student_id, password):
    return client.post(f"{API}/auth/sign-in", json={"student_id": student_id, "password": password})


def headers_for(token):
    return {"Authorization": f"Bearer {token}"}


def make_student(client, student_id="S1001", password="secret123", **extra):
    response = sign_up(client, student_id=student_id, password=password, **extra)
    assert response.status_code == 201, response.text
    login = sign_in(client, student_id, password)
    assert login.status_code == 200, login.text
    body = login.json()
    return {"user_id": body["user_id"], "headers": headers_for(body["access_token"]), "student_id": student_id}


@pytest.fixture
def student(client):
    return make_student(client)


@pytest.fixture
def admin(client):
    response = sign_in(client, "LibAdmin", "12qwaszx")
    assert response.status_code == 200, response.text
    body = response.json()
    return {"user_id": body["user_id"], "headers": headers_for(body["access_token"])}


@pytest.fixture
def book(client, admin):
    response = client.post(f"{API}/books", json={
        "title": "Dune",
        "author": "Frank Herbert",
        "category": "Science Fiction",
        "description": "Spice and sandworms",
        "quantity": 2,
    }, headers=admin["headers"])
    assert response.status_code == 201, response.text
    return response.json()


def borrow(client, student, admin, book_id):
    """Request a book as the student and approve it as admin; returns the issue"""
    request = client.post(f"{API}/borrows/requests", json={"book_id": book_id}, headers=student["headers"])
    assert request.status_code == 201, request.text
    decision = client.post(
        f"{API}/borrows/requests/{request.json()['id']}/decision",
        json={"action": "approve"},
        headers=admin["headers"],
    )
    assert decision.status_code == 200, decision.text
    issues = client.get(f"{API}/borrows/issues", headers=student["headers"]).json()
    return next(i for i in issues if i["book_id"] == book_id and i["status"] == "issued")
