def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_ready_checks_profiles_table(client, fake_db):
    assert client.get("/ready").json() == {"status": "ready"}

    fake_db.fail_on("profiles", "select")
    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json() == {"status": "unavailable"}
