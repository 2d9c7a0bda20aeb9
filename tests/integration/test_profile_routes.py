from medicare.utils.security import require_user


def test_profile_requires_authentication(app, client):
    app.dependency_overrides.pop(require_user, None)
    r = client.get("/api/v1/profile")
    assert r.status_code == 401
    assert r.json()["code"] == "FAIL"


def test_profile_get_and_update(client, profiles_store):
    profiles_store.add(id="test-user", email="test@example.com", full_name="Test User")

    r = client.get("/api/v1/profile")
    assert r.status_code == 200
    assert r.json()["data"]["email"] == "test@example.com"

    r = client.patch("/api/v1/profile", json={"phone": "+33 1 23 45 67 89", "address": "1 Main St", "role": "admin"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["phone"] == "+33 1 23 45 67 89"
    assert data["role"] == "user"


def test_profile_missing_and_invalid_body(client, profiles_store):
    r = client.get("/api/v1/profile")
    assert r.status_code == 404
    assert r.json() == {"code": "FAIL", "message": "Profile not found: test-user"}

    r = client.patch("/api/v1/profile", content=b"[]", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid JSON body"
