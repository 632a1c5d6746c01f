from tests.conftest import API, login, signup


def test_list_users_exposes_only_id_and_name(client, auth_headers):
    signup(client, name="Bob", email="bob@example.com")

    response = client.get(f"{API}/users", headers=auth_headers)
    assert response.status_code == 200
    users = response.json()["data"]
    assert [u["name"] for u in users] == ["Alice", "Bob"]
    assert set(users[0]) == {"id", "name"}


def test_profile_update_is_reflected_in_session(client, auth_headers):
    # 先读取一次，让会话进入缓存
    assert client.get(f"{API}/auth/session", headers=auth_headers).json()["data"]["name"] == "Alice"

    response = client.put(f"{API}/users/me", json={"name": "Alicia"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Alicia"

    session = client.get(f"{API}/auth/session", headers=auth_headers).json()["data"]
    assert session["name"] == "Alicia"


def test_profile_update_rejects_taken_name(client, auth_headers):
    signup(client, name="Bob", email="bob@example.com")

    response = client.put(f"{API}/users/me", json={"name": "Bob"}, headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["message"] == "Username is already taken. Please choose another."


def test_profile_update_validates_input(client, auth_headers):
    assert client.put(f"{API}/users/me", json={"name": "   "}, headers=auth_headers).status_code == 422
    assert client.put(f"{API}/users/me", json={"email": "not-an-email"}, headers=auth_headers).status_code == 422
    assert client.put(f"{API}/users/me", json={}, headers=auth_headers).status_code == 422


def test_change_password(client, auth_headers):
    wrong = client.put(
        f"{API}/users/me/password",
        json={"old_password": "bad-password", "new_password": "newsecret"},
        headers=auth_headers,
    )
    assert wrong.status_code == 400
    assert wrong.json()["message"] == "Incorrect old password"

    mismatch = client.put(
        f"{API}/users/me/password",
        json={"old_password": "secret123", "new_password": "newsecret", "confirm_password": "other"},
        headers=auth_headers,
    )
    assert mismatch.status_code == 422

    ok = client.put(
        f"{API}/users/me/password",
        json={"old_password": "secret123", "new_password": "newsecret", "confirm_password": "newsecret"},
        headers=auth_headers,
    )
    assert ok.status_code == 200
    assert login(client, password="newsecret").status_code == 200
    assert login(client, password="secret123").status_code == 401


def test_profile_picture(client, auth_headers):
    bad = client.put(f"{API}/users/me/picture", json={"image_url": "not a url"}, headers=auth_headers)
    assert bad.status_code == 422

    url = "https://example.com/me.png"
    response = client.put(f"{API}/users/me/picture", json={"image_url": url}, headers=auth_headers)
    assert response.status_code == 200
    assert client.get(f"{API}/auth/session", headers=auth_headers).json()["data"]["image"] == url
    assert client.get(f"{API}/users/me", headers=auth_headers).json()["data"]["image"] == url
