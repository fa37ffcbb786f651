"""Tests for the user endpoints."""

from bson import ObjectId


def test_register_is_public(client):
    response = client.post(
        "/users", json={"username": "alice", "password": "secret", "name": "Alice"}
    )

    assert response.status_code == 201
    assert response.json() == {"message": "New user alice created!"}


def test_register_duplicate_username_conflicts(client, register):
    register("alice")

    response = client.post("/users", json={"username": "alice", "password": "x"})

    assert response.status_code == 409
    assert response.json()["message"] == "Duplicate username!"


def test_register_requires_username_and_password(client):
    response = client.post("/users", json={"username": "alice"})

    assert response.status_code == 400
    assert response.json()["message"] == "All fields required!"


def test_list_users_hides_passwords(client, alice, bob):
    response = client.get("/users", headers=alice.headers)

    assert response.status_code == 200
    users = response.json()
    assert {user["username"] for user in users} == {"alice", "bob"}
    assert all("password" not in user for user in users)
    assert all(user["avatar"] == "/images/default_avatar.jpg" for user in users)


def test_list_users_requires_bearer_token(client, alice):
    assert client.get("/users").status_code == 401
    assert client.get("/users", headers={"Authorization": "Bearer junk"}).status_code == 403


def test_search_users(client, alice, bob):
    response = client.get("/users/^B", headers=alice.headers)

    assert response.status_code == 200
    assert [user["username"] for user in response.json()] == ["bob"]


def test_search_with_invalid_pattern(client, alice):
    response = client.get("/users/(", headers=alice.headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid search query!"


def test_update_user_fields(client, alice):
    response = client.patch(
        "/users",
        json={"id": alice.id, "bio": "Photographer", "username": "alice"},
        headers=alice.headers,
    )

    assert response.status_code == 200
    assert response.json() == {"message": "alice's data updated!"}
    found = client.get("/users/^alice$", headers=alice.headers).json()[0]
    assert found["bio"] == "Photographer"


def test_update_user_rename_and_password(client, alice):
    response = client.patch(
        "/users",
        json={"id": alice.id, "username": "alicia", "password": "changed"},
        headers=alice.headers,
    )

    assert response.json() == {"message": "alicia's data updated!"}
    old = client.post("/auth", json={"username": "alicia", "password": "secret"})
    new = client.post("/auth", json={"username": "alicia", "password": "changed"})
    assert old.status_code == 401
    assert new.status_code == 200


def test_update_user_duplicate_username(client, alice, bob):
    response = client.patch(
        "/users", json={"id": alice.id, "username": "bob"}, headers=alice.headers
    )

    assert response.status_code == 409


def test_update_unknown_user(client, alice):
    response = client.patch(
        "/users", json={"id": str(ObjectId()), "bio": "x"}, headers=alice.headers
    )

    assert response.status_code == 400
    assert response.json()["message"] == "User not found!"


def test_update_user_removes_post(client, alice):
    client.post("/posts", json={"images": ["a.jpg"]}, headers=alice.headers)
    post_id = client.get(f"/posts/{alice.id}", headers=alice.headers).json()[0]["_id"]

    response = client.patch(
        "/users",
        json={"id": alice.id, "postIdToRemove": post_id},
        headers=alice.headers,
    )

    assert response.status_code == 200
    assert client.get(f"/posts/{alice.id}", headers=alice.headers).json() == []
    user = client.get("/users/^alice$", headers=alice.headers).json()[0]
    assert user["posts"] == []


def test_follow_toggle_uses_refresh_cookie_actor(client, alice, bob):
    # bob logged in last, so the refresh cookie identifies bob
    response = client.patch(f"/users/{alice.id}")

    assert response.status_code == 200
    assert response.json() == {
        "message": "bob's following count and alice's followers' count updated!"
    }
    users = {u["username"]: u for u in client.get("/users", headers=bob.headers).json()}
    assert users["bob"]["following"] == [alice.id]
    assert users["alice"]["followers"] == [bob.id]

    client.patch(f"/users/{alice.id}")

    users = {u["username"]: u for u in client.get("/users", headers=bob.headers).json()}
    assert users["bob"]["following"] == []
    assert users["alice"]["followers"] == []


def test_follow_requires_refresh_cookie(client, alice):
    client.cookies.clear()

    response = client.patch(f"/users/{alice.id}")

    assert response.status_code == 401


def test_follow_unknown_user(client, alice):
    response = client.patch(f"/users/{ObjectId()}")

    assert response.status_code == 400
    assert response.json()["message"] == "User not found!"


def test_delete_user(client, alice, bob):
    response = client.request(
        "DELETE", "/users", json={"id": bob.id}, headers=alice.headers
    )

    assert response.status_code == 200
    assert response.json() == {"message": f"Username bob with ID {bob.id} deleted!"}
    assert [u["username"] for u in client.get("/users", headers=alice.headers).json()] == [
        "alice"
    ]


def test_delete_user_requires_id(client, alice):
    response = client.request("DELETE", "/users", json={}, headers=alice.headers)

    assert response.status_code == 400
    assert response.json()["message"] == "User ID required!"


def test_follow_with_invalid_refresh_cookie_is_forbidden(client, alice, bob):
    client.cookies.clear()
    client.cookies.set("jwt", "junk")

    response = client.patch(f"/users/{alice.id}")

    assert response.status_code == 403
    assert response.json()["message"] == "Forbidden!"
