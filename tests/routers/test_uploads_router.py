"""Tests for the image upload endpoint."""

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def image(name: str = "photo.png", content_type: str = "image/png"):
    return ("images", (name, PNG, content_type))


def test_upload_stores_images_under_user_directory(client, container, alice):
    response = client.post(
        "/uploads",
        files=[image("one.png"), image("two.jpg", "image/jpeg")],
        data={"userId": alice.id},
        headers=alice.headers,
    )

    assert response.status_code == 200
    filenames = response.json()["filenames"]
    assert len(filenames) == 2
    assert all(name.startswith(f"{alice.id}/") for name in filenames)
    assert filenames[0].endswith("-one.png")

    root = container.upload_service.root
    for name in filenames:
        assert (root / name).read_bytes() == PNG


def test_upload_rejects_non_images(client, container, alice):
    response = client.post(
        "/uploads",
        files=[image(), image("notes.txt", "text/plain")],
        data={"userId": alice.id},
        headers=alice.headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Only images allowed!"
    assert not (container.upload_service.root / alice.id).exists()


def test_upload_rejects_more_than_ten_files(client, alice):
    response = client.post(
        "/uploads",
        files=[image(f"{i}.png") for i in range(11)],
        data={"userId": alice.id},
        headers=alice.headers,
    )

    assert response.status_code == 400
    assert response.json()["details"] == {"max_files": 10, "received": 11}


def test_upload_requires_files(client, alice):
    response = client.post(
        "/uploads", data={"userId": alice.id}, headers=alice.headers
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Picture(s) missing!"


def test_upload_requires_valid_user_id(client, alice):
    response = client.post(
        "/uploads",
        files=[image()],
        data={"userId": "../../etc"},
        headers=alice.headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid user ID!"


def test_upload_requires_bearer_token(client):
    response = client.post("/uploads", files=[image()], data={"userId": "x"})

    assert response.status_code == 401


def test_upload_two_files_with_same_name(client, container, alice):
    response = client.post(
        "/uploads",
        files=[
            ("images", ("photo.png", b"A", "image/png")),
            ("images", ("photo.png", b"B", "image/png")),
        ],
        data={"userId": alice.id},
        headers=alice.headers,
    )

    assert response.status_code == 200
    filenames = response.json()["filenames"]
    assert len(set(filenames)) == 2
    root = container.upload_service.root
    assert sorted((root / name).read_bytes() for name in filenames) == [b"A", b"B"]
