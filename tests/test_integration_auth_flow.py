from conftest import login


def test_register_login_logout(client, store):
    r = client.post("/auth/register", data={"username": "carol", "password": "Secret123",
                                            "full_name": "Carol C"})
    assert r.status_code == 302 and "/auth/login" in r.headers["Location"]
    assert store.select("profiles", {"username": "carol"})

    r = login(client, "carol")
    assert r.status_code == 302 and r.headers["Location"].endswith("/dashboard")
    page = client.get("/dashboard")
    assert page.status_code == 200 and b"Carol C" in page.data

    client.get("/auth/logout")
    r = client.get("/dashboard")
    assert r.status_code == 302 and "/auth/login" in r.headers["Location"]


def test_bad_password_is_rejected(client, user):
    r = login(client, "alice", "nope")
    assert "/auth/login" in r.headers["Location"]
    with client.session_transaction() as sess:
        assert "uid" not in sess


def test_weak_registration_is_rejected(client, store):
    r = client.post("/auth/register", data={"username": "dave", "password": "short"})
    assert "/auth/register" in r.headers["Location"]
    assert store.count("profiles") == 0


def test_login_follows_local_next_only(client, user):
    r = client.post("/auth/login", data={"username": "alice", "password": "Secret123", "next": "/my-reservations"})
    assert r.headers["Location"].endswith("/my-reservations")
    client.get("/auth/logout")
    r = client.post("/auth/login", data={"username": "alice", "password": "Secret123",
                                         "next": "//evil.example.com"})
    assert r.headers["Location"].endswith("/dashboard")
