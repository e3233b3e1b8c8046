def test_public_pages_render(client, store):
    from conftest import make_vehicle
    vid = make_vehicle(store)
    assert client.get("/").status_code == 200
    assert client.get("/vehicles").status_code == 200
    assert client.get("/vehicles?type=sedan&price=0-50").status_code == 200
    assert client.get(f"/vehicles/{vid}").status_code == 200
    assert client.get("/auth/login").status_code == 200
    assert client.get("/auth/register").status_code == 200


def test_empty_filters_redirect_to_clean_url(client):
    r = client.get("/vehicles?search=&type=all")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/vehicles")


def test_unknown_vehicle_redirects_to_listing(client):
    r = client.get("/vehicles/missing")
    assert r.status_code == 302
    assert "/vehicles" in r.headers["Location"]
