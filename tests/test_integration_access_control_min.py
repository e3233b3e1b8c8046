"""Admin pages are protected from anonymous users and customers."""

import pytest

from conftest import login

ADMIN_PAGES = [
    "/admin/vehicles", "/admin/locations", "/admin/discounts", "/admin/reservations",
    "/admin/users", "/admin/feedback", "/admin/violations", "/admin/analytics",
]


@pytest.mark.parametrize("path", ADMIN_PAGES)
def test_admin_pages_require_login(client, path):
    r = client.get(path)
    assert r.status_code == 302
    assert "/auth/login" in r.headers["Location"]


@pytest.mark.parametrize("path", ADMIN_PAGES)
def test_admin_pages_refuse_customers(client, user, path):
    login(client, "alice")
    r = client.get(path)
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/dashboard")


@pytest.mark.parametrize("path", ADMIN_PAGES)
def test_admin_pages_render_for_admins(client, admin, path):
    login(client, "boss")
    assert client.get(path).status_code == 200


def test_customer_cannot_post_admin_actions(client, store, user):
    from conftest import make_vehicle
    vid = make_vehicle(store)
    login(client, "alice")
    client.post(f"/admin/vehicles/{vid}/delete")
    assert store.get("vehicles", vid)
