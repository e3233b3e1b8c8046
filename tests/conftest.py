import os
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# Keep the store from registering an atexit save for temporary files
os.environ["APP_ENV"] = "test"

from datetime import date, timedelta

import pytest

from carhire import create_app
from carhire.config import TestConfig
from carhire.models.store import Store
from carhire.services.identity import Identity, identity_for
from carhire.utils.constants import Role
from carhire.utils.security import generate_hash


@pytest.fixture(autouse=True)
def reset_store_between_tests():
    Store.reset_instance()
    yield
    Store.reset_instance()


@pytest.fixture
def store(tmp_path):
    """A fresh, empty store registered as the app-wide singleton."""
    st = Store.instance(tmp_path / "data.pkl")
    return st


@pytest.fixture
def app(store):
    class _Config(TestConfig):
        DATA_PATH = store.path

    app = create_app(_Config)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


def make_user(store, username="alice", password="Secret123", admin=False) -> Identity:
    """Insert a profile (and roles) straight into the store."""
    profile = store.insert("profiles", {
        "username": username,
        "full_name": username.title(),
        "phone": None,
        "password_hash": generate_hash(password),
    })
    store.insert("user_roles", {"user_id": profile["id"], "role": Role.USER})
    if admin:
        store.insert("user_roles", {"user_id": profile["id"], "role": Role.ADMIN})
    return identity_for(profile["id"], store)


def make_location(store, name="Auckland Airport", active=True) -> str:
    return store.insert("locations", {
        "name": name, "address": "1 Main Road", "city": "Auckland", "country": "New Zealand",
        "is_active": active,
    })["id"]


def make_vehicle(store, make="Toyota", model="Corolla", rate="50.00", available=True, **extra) -> str:
    row = {
        "make": make, "model": model, "year": 2023, "type": "sedan", "price_per_day": rate,
        "seats": 5, "transmission": "automatic", "fuel_type": "gasoline",
        "is_available": available, "location_id": None, "image_url": None, "description": None,
        "features": [],
    }
    row.update(extra)
    return store.insert("vehicles", row)["id"]


def future_range(offset=1, days=3) -> tuple[str, str]:
    start = date.today() + timedelta(days=offset)
    return start.isoformat(), (start + timedelta(days=days)).isoformat()


def login(client, username, password="Secret123"):
    return client.post("/auth/login", data={"username": username, "password": password})


@pytest.fixture
def user(store):
    return make_user(store, "alice")


@pytest.fixture
def admin(store):
    return make_user(store, "boss", admin=True)
