import pytest

from carhire.exceptions import InvalidInputError
from carhire.services import identity as idp
from carhire.utils.constants import Role
from carhire.utils.security import check_hash, generate_hash


def test_password_hash_roundtrip():
    pw = "Secret123"
    h = generate_hash(pw)
    assert check_hash(pw, h)
    assert not check_hash("wrong", h)


def test_check_hash_without_stored_hash_is_false():
    assert not check_hash("Secret123", None)
    assert not check_hash("Secret123", "not-a-hash")


def test_first_registered_user_becomes_admin(store):
    first = idp.register("founder", "Secret123", store=store)
    second = idp.register("customer", "Secret123", store=store)
    assert first.is_admin
    assert Role.USER in second.roles and not second.is_admin


@pytest.mark.parametrize("username,password", [
    ("ab", "Secret123"),          # username too short
    ("alice", "secret"),          # no upper case or digit
    ("Secret123", "Secret123"),   # same as username
    ("", "Secret123"),
])
def test_register_rejects_bad_credentials(store, username, password):
    with pytest.raises(InvalidInputError):
        idp.register(username, password, store=store)
    assert store.count("profiles") == 0


def test_register_rejects_duplicate_username(store):
    idp.register("alice", "Secret123", store=store)
    with pytest.raises(InvalidInputError, match="already exists"):
        idp.register("alice", "Other456", store=store)


def test_authenticate(store):
    idp.register("alice", "Secret123", store=store)
    assert idp.authenticate("alice", "Secret123", store=store).username == "alice"
    assert idp.authenticate("alice", "wrong", store=store) is None
    assert idp.authenticate("nobody", "Secret123", store=store) is None
