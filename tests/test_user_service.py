import pytest
from argon2 import PasswordHasher

from minisocial.auth.passwords import hash_password, needs_rehash, verify_password
from minisocial.errors import DuplicateRegistration, InvalidCredentials, UserNotFound
from minisocial.models import Privacy
from minisocial.services import user_service


def _register(db, **kw):
    data = {"name": "Alice", "username": "alice", "email": "a@x.com", "age": "30", "password": "p"}
    data.update(kw)
    return user_service.register_user(db, **data)


def test_register_stores_hashed_password_and_defaults(db):
    u = _register(db)
    assert u.password != "p"
    assert u.privacy is Privacy.PUBLIC
    assert u.posts == []
    assert u.age == 30
    assert db.users.count_documents({}) == 1


def test_duplicate_email_creates_nothing(db):
    _register(db)
    with pytest.raises(DuplicateRegistration, match="already registered"):
        _register(db, username="other")
    assert db.users.count_documents({}) == 1


def test_email_match_is_case_insensitive(db):
    _register(db, email="A@X.com")
    with pytest.raises(DuplicateRegistration):
        _register(db, username="other", email=" a@x.COM ")


def test_duplicate_username_rejected(db):
    _register(db)
    with pytest.raises(DuplicateRegistration, match="Username"):
        _register(db, email="b@x.com")


def test_invalid_age_rejected(db):
    with pytest.raises(ValueError):
        _register(db, age="old")
    assert db.users.count_documents({}) == 0


def test_authenticate(db):
    _register(db)
    assert user_service.authenticate(db, "a@x.com", "p").username == "alice"
    with pytest.raises(InvalidCredentials):
        user_service.authenticate(db, "a@x.com", "wrong")
    with pytest.raises(UserNotFound):
        user_service.authenticate(db, "nobody@x.com", "p")


def test_set_privacy(db):
    _register(db)
    u = user_service.set_privacy(db, "a@x.com", "private")
    assert u.privacy is Privacy.PRIVATE
    assert db.users.find_one({"email": "a@x.com"})["privacy"] == "private"
    with pytest.raises(ValueError):
        user_service.set_privacy(db, "a@x.com", "friends-only")


def test_lookups(db):
    u = _register(db)
    assert user_service.get_user_by_username(db, "alice").id == u.id
    assert user_service.get_user_by_id(db, str(u.id)).email == "a@x.com"
    assert user_service.get_user_by_id(db, "not-an-id") is None
    assert user_service.get_user_by_username(db, "") is None


@pytest.mark.parametrize("bad", ["a/b", "a?b", "a#b", "with space", "..", "ünï"])
def test_username_must_be_a_path_segment(db, bad):
    with pytest.raises(ValueError, match="Username may only contain"):
        _register(db, username=bad)
    assert db.users.count_documents({}) == 0


def test_username_allowed_characters(db):
    assert _register(db, username="al.ice_99-x").username == "al.ice_99-x"


@pytest.mark.parametrize("age", ["151", str(2**64)])
def test_age_upper_bound(db, age):
    with pytest.raises(ValueError, match="greater than 150"):
        _register(db, age=age)
    assert db.users.count_documents({}) == 0


def test_login_upgrades_weak_hash(db):
    _register(db)
    weak = hash_password("p", hasher=PasswordHasher(time_cost=1, memory_cost=8, parallelism=1))
    db.users.update_one({"email": "a@x.com"}, {"$set": {"password": weak}})

    u = user_service.authenticate(db, "a@x.com", "p")
    stored = db.users.find_one({"email": "a@x.com"})["password"]
    assert stored != weak
    assert u.password == stored
    assert verify_password(stored, "p")
    assert not needs_rehash(stored)
