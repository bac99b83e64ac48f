import pytest

from minisocial.errors import NotPostOwner, PostNotFound, PostNotVisible
from minisocial.services import post_service, user_service


@pytest.fixture()
def alice(db):
    return user_service.register_user(
        db, name="Alice", username="alice", email="a@x.com", age="30", password="p"
    )


@pytest.fixture()
def bob(db):
    return user_service.register_user(
        db, name="Bob", username="bob", email="b@x.com", age="", password="p"
    )


def test_create_post_appends_to_owner(db, alice):
    first = post_service.create_post(db, "a@x.com", "hello")
    second = post_service.create_post(db, "a@x.com", "again")
    assert first.user == alice.id
    u = user_service.get_user_by_email(db, "a@x.com")
    assert u.posts == [first.id, second.id]
    assert [p.content for p in user_service.list_user_posts(db, u)] == ["hello", "again"]


def test_create_post_rejects_empty(db, alice):
    with pytest.raises(ValueError):
        post_service.create_post(db, "a@x.com", "   ")
    assert db.posts.count_documents({}) == 0


def test_get_post_unknown_or_malformed(db):
    with pytest.raises(PostNotFound):
        post_service.get_post(db, "not-an-id")
    with pytest.raises(PostNotFound):
        post_service.get_post(db, "0123456789abcdef01234567")


def test_update_by_owner(db, alice):
    p = post_service.create_post(db, "a@x.com", "hello")
    updated = post_service.update_post(db, p.id, "edited", str(alice.id))
    assert updated.content == "edited"


def test_update_by_other_user_refused(db, alice, bob):
    p = post_service.create_post(db, "a@x.com", "hello")
    with pytest.raises(NotPostOwner):
        post_service.update_post(db, p.id, "hijack", str(bob.id))
    assert post_service.get_post(db, p.id).content == "hello"


def test_update_unguarded_when_ownership_not_enforced(db, alice, bob):
    p = post_service.create_post(db, "a@x.com", "hello")
    updated = post_service.update_post(db, p.id, "overwritten", str(bob.id), enforce_owner=False)
    assert updated.content == "overwritten"


def test_like_twice_toggles_back(db, alice, bob):
    p = post_service.create_post(db, "a@x.com", "hello")
    assert post_service.toggle_like(db, p.id, str(bob.id)) is True
    assert post_service.get_post(db, p.id).likes == [bob.id]
    assert post_service.toggle_like(db, p.id, str(bob.id)) is False
    assert post_service.get_post(db, p.id).likes == []


def test_likes_unique_per_user(db, alice, bob):
    p = post_service.create_post(db, "a@x.com", "hello")
    post_service.toggle_like(db, p.id, str(bob.id))
    post_service.toggle_like(db, p.id, str(alice.id))
    post = post_service.get_post(db, p.id)
    assert post.like_count == 2
    assert post.is_liked_by(str(bob.id))


def test_like_private_post_refused_for_non_owner(db, alice, bob):
    p = post_service.create_post(db, "a@x.com", "hello")
    user_service.set_privacy(db, "a@x.com", "private")
    with pytest.raises(PostNotVisible):
        post_service.toggle_like(db, p.id, str(bob.id))
    assert post_service.toggle_like(db, p.id, str(alice.id)) is True
