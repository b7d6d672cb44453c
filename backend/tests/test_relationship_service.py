import pytest

from quizhub.core.errors import (
    AlreadyFriendsError,
    DuplicateRequestError,
    NoSuchRequestError,
    NotFoundError,
    ReverseRequestExistsError,
    SelfReferenceError,
)
from quizhub.models.user import User
from quizhub.services import relationship_service as rs

from tests.conftest import make_user


def _reload(db, *users):
    db.expire_all()
    return [db.get(User, u.id) for u in users]


def test_send_request_writes_both_projections(db):
    a = make_user(db, "alice")
    b = make_user(db, "bob")

    rs.send_request(db, a.id, b.id)

    a, b = _reload(db, a, b)
    assert a.friend_requests_sent == [b.id]
    assert b.friend_requests_received == [a.id]
    assert a.friends == [] and b.friends == []


def test_duplicate_request_is_rejected_and_state_unchanged(db):
    a = make_user(db, "alice")
    b = make_user(db, "bob")
    rs.send_request(db, a.id, b.id)

    with pytest.raises(DuplicateRequestError):
        rs.send_request(db, a.id, b.id)

    a, b = _reload(db, a, b)
    assert a.friend_requests_sent == [b.id]
    assert b.friend_requests_received == [a.id]


def test_reverse_request_must_be_accepted_instead(db):
    a = make_user(db, "alice")
    b = make_user(db, "bob")
    rs.send_request(db, a.id, b.id)

    with pytest.raises(ReverseRequestExistsError) as exc:
        rs.send_request(db, b.id, a.id)
    assert exc.value.status_code == 400
    assert exc.value.detail["code"] == "REVERSE_REQUEST_EXISTS"

    a, b = _reload(db, a, b)
    assert b.friend_requests_sent == []
    assert a.friend_requests_received == []


def test_self_request_checked_before_lookup(db):
    with pytest.raises(SelfReferenceError):
        rs.send_request(db, 999, 999)


def test_request_to_missing_user(db):
    a = make_user(db, "alice")
    with pytest.raises(NotFoundError):
        rs.send_request(db, a.id, a.id + 100)

    (a,) = _reload(db, a)
    assert a.friend_requests_sent == []


def test_accept_makes_friendship_symmetric_and_clears_pending(db):
    a = make_user(db, "alice")
    b = make_user(db, "bob")
    rs.send_request(db, a.id, b.id)

    rs.accept_request(db, b.id, a.id)

    a, b = _reload(db, a, b)
    assert a.friends == [b.id]
    assert b.friends == [a.id]
    assert a.friend_requests_sent == [] and b.friend_requests_received == []

    with pytest.raises(AlreadyFriendsError):
        rs.send_request(db, a.id, b.id)
    with pytest.raises(AlreadyFriendsError):
        rs.send_request(db, b.id, a.id)


def test_accept_without_request(db):
    a = make_user(db, "alice")
    b = make_user(db, "bob")
    with pytest.raises(NoSuchRequestError):
        rs.accept_request(db, b.id, a.id)

    # the sender cannot accept their own request
    rs.send_request(db, a.id, b.id)
    with pytest.raises(NoSuchRequestError):
        rs.accept_request(db, a.id, b.id)


def test_cancel_removes_both_sides(db):
    a = make_user(db, "alice")
    b = make_user(db, "bob")
    rs.send_request(db, a.id, b.id)

    rs.cancel_request(db, a.id, b.id)

    a, b = _reload(db, a, b)
    assert a.friend_requests_sent == []
    assert b.friend_requests_received == []

    with pytest.raises(NoSuchRequestError):
        rs.cancel_request(db, a.id, b.id)


def test_remove_friend_is_idempotent(db):
    a = make_user(db, "alice")
    b = make_user(db, "bob")
    rs.send_request(db, a.id, b.id)
    rs.accept_request(db, b.id, a.id)

    assert rs.remove_friend(db, b.id, a.id) is True
    assert rs.remove_friend(db, b.id, a.id) is False

    a, b = _reload(db, a, b)
    assert a.friends == [] and b.friends == []


def test_remove_friend_unknown_user(db):
    a = make_user(db, "alice")
    with pytest.raises(NotFoundError):
        rs.remove_friend(db, a.id, 12345)


def test_listings(db):
    a = make_user(db, "alice")
    b = make_user(db, "bob")
    c = make_user(db, "carol")
    rs.send_request(db, a.id, b.id)
    rs.accept_request(db, b.id, a.id)
    rs.send_request(db, c.id, a.id)

    friends = rs.list_friends(db, a.id)
    assert [f.username for f in friends] == ["bob"]

    reqs = rs.list_requests(db, a.id)
    assert [r.id for r in reqs.received] == [c.id]
    assert reqs.sent == []

    with pytest.raises(NotFoundError):
        rs.list_friends(db, 4040)


def _befriend(db, x, y):
    rs.send_request(db, x.id, y.id)
    rs.accept_request(db, y.id, x.id)


def test_suggestions_rank_by_mutual_count_then_id(db):
    a = make_user(db, "a")
    b = make_user(db, "b")
    c = make_user(db, "c")
    d = make_user(db, "d")
    e = make_user(db, "e")
    f = make_user(db, "f")

    # A's friends: B, C
    _befriend(db, a, b)
    _befriend(db, a, c)
    # D is friends with B and C (2 mutual), E only with B (1 mutual)
    _befriend(db, d, b)
    _befriend(db, d, c)
    _befriend(db, e, b)

    out = rs.suggest_friends(db, a.id, limit=10)

    assert [(s.id, s.mutual_count) for s in out] == [(d.id, 2), (e.id, 1), (f.id, 0)]
    ids = {s.id for s in out}
    assert a.id not in ids and b.id not in ids and c.id not in ids


def test_suggestions_exclude_pending_and_respect_limit(db):
    a = make_user(db, "a")
    b = make_user(db, "b")
    c = make_user(db, "c")
    d = make_user(db, "d")

    rs.send_request(db, a.id, b.id)
    rs.send_request(db, c.id, a.id)

    out = rs.suggest_friends(db, a.id, limit=10)
    assert [s.id for s in out] == [d.id]

    assert rs.suggest_friends(db, a.id, limit=0) == []
    assert rs.suggest_friends(db, 9999, limit=5) == []


def test_suggestions_skip_inactive_users(db):
    a = make_user(db, "a")
    b = make_user(db, "b")
    c = make_user(db, "c")
    c.is_active = False
    db.commit()

    out = rs.suggest_friends(db, a.id, limit=10)
    assert [s.id for s in out] == [b.id]


def test_repair_restores_symmetry(db):
    a = make_user(db, "a")
    b = make_user(db, "b")
    c = make_user(db, "c")

    # one-sided rows written outside the service
    a.friends = [b.id, a.id, 777]
    c.friend_requests_sent = [a.id]
    db.commit()

    report = rs.repair_relationship_edges(db)

    a, b, c = _reload(db, a, b, c)
    assert a.friends == [b.id]
    assert b.friends == [a.id]
    assert a.friend_requests_received == [c.id]
    assert c.friend_requests_sent == [a.id]

    assert report.users_scanned == 3
    assert report.users_repaired == 2
    assert report.edges_removed == 2
    assert report.edges_added == 2

    again = rs.repair_relationship_edges(db)
    assert again.users_repaired == 0


def test_mutation_rereads_rows_already_loaded_in_the_session(db, session_factory):
    alice = make_user(db, "alice")
    make_user(db, "bob")
    carol = make_user(db, "carol")
    dave = make_user(db, "dave")

    s1 = session_factory()
    try:
        # the request's auth dependency loads the actor first
        actor = s1.get(User, alice.id)
        assert actor.friend_requests_sent == []

        s2 = session_factory()
        try:
            rs.send_request(s2, alice.id, carol.id)
        finally:
            s2.close()

        rs.send_request(s1, alice.id, dave.id)
    finally:
        s1.close()

    alice, carol, dave = _reload(db, alice, carol, dave)
    assert alice.friend_requests_sent == [carol.id, dave.id]
    assert carol.friend_requests_received == [alice.id]
    assert dave.friend_requests_received == [alice.id]
