"""Friend graph: request / accept / cancel / remove, listings and suggestions.

Each relationship is one logical fact stored on both endpoint rows:

  pending A -> B   : B in A.friend_requests_sent  and  A in B.friend_requests_received
  friends A <-> B  : B in A.friends               and  A in B.friends

All writes go through ``_apply_edge`` / ``_undo_edge`` and every public mutation
loads both rows, changes both projections and commits once. If anything fails
the session is rolled back, so a half-written edge is never persisted.
Rows written some other way can be reconciled with ``repair_relationship_edges``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from quizhub.core.errors import (
    AlreadyFriendsError,
    AppError,
    DuplicateRequestError,
    NoSuchRequestError,
    NotFoundError,
    ReverseRequestExistsError,
    SelfReferenceError,
)
from quizhub.models.user import User
from quizhub.schemas.user import FriendRequestsOut, FriendSuggestionOut, RelationshipRepairOut, UserSummaryOut
from quizhub.services.user_service import user_summary_out

logger = logging.getLogger(__name__)

FRIENDS = "friends"
SENT = "friend_requests_sent"
RECEIVED = "friend_requests_received"

# (attribute on the first endpoint, attribute on the second endpoint)
PENDING_EDGE = (SENT, RECEIVED)
FRIEND_EDGE = (FRIENDS, FRIENDS)

GRAPH_ATTRS = (FRIENDS, SENT, RECEIVED)


def _ids(user: User, attr: str) -> Set[int]:
    return {int(x) for x in (getattr(user, attr, None) or [])}


def _set_ids(user: User, attr: str, ids: Iterable[int]) -> None:
    # Always assign a fresh list: JSON columns only flush on reassignment.
    setattr(user, attr, sorted({int(x) for x in ids}))


def _apply_edge(a: User, b: User, edge: Tuple[str, str]) -> None:
    a_attr, b_attr = edge
    _set_ids(a, a_attr, _ids(a, a_attr) | {int(b.id)})
    _set_ids(b, b_attr, _ids(b, b_attr) | {int(a.id)})


def _undo_edge(a: User, b: User, edge: Tuple[str, str]) -> None:
    a_attr, b_attr = edge
    _set_ids(a, a_attr, _ids(a, a_attr) - {int(b.id)})
    _set_ids(b, b_attr, _ids(b, b_attr) - {int(a.id)})


def _has(user: User, attr: str, other_id: int) -> bool:
    return int(other_id) in _ids(user, attr)


def _are_friends(a: User, b: User) -> bool:
    return _has(a, FRIENDS, b.id) or _has(b, FRIENDS, a.id)


def _load_pair(db: Session, a_id: int, b_id: int) -> Tuple[Optional[User], Optional[User]]:
    """Load (and row-lock, where supported) both endpoints in ascending id order."""
    ids = sorted({int(a_id), int(b_id)})
    rows = (
        db.query(User)
        .filter(User.id.in_(ids))
        .order_by(User.id.asc())
        .with_for_update()
        .populate_existing()
        .all()
    )
    by_id = {int(r.id): r for r in rows}
    return by_id.get(int(a_id)), by_id.get(int(b_id))


def _require_pair(db: Session, a_id: int, b_id: int) -> Tuple[User, User]:
    a, b = _load_pair(db, a_id, b_id)
    if a is None or b is None:
        raise NotFoundError("User not found")
    return a, b


@contextmanager
def _mutation(db: Session, action: str) -> Iterator[None]:
    try:
        yield
        db.commit()
    except AppError as exc:
        db.rollback()
        logger.warning("%s rejected: %s", action, exc.code)
        raise
    except Exception:
        db.rollback()
        raise


def send_request(db: Session, from_id: int, to_id: int) -> None:
    if int(from_id) == int(to_id):
        raise SelfReferenceError()

    with _mutation(db, "friend request"):
        sender, target = _require_pair(db, from_id, to_id)

        if _are_friends(sender, target):
            raise AlreadyFriendsError()
        if _has(sender, SENT, target.id):
            raise DuplicateRequestError()
        if _has(sender, RECEIVED, target.id):
            raise ReverseRequestExistsError("User has sent you a request; accept it instead")

        _apply_edge(sender, target, PENDING_EDGE)

    logger.info("friend request %s -> %s", from_id, to_id)


def accept_request(db: Session, accepter_id: int, requester_id: int) -> None:
    with _mutation(db, "accept request"):
        accepter, requester = _require_pair(db, accepter_id, requester_id)

        if not _has(accepter, RECEIVED, requester.id):
            raise NoSuchRequestError("No friend request from this user")

        _undo_edge(requester, accepter, PENDING_EDGE)
        # Set union: re-adding an existing friend is a no-op
        _apply_edge(accepter, requester, FRIEND_EDGE)

    logger.info("friend request %s -> %s accepted", requester_id, accepter_id)


def cancel_request(db: Session, canceler_id: int, target_id: int) -> None:
    with _mutation(db, "cancel request"):
        canceler, target = _require_pair(db, canceler_id, target_id)

        if not _has(canceler, SENT, target.id):
            raise NoSuchRequestError("No sent friend request to this user")

        _undo_edge(canceler, target, PENDING_EDGE)

    logger.info("friend request %s -> %s canceled", canceler_id, target_id)


def remove_friend(db: Session, user_id: int, friend_id: int) -> bool:
    """Remove the friendship if present. Returns False when there was nothing to remove."""
    with _mutation(db, "remove friend"):
        user, friend = _require_pair(db, user_id, friend_id)
        if not _are_friends(user, friend):
            return False
        _undo_edge(user, friend, FRIEND_EDGE)

    logger.info("friendship %s <-> %s removed", user_id, friend_id)
    return True


def _summaries(db: Session, ids: Iterable[int]) -> List[UserSummaryOut]:
    wanted = sorted({int(x) for x in ids})
    if not wanted:
        return []
    rows = db.query(User).filter(User.id.in_(wanted)).order_by(User.id.asc()).all()
    return [user_summary_out(u) for u in rows]


def list_friends(db: Session, user_id: int) -> List[UserSummaryOut]:
    user = db.query(User).filter(User.id == int(user_id)).first()
    if not user:
        raise NotFoundError("User not found")
    return _summaries(db, _ids(user, FRIENDS))


def list_requests(db: Session, user_id: int) -> FriendRequestsOut:
    user = db.query(User).filter(User.id == int(user_id)).first()
    if not user:
        raise NotFoundError("User not found")
    return FriendRequestsOut(
        received=_summaries(db, _ids(user, RECEIVED)),
        sent=_summaries(db, _ids(user, SENT)),
    )


def suggest_friends(db: Session, user_id: int, limit: int = 10) -> List[FriendSuggestionOut]:
    """Rank non-connected users by mutual-friend count (desc), ties by id.

    Only friends-of-friends can have a non-zero count, so those are scored
    against the user's friend set; the rest of the list is filled with
    zero-mutual users in id order.
    """
    limit = int(limit)
    if limit <= 0:
        return []

    user = db.query(User).filter(User.id == int(user_id)).first()
    if not user:
        return []

    mine = _ids(user, FRIENDS)
    exclude = {int(user.id)} | mine | _ids(user, SENT) | _ids(user, RECEIVED)

    fof: Set[int] = set()
    if mine:
        for f in db.query(User).filter(User.id.in_(sorted(mine))).all():
            fof |= _ids(f, FRIENDS)
    fof -= exclude

    scored: List[Tuple[int, User]] = []
    if fof:
        candidates = (
            db.query(User)
            .filter(User.id.in_(sorted(fof)), User.is_active.is_(True))
            .all()
        )
        for c in candidates:
            mutual = len(mine & _ids(c, FRIENDS))
            if mutual > 0:
                scored.append((mutual, c))
    scored.sort(key=lambda pair: (-pair[0], int(pair[1].id)))
    ranked = scored[:limit]

    remaining = limit - len(ranked)
    if remaining > 0:
        taken = exclude | {int(c.id) for _, c in ranked}
        fillers = (
            db.query(User)
            .filter(User.id.notin_(sorted(taken)), User.is_active.is_(True))
            .order_by(User.id.asc())
            .limit(remaining)
            .all()
        )
        ranked.extend((0, c) for c in fillers)

    return [
        FriendSuggestionOut(id=int(c.id), full_name=str(c.full_name), username=str(c.username), mutual_count=int(n))
        for n, c in ranked
    ]


def repair_relationship_edges(db: Session) -> RelationshipRepairOut:
    """Reconcile friend-graph projections across all users.

    - drop self references and ids of users that no longer exist
    - make ``friends`` symmetric
    - drop pending requests between users who are already friends
    - restore the missing half of a one-sided pending request
    """
    users = db.query(User).order_by(User.id.asc()).with_for_update().populate_existing().all()
    valid = {int(u.id) for u in users}

    before: Dict[int, Dict[str, Set[int]]] = {int(u.id): {a: _ids(u, a) for a in GRAPH_ATTRS} for u in users}
    state: Dict[int, Dict[str, Set[int]]] = {
        uid: {a: {x for x in ids if x in valid and x != uid} for a, ids in attrs.items()}
        for uid, attrs in before.items()
    }

    for uid, attrs in state.items():
        for other in list(attrs[FRIENDS]):
            state[other][FRIENDS].add(uid)

    for uid, attrs in state.items():
        attrs[SENT] -= attrs[FRIENDS]
        attrs[RECEIVED] -= attrs[FRIENDS]

    for uid, attrs in state.items():
        for other in list(attrs[SENT]):
            state[other][RECEIVED].add(uid)
        for other in list(attrs[RECEIVED]):
            state[other][SENT].add(uid)

    report = RelationshipRepairOut(users_scanned=len(users))
    with _mutation(db, "relationship repair"):
        for u in users:
            uid = int(u.id)
            changed = False
            for attr in GRAPH_ATTRS:
                old, new = before[uid][attr], state[uid][attr]
                if old == new:
                    continue
                report.edges_added += len(new - old)
                report.edges_removed += len(old - new)
                _set_ids(u, attr, new)
                changed = True
            if changed:
                report.users_repaired += 1

    logger.info(
        "relationship repair: scanned=%s repaired=%s added=%s removed=%s",
        report.users_scanned,
        report.users_repaired,
        report.edges_added,
        report.edges_removed,
    )
    return report
