"""Follow edges between users.

The toggle removes the edge if it exists and creates it otherwise. The delete
and the insert are each a single statement and the ``(follow_from, follow_to)``
unique constraint rejects a second insert for the same pair, so concurrent
toggles cannot leave duplicate edges behind.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.errors import InternalError, InvalidArgument, NotFound
from backend.models.follow import Follow
from backend.models.user import User, parse_identity_key

logger = logging.getLogger(__name__)


@dataclass
class FollowToggle:
    is_following: bool
    edge: Follow | None = None


def _find_edge(db: Session, actor_id: str, target_id: str) -> Follow | None:
    return db.query(Follow).filter(
        Follow.follow_from == actor_id,
        Follow.follow_to == target_id,
    ).first()


def toggle_follow(db: Session, actor_id: str, target_id: str) -> FollowToggle:
    canonical_target = parse_identity_key(target_id)
    if canonical_target is None:
        raise InvalidArgument('Invalid user id')
    if canonical_target == actor_id:
        raise InvalidArgument('You cannot follow yourself')
    if db.get(User, canonical_target) is None:
        raise NotFound('User not found')

    try:
        removed = db.execute(
            delete(Follow).where(
                Follow.follow_from == actor_id,
                Follow.follow_to == canonical_target,
            )
        ).rowcount
        if removed:
            db.commit()
            logger.info('User %s unfollowed %s', actor_id, canonical_target)
            return FollowToggle(is_following=False)

        edge = Follow(follow_from=actor_id, follow_to=canonical_target)
        db.add(edge)
        db.commit()
    except IntegrityError:
        # Another request created the edge between our delete and insert.
        db.rollback()
        edge = _find_edge(db, actor_id, canonical_target)
        if edge is None:
            raise InternalError('Server error while following')
        return FollowToggle(is_following=True, edge=edge)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Follow toggle failed for %s -> %s', actor_id, canonical_target)
        raise InternalError('Server error while following') from exc

    db.refresh(edge)
    logger.info('User %s followed %s', actor_id, canonical_target)
    return FollowToggle(is_following=True, edge=edge)


def get_followers(db: Session, user_id: str) -> list[User | None]:
    """Users following ``user_id``; ``None`` marks an edge whose follower row is gone."""
    rows = (
        db.query(Follow.id, User)
        .select_from(Follow)
        .outerjoin(User, User.id == Follow.follow_from)
        .filter(Follow.follow_to == user_id)
        .all()
    )
    return [user for _, user in rows]


def get_following(db: Session, user_id: str) -> list[User | None]:
    """Users ``user_id`` follows; ``None`` marks an edge whose target row is gone."""
    rows = (
        db.query(Follow.id, User)
        .select_from(Follow)
        .outerjoin(User, User.id == Follow.follow_to)
        .filter(Follow.follow_from == user_id)
        .all()
    )
    return [user for _, user in rows]
