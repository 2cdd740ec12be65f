from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_user
from backend.core.responses import CamelModel, api_response
from backend.database import ensure_follow_schema, get_db
from backend.models.user import User
from backend.services import relationships

router = APIRouter(tags=['follow'])


class FollowEdgeResponse(CamelModel):
    id: int
    follow_from: str
    follow_to: str
    created_at: datetime | None = None


class FollowToggleResponse(CamelModel):
    is_following: bool
    edge: FollowEdgeResponse | None = None


class FollowProfileResponse(CamelModel):
    username: str
    name: str
    avatar_url: str | None = None


def ensure_database_ready() -> None:
    try:
        ensure_follow_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL.',
        ) from exc


def to_profile_list(users: list[User | None]) -> list[FollowProfileResponse | None]:
    return [FollowProfileResponse.model_validate(user) if user is not None else None for user in users]


@router.get('/get-followers')
def get_followers(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    followers = to_profile_list(relationships.get_followers(db, current_user.id))
    return api_response(
        {'followerList': followers, 'length': len(followers)},
        'Followers fetched successfully',
    )


@router.get('/get-followings')
def get_followings(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    following = to_profile_list(relationships.get_following(db, current_user.id))
    return api_response(
        {'followingList': following, 'length': len(following)},
        'Followings fetched successfully',
    )


@router.post('/{user_id}')
def toggle_follow(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    result = relationships.toggle_follow(db, current_user.id, user_id)
    message = 'User follow toggled successfully - ' + ('follow' if result.is_following else 'Un follow')
    return api_response(
        FollowToggleResponse(
            is_following=result.is_following,
            edge=FollowEdgeResponse.model_validate(result.edge) if result.edge is not None else None,
        ),
        message,
    )
