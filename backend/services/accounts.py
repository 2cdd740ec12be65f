"""Registration, credentials and session tokens."""

import logging
from dataclasses import dataclass

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.jwt_handler import TokenIssuer
from backend.auth.passwords import hash_password, needs_rehash, verify_password
from backend.core.errors import Conflict, InternalError, InvalidArgument, MissingField, NotFound, Unauthorized
from backend.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class SessionTokens:
    access_token: str
    refresh_token: str


def normalize_identity(value: str | None) -> str:
    return (value or '').strip().lower()


def find_by_identity(db: Session, identity: str) -> User | None:
    """Look a user up by email or username."""
    normalized = normalize_identity(identity)
    if not normalized:
        return None
    return db.query(User).filter(
        or_(User.email == normalized, User.username == normalized)
    ).first()


def register_user(
    db: Session,
    username: str | None,
    name: str | None,
    email: str | None,
    password: str | None,
) -> User:
    username = normalize_identity(username)
    email = normalize_identity(email)
    name = (name or '').strip()
    if not username or not name or not email or not password:
        raise MissingField('All fields are required')

    existing = db.query(User).filter(
        or_(User.username == username, User.email == email)
    ).first()
    if existing:
        raise Conflict('User already exists')

    user = User(
        username=username,
        name=name,
        email=email,
        hashed_password=hash_password(password),
    )
    try:
        db.add(user)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict('User already exists') from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Registration failed for %s', username)
        raise InternalError('Something went wrong while registering the user') from exc

    db.refresh(user)
    logger.info('Registered user %s (%s)', user.username, user.id)
    return user


def authenticate(db: Session, identity: str | None, password: str | None) -> User:
    if not identity or not password:
        raise MissingField('All fields are required')

    user = find_by_identity(db, identity)
    if user is None:
        raise NotFound("User doesn't exist")
    if not verify_password(user.hashed_password, password):
        raise Unauthorized('Invalid user credentials')

    if needs_rehash(user.hashed_password):
        user.hashed_password = hash_password(password)
    return user


def issue_session_tokens(db: Session, user: User, issuer: TokenIssuer) -> SessionTokens:
    tokens = SessionTokens(
        access_token=issuer.create_access_token(user),
        refresh_token=issuer.create_refresh_token(user.id),
    )
    try:
        user.refresh_token = tokens.refresh_token
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Could not store refresh token for user %s', user.id)
        raise InternalError('Something went wrong while generating access and refresh token') from exc

    db.refresh(user)
    return tokens


def login(db: Session, identity: str | None, password: str | None, issuer: TokenIssuer) -> tuple[User, SessionTokens]:
    user = authenticate(db, identity, password)
    tokens = issue_session_tokens(db, user, issuer)
    logger.info('User %s logged in', user.id)
    return user, tokens


def logout_user(db: Session, user: User) -> None:
    try:
        user.refresh_token = None
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Logout failed for user %s', user.id)
        raise InternalError('Something went wrong while logging out') from exc
    logger.info('User %s logged out', user.id)


def refresh_session(db: Session, refresh_token: str | None, issuer: TokenIssuer) -> tuple[User, SessionTokens]:
    if not refresh_token:
        raise Unauthorized('Unauthorized request')

    payload = issuer.decode_refresh_token(refresh_token)
    user = db.get(User, payload['sub'])
    if user is None:
        raise Unauthorized('Invalid refresh token')
    if user.refresh_token != refresh_token:
        raise Unauthorized('Refresh token is expired or used')

    return user, issue_session_tokens(db, user, issuer)


def change_password(db: Session, user: User, old_password: str | None, new_password: str | None) -> None:
    if not old_password or not new_password:
        raise MissingField('All fields are required')
    if not verify_password(user.hashed_password, old_password):
        raise InvalidArgument('Invalid old password')

    try:
        user.hashed_password = hash_password(new_password)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Password change failed for user %s', user.id)
        raise InternalError('Something went wrong while changing the password') from exc
    logger.info('User %s changed password', user.id)
