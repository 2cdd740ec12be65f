from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from backend.auth.cookies import ACCESS_COOKIE_NAME
from backend.auth.jwt_handler import TokenIssuer, get_token_issuer
from backend.core.errors import Unauthorized
from backend.database import get_db
from backend.models.user import User

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    access_token: str | None = Cookie(default=None, alias=ACCESS_COOKIE_NAME),
    issuer: TokenIssuer = Depends(get_token_issuer),
    db: Session = Depends(get_db),
) -> User:
    # An explicit bearer header wins over a possibly stale cookie.
    token = credentials.credentials if credentials else access_token
    if not token:
        raise Unauthorized("Unauthorized request")

    payload = issuer.decode_access_token(token)

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Invalid token subject")

    user = db.get(User, user_id)
    if user is None:
        raise Unauthorized("Invalid access token")
    return user
