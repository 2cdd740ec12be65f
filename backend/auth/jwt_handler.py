from datetime import datetime, timedelta, timezone

import jwt

from backend.core import config
from backend.core.errors import Unauthorized

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenIssuer:
    """Signs and verifies the access/refresh token pair for a user session."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expires_minutes: int,
        refresh_expires_minutes: int,
        algorithm: str = "HS256",
    ) -> None:
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_expires = timedelta(minutes=access_expires_minutes)
        self.refresh_expires = timedelta(minutes=refresh_expires_minutes)
        self.algorithm = algorithm

    def create_access_token(self, user) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user.id,
            "email": user.email,
            "username": user.username,
            "name": user.name,
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + self.access_expires,
        }
        return jwt.encode(payload, self.access_secret, algorithm=self.algorithm)

    def create_refresh_token(self, user_id: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "type": REFRESH_TOKEN_TYPE,
            "iat": now,
            "exp": now + self.refresh_expires,
        }
        return jwt.encode(payload, self.refresh_secret, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> dict:
        return self._decode(token, self.access_secret, ACCESS_TOKEN_TYPE)

    def decode_refresh_token(self, token: str) -> dict:
        return self._decode(token, self.refresh_secret, REFRESH_TOKEN_TYPE)

    def _decode(self, token: str, secret: str, expected_type: str) -> dict:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise Unauthorized(f"{expected_type.capitalize()} token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise Unauthorized(f"Invalid {expected_type} token") from exc

        if payload.get("type") != expected_type:
            raise Unauthorized(f"Invalid {expected_type} token")
        return payload


def build_token_issuer() -> TokenIssuer:
    return TokenIssuer(
        access_secret=config.ACCESS_TOKEN_SECRET,
        refresh_secret=config.REFRESH_TOKEN_SECRET,
        access_expires_minutes=config.ACCESS_TOKEN_EXPIRES_MINUTES,
        refresh_expires_minutes=config.REFRESH_TOKEN_EXPIRES_MINUTES,
        algorithm=config.JWT_ALGORITHM,
    )


token_issuer = build_token_issuer()


def get_token_issuer() -> TokenIssuer:
    return token_issuer
