"""Session cookie helpers.

Both cookies are httpOnly; ``secure`` follows ``COOKIE_SECURE`` so local HTTP
development can opt out.
"""

from fastapi import Response

from backend.core import config

ACCESS_COOKIE_NAME = "accessToken"
REFRESH_COOKIE_NAME = "refreshToken"


def set_session_cookies(response: Response, *, access_token: str, refresh_token: str) -> None:
    response.set_cookie(
        key=ACCESS_COOKIE_NAME,
        value=access_token,
        max_age=config.ACCESS_TOKEN_EXPIRES_MINUTES * 60,
        httponly=True,
        secure=config.COOKIE_SECURE,
    )
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=config.REFRESH_TOKEN_EXPIRES_MINUTES * 60,
        httponly=True,
        secure=config.COOKIE_SECURE,
    )


def clear_session_cookies(response: Response) -> None:
    response.delete_cookie(key=ACCESS_COOKIE_NAME, httponly=True, secure=config.COOKIE_SECURE)
    response.delete_cookie(key=REFRESH_COOKIE_NAME, httponly=True, secure=config.COOKIE_SECURE)
