import os
import tempfile

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')
os.environ.setdefault('COOKIE_SECURE', 'false')
os.environ.setdefault('AVATAR_UPLOAD_DIR', tempfile.mkdtemp(prefix='avatars-'))
os.environ.setdefault('MEDIA_BASE_URL', 'http://testserver/media')

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from backend.auth.jwt_handler import TokenIssuer  # noqa: E402
from backend.auth.passwords import hash_password  # noqa: E402
from backend.database import Base  # noqa: E402
from backend.models.follow import Follow  # noqa: E402
from backend.models.user import User  # noqa: E402
from backend.services.avatar_storage import LocalAvatarStorage  # noqa: E402


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=[User.__table__, Follow.__table__])
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=[Follow.__table__, User.__table__])
        engine.dispose()


@pytest.fixture
def db_session(db_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_user(db_session):
    def _make_user(username: str, password: str = 'secret-pass', **fields) -> User:
        user = User(
            username=username,
            email=fields.pop('email', f'{username}@example.edu'),
            name=fields.pop('name', username.title()),
            hashed_password=hash_password(password),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(
        access_secret='access-test-secret',
        refresh_secret='refresh-test-secret',
        access_expires_minutes=15,
        refresh_expires_minutes=60,
    )


@pytest.fixture
def avatar_storage(tmp_path) -> LocalAvatarStorage:
    return LocalAvatarStorage(root=tmp_path / 'avatars', base_url='http://media.test/avatars', max_bytes=1024)
