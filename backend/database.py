from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config


def _connect_args(url: str | None) -> dict:
    if url and url.startswith('sqlite'):
        return {'check_same_thread': False}
    return {}


engine = create_engine(config.DATABASE_URL, connect_args=_connect_args(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

FOLLOW_PAIR_INDEX = 'uq_follows_pair'

_schema_lock = Lock()
_follow_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_follow_schema() -> None:
    """Backfill the ordered-pair unique index on follow tables created without it."""
    global _follow_schema_checked

    if _follow_schema_checked:
        return

    with _schema_lock:
        if _follow_schema_checked:
            return

        inspector = inspect(engine)

        if 'follows' not in inspector.get_table_names():
            _follow_schema_checked = True
            return

        unique_column_sets = [
            tuple(constraint['column_names']) for constraint in inspector.get_unique_constraints('follows')
        ]
        unique_column_sets.extend(
            tuple(index['column_names']) for index in inspector.get_indexes('follows') if index.get('unique')
        )

        if ('follow_from', 'follow_to') not in unique_column_sets:
            with engine.begin() as connection:
                connection.execute(
                    text(
                        f'CREATE UNIQUE INDEX IF NOT EXISTS {FOLLOW_PAIR_INDEX} '
                        'ON follows(follow_from, follow_to)'
                    )
                )

        _follow_schema_checked = True
