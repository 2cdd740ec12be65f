import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.core.logging_config import setup_logging
from backend.core.responses import register_exception_handlers
from backend.database import Base, engine, ensure_follow_schema
from backend.models import follow, user  # noqa: F401
from backend.routes import follow_routes, user_routes

setup_logging()

app = FastAPI(title='Alumni Network API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

register_exception_handlers(app)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_follow_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL.')


@app.get('/')
def root():
    return {'status': 'Alumni Network API Running'}


app.include_router(user_routes.router, prefix='/users')
app.include_router(follow_routes.router, prefix='/follow')

media_root = Path(config.AVATAR_UPLOAD_DIR)
media_root.mkdir(parents=True, exist_ok=True)
app.mount(config.MEDIA_MOUNT_PATH, StaticFiles(directory=str(media_root), check_dir=True), name="media")
