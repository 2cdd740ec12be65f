"""Avatar asset storage.

Assets are written under ``AVATAR_UPLOAD_DIR`` and served from
``MEDIA_BASE_URL``; the public id is the path relative to the upload root, which
is what ``delete`` takes back.
"""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from backend.core import config
from backend.core.errors import InvalidArgument, UploadFailed

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    'image/jpeg': '.jpg',
    'image/png': '.png',
    'image/webp': '.webp',
    'image/gif': '.gif',
}


@dataclass
class AvatarUpload:
    filename: str
    content_type: str | None
    content: bytes


@dataclass
class AvatarAsset:
    url: str | None
    public_id: str | None


class LocalAvatarStorage:
    def __init__(self, root: str | Path, base_url: str, max_bytes: int) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip('/')
        self.max_bytes = max_bytes

    def upload(self, avatar: AvatarUpload, owner_id: str) -> AvatarAsset:
        content_type = (avatar.content_type or '').lower()
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise InvalidArgument(
                f"Invalid avatar type. Allowed: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}"
            )
        if not avatar.content:
            raise InvalidArgument('Avatar file is empty')
        if len(avatar.content) > self.max_bytes:
            raise InvalidArgument(f'Avatar too large. Maximum size: {self.max_bytes // 1024 // 1024}MB')

        public_id = f'{owner_id}/{uuid.uuid4().hex}{ALLOWED_CONTENT_TYPES[content_type]}'
        destination = self.root / public_id
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(avatar.content)
        except OSError as exc:
            logger.exception('Failed to store avatar for user %s', owner_id)
            raise UploadFailed() from exc

        return AvatarAsset(url=f'{self.base_url}/{public_id}', public_id=public_id)

    def delete(self, public_id: str) -> bool:
        target = (self.root / public_id).resolve()
        if self.root.resolve() not in target.parents:
            logger.warning('Refusing to delete avatar outside upload root: %s', public_id)
            return False
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        return True


avatar_storage = LocalAvatarStorage(
    root=config.AVATAR_UPLOAD_DIR,
    base_url=config.MEDIA_BASE_URL,
    max_bytes=config.MAX_AVATAR_BYTES,
)


def get_avatar_storage() -> LocalAvatarStorage:
    return avatar_storage
