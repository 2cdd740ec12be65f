import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.errors import InternalError, InvalidArgument, MissingField, UploadFailed
from backend.models.user import ALUMNI, STUDENT, User
from backend.services.avatar_storage import AvatarUpload, LocalAvatarStorage

logger = logging.getLogger(__name__)

STUDENT_REQUIRED_FIELDS = (
    'name',
    'phone_no',
    'linked_in_url',
    'college_name',
    'course_name',
)
ALUMNI_REQUIRED_FIELDS = STUDENT_REQUIRED_FIELDS + (
    'company_name',
    'location',
    'area_of_expertise',
)
REQUIRED_FIELDS = {
    STUDENT: STUDENT_REQUIRED_FIELDS,
    ALUMNI: ALUMNI_REQUIRED_FIELDS,
}
LOWERCASE_FIELDS = {
    'college_name',
    'course_name',
    'company_name',
    'location',
    'area_of_expertise',
}


def normalize_profile_fields(role: str, fields: dict[str, str | None]) -> dict[str, str]:
    """Check the role's required fields and return the values to persist.

    Values are stripped and the categorical fields lowercased. Fields outside the
    role's set are dropped.
    """
    if role not in REQUIRED_FIELDS:
        raise InvalidArgument(f'Unknown user type: {role}')

    required = REQUIRED_FIELDS[role]
    cleaned = {name: (fields.get(name) or '').strip() for name in required}
    missing = [name for name in required if not cleaned[name]]
    if missing:
        raise MissingField(f"All fields are required. Missing: {', '.join(missing)}")

    for name in LOWERCASE_FIELDS.intersection(cleaned):
        cleaned[name] = cleaned[name].lower()
    cleaned['user_type'] = role
    return cleaned


def update_profile(
    db: Session,
    user: User,
    role: str,
    fields: dict[str, str | None],
    avatar: AvatarUpload | None,
    storage: LocalAvatarStorage,
) -> User:
    values = normalize_profile_fields(role, fields)

    if avatar is None or not avatar.content:
        raise MissingField('Avatar is required')

    asset = storage.upload(avatar, owner_id=user.id)
    if not asset.url:
        raise UploadFailed()

    previous_public_id = user.avatar_public_id

    try:
        for name, value in values.items():
            setattr(user, name, value)
        user.avatar_url = asset.url
        user.avatar_public_id = asset.public_id
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        try:
            storage.delete(asset.public_id)
        except OSError:
            logger.warning('Could not delete orphaned avatar %s', asset.public_id, exc_info=True)
        logger.exception('Profile update failed for user %s', user.id)
        raise InternalError('Something went wrong while updating the profile') from exc

    db.refresh(user)
    logger.info('User %s completed %s profile', user.id, role)

    if previous_public_id and previous_public_id != asset.public_id:
        try:
            storage.delete(previous_public_id)
        except OSError:
            logger.warning('Could not delete previous avatar %s', previous_public_id, exc_info=True)

    return user
