from sqlalchemy.orm import Session

from backend.core.errors import MissingFilter
from backend.models.user import ALUMNI, User

SEARCH_COLUMNS = {
    'name': User.name,
    'college': User.college_name,
    'course': User.course_name,
    'company': User.company_name,
    'location': User.location,
    'expertise': User.area_of_expertise,
}


def escape_like(term: str) -> str:
    return term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def search_alumni(db: Session, filters: dict[str, str | None]) -> list[User]:
    """Alumni whose fields contain every supplied filter, ignoring case."""
    supplied = {
        key: value.strip()
        for key, value in filters.items()
        if key in SEARCH_COLUMNS and value and value.strip()
    }
    if not supplied:
        raise MissingFilter()

    query = db.query(User).filter(User.user_type == ALUMNI)
    for key, term in supplied.items():
        query = query.filter(SEARCH_COLUMNS[key].ilike(f'%{escape_like(term)}%', escape='\\'))

    return query.all()
