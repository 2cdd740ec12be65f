from fastapi import APIRouter, Body, Cookie, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from backend.auth.cookies import REFRESH_COOKIE_NAME, clear_session_cookies, set_session_cookies
from backend.auth.dependencies import get_current_user
from backend.auth.jwt_handler import TokenIssuer, get_token_issuer
from backend.core.responses import CamelModel, api_response
from backend.database import get_db
from backend.models.user import ALUMNI, STUDENT, User
from backend.services import accounts, discovery, profiles
from backend.services.avatar_storage import AvatarUpload, LocalAvatarStorage, get_avatar_storage

router = APIRouter(tags=['users'])


class RegisterRequest(CamelModel):
    username: str | None = None
    name: str | None = None
    email: str | None = None
    password: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    username: str | None = None
    password: str | None = None


class ChangePasswordRequest(CamelModel):
    old_password: str | None = None
    new_password: str | None = None


class RefreshTokenRequest(CamelModel):
    refresh_token: str | None = None


class UserResponse(CamelModel):
    id: str
    username: str
    email: str
    name: str
    phone_no: str | None = None
    linked_in_url: str | None = None
    user_type: str | None = None
    college_name: str | None = None
    course_name: str | None = None
    company_name: str | None = None
    location: str | None = None
    area_of_expertise: str | None = None
    avatar_url: str | None = None


class DiscoveredUserResponse(CamelModel):
    id: str
    username: str
    email: str
    name: str
    phone_no: str | None = None
    linked_in_url: str | None = None
    college_name: str | None = None
    course_name: str | None = None
    company_name: str | None = None
    location: str | None = None
    area_of_expertise: str | None = None
    avatar_url: str | None = None


class SessionResponse(CamelModel):
    user: UserResponse
    access_token: str
    refresh_token: str


class SearchResponse(CamelModel):
    count: int
    results: list[DiscoveredUserResponse]


def to_user_response(user: User) -> UserResponse:
    return UserResponse.model_validate(user)


@router.post('/register', status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    user = accounts.register_user(
        db,
        username=data.username,
        name=data.name,
        email=data.email,
        password=data.password,
    )
    return api_response(
        to_user_response(user),
        'User has been registered successfully',
        status_code=status.HTTP_201_CREATED,
    )


@router.post('/login')
def login(
    data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    user, tokens = accounts.login(db, data.email or data.username, data.password, issuer)
    set_session_cookies(response, access_token=tokens.access_token, refresh_token=tokens.refresh_token)
    return api_response(
        SessionResponse(
            user=to_user_response(user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        ),
        'User logged in successfully',
    )


@router.post('/logout')
def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    accounts.logout_user(db, current_user)
    clear_session_cookies(response)
    return api_response({}, 'User logged out')


@router.post('/refresh-token')
def refresh_token(
    response: Response,
    data: RefreshTokenRequest | None = Body(default=None),
    refresh_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE_NAME),
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    incoming = refresh_cookie or (data.refresh_token if data else None)
    user, tokens = accounts.refresh_session(db, incoming, issuer)
    set_session_cookies(response, access_token=tokens.access_token, refresh_token=tokens.refresh_token)
    return api_response(
        SessionResponse(
            user=to_user_response(user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        ),
        'Access token refreshed',
    )


@router.post('/change-password')
def change_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    accounts.change_password(db, current_user, data.old_password, data.new_password)
    return api_response({}, 'Password changed successfully')


async def read_avatar(avatar: UploadFile | None) -> AvatarUpload | None:
    if avatar is None:
        return None
    content = await avatar.read()
    return AvatarUpload(filename=avatar.filename or '', content_type=avatar.content_type, content=content)


@router.post('/update-student')
async def update_student(
    name: str | None = Form(default=None),
    phone_no: str | None = Form(default=None, alias='phoneNo'),
    linked_in_url: str | None = Form(default=None, alias='linkedInUrl'),
    college_name: str | None = Form(default=None, alias='collegeName'),
    course_name: str | None = Form(default=None, alias='courseName'),
    avatar: UploadFile | None = File(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: LocalAvatarStorage = Depends(get_avatar_storage),
):
    fields = {
        'name': name,
        'phone_no': phone_no,
        'linked_in_url': linked_in_url,
        'college_name': college_name,
        'course_name': course_name,
    }
    user = profiles.update_profile(db, current_user, STUDENT, fields, await read_avatar(avatar), storage)
    return api_response(to_user_response(user), 'Student profile updated successfully')


@router.post('/update-alumni')
async def update_alumni(
    name: str | None = Form(default=None),
    phone_no: str | None = Form(default=None, alias='phoneNo'),
    linked_in_url: str | None = Form(default=None, alias='linkedInUrl'),
    college_name: str | None = Form(default=None, alias='collegeName'),
    course_name: str | None = Form(default=None, alias='courseName'),
    company_name: str | None = Form(default=None, alias='companyName'),
    location: str | None = Form(default=None),
    area_of_expertise: str | None = Form(default=None, alias='areaOfExpertise'),
    avatar: UploadFile | None = File(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: LocalAvatarStorage = Depends(get_avatar_storage),
):
    fields = {
        'name': name,
        'phone_no': phone_no,
        'linked_in_url': linked_in_url,
        'college_name': college_name,
        'course_name': course_name,
        'company_name': company_name,
        'location': location,
        'area_of_expertise': area_of_expertise,
    }
    user = profiles.update_profile(db, current_user, ALUMNI, fields, await read_avatar(avatar), storage)
    return api_response(to_user_response(user), 'Alumni profile updated successfully')


@router.get('/my-profile')
def my_profile(current_user: User = Depends(get_current_user)):
    return api_response(to_user_response(current_user), 'User found successfully')


@router.get('/search-and-discover', dependencies=[Depends(get_current_user)])
def search_and_discover(
    name: str | None = Query(default=None),
    college_name: str | None = Query(default=None, alias='collegeName'),
    course_name: str | None = Query(default=None, alias='courseName'),
    company_name: str | None = Query(default=None, alias='companyName'),
    location: str | None = Query(default=None),
    area_of_expertise: str | None = Query(default=None, alias='areaOfExpertise'),
    db: Session = Depends(get_db),
):
    results = discovery.search_alumni(
        db,
        {
            'name': name,
            'college': college_name,
            'course': course_name,
            'company': company_name,
            'location': location,
            'expertise': area_of_expertise,
        },
    )
    return api_response(
        SearchResponse(
            count=len(results),
            results=[DiscoveredUserResponse.model_validate(user) for user in results],
        ),
        'Search successful',
    )
