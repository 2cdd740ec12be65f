"""Error taxonomy raised by services and routes.

Every error is an ``HTTPException`` so FastAPI can turn it into a response at the
boundary; ``backend.core.responses`` renders it as an envelope.
"""

from fastapi import HTTPException, status


class ApiError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Something went wrong'

    def __init__(self, message: str | None = None) -> None:
        super().__init__(status_code=self.status_code, detail=message or self.default_message)


class InvalidArgument(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid argument'


class MissingField(InvalidArgument):
    default_message = 'All fields are required'


class MissingFilter(InvalidArgument):
    default_message = 'Please provide at least one search parameter'


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Unauthorized request'


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Conflict'


class InternalError(ApiError):
    default_message = 'Internal server error'


class UploadFailed(InternalError):
    default_message = 'Avatar not uploaded on cloud'
