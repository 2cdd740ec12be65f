"""Uniform ``{statusCode, data, message}`` envelope and the handlers that use it."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class CamelModel(BaseModel):
    """Snake-case attributes in Python, camelCase keys on the wire."""

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


def _serialize(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, mode='json')
    if isinstance(data, list):
        return [_serialize(item) for item in data]
    if isinstance(data, dict):
        return {key: _serialize(value) for key, value in data.items()}
    return jsonable_encoder(data)


def api_response(data: Any, message: str, status_code: int = status.HTTP_200_OK) -> dict:
    return {'statusCode': status_code, 'data': _serialize(data), 'message': message}


def error_response(status_code: int, message: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={'statusCode': status_code, 'data': None, 'message': message},
    )


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    return error_response(exc.status_code, exc.detail)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = [
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
        for error in exc.errors()
    ]
    return error_response(status.HTTP_400_BAD_REQUEST, '; '.join(problems) or 'Invalid request')


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unhandled error on %s %s', request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, 'Internal server error')


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
