"""
Response envelopes shared by every router.

Successful calls return ``{"result": ..., "correlationId": ...}``; failures
return an ``application/problem+json`` body whose status mirrors the error.
"""

import uuid
from typing import Any, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from cineman.errors import Error

CORRELATION_HEADER = "X-Correlation-ID"


class CamelModel(BaseModel):
    """Base schema serialised with camelCase keys"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class Envelope(CamelModel):
    result: Optional[Any] = None
    correlation_id: str


class ProblemResponse(CamelModel):
    type: str
    status: int
    title: str
    detail: str
    instance: str
    correlation_id: str


def get_correlation_id(request: Request) -> str:
    return request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())


def success_response(request: Request, value: Any = None, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True, mode="json")
    elif isinstance(value, list):
        value = [v.model_dump(by_alias=True, mode="json") if isinstance(v, BaseModel) else v for v in value]
    envelope = Envelope(result=value, correlation_id=get_correlation_id(request))
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope.model_dump(by_alias=True)),
    )


def no_content() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def problem(request: Request, status_code: int, title: str, detail: str) -> JSONResponse:
    body = ProblemResponse(
        type=f"https://httpstatuses.com/{status_code}",
        status=status_code,
        title=title,
        detail=detail,
        instance=request.url.path,
        correlation_id=get_correlation_id(request),
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True),
        media_type="application/problem+json",
    )


def failure_response(request: Request, error: Error) -> JSONResponse:
    return problem(request, error.status_code, error.message, error.details)
