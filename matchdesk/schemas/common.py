"""Common response schemas shared across endpoints."""

from pydantic import BaseModel


class OkResponse(BaseModel):
    ok: bool


class ErrorResponse(BaseModel):
    detail: str
    code: str
