"""RFC 7807 Problem Details handlers for authentication errors.

Translates ``AuthenticationError`` raised by endpoint dependencies into a
401 ``application/problem+json`` response. The response also carries the
redirect suppression marker so a login-redirecting host leaves it alone.

Usage:
    from oauthgate.error_handlers import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from oauthgate.exceptions import AuthenticationError
from oauthgate.logging import get_logger
from oauthgate.middleware.redirect_suppression import SUPPRESS_REDIRECT_HEADER

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

logger = get_logger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details response model."""

    type: str = Field(..., description="URI reference identifying problem type")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., ge=400, le=599, description="HTTP status code")
    detail: str = Field(..., description="Human-readable explanation")
    instance: str | None = Field(default=None, description="Request path")
    error_code: str | None = Field(default=None, description="Machine-readable error code")


def _create_problem_response(
    problem: ProblemDetail,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(exclude_none=True),
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


async def authentication_error_handler(
    request: Request,
    exc: AuthenticationError,
) -> JSONResponse:
    """Translate AuthenticationError to 401 with the suppression marker."""
    logger.info("authentication_required", path=request.url.path, method=request.method)
    problem = ProblemDetail(
        type="/errors/not-authenticated",
        title="Unauthorized",
        status=401,
        detail=exc.message,
        instance=str(request.url.path),
        error_code=exc.error_code,
    )
    return _create_problem_response(problem, headers={SUPPRESS_REDIRECT_HEADER: "true"})


def register_exception_handlers(app: FastAPI) -> None:
    """Register the authentication error handler on a FastAPI app."""
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
