"""Helpers that wrap payloads in the standard response envelope."""

import uuid
from typing import Any

from fastapi import Request

from newsdesk.schemas.common import ApiResponse, PaginationMeta


def trace_id_for(request: Request) -> str:
    trace_id = getattr(request.state, "trace_id", None)
    if not trace_id:
        trace_id = uuid.uuid4().hex
        request.state.trace_id = trace_id
    return trace_id


def envelope(
    request: Request,
    data: Any = None,
    message: str = "Success",
    pagination: PaginationMeta | None = None,
) -> ApiResponse:
    return ApiResponse(
        data=data,
        message=message,
        pagination=pagination,
        trace_id=trace_id_for(request),
    )
