import math
from typing import Any, List, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def get_request_id(request: Request) -> Optional[str]:
    request_id = getattr(request.state, "request_id", None)
    return request_id or request.headers.get("X-Request-ID")


def success_response(request: Request, data: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": True,
            "data": jsonable_encoder(data),
            "requestId": get_request_id(request),
        },
    )


def pagination_meta(total: int, limit: int, offset: int) -> dict:
    return {
        "page": offset // limit + 1,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit),
    }


def paginated_response(request: Request, items: List[Any], total: int, limit: int, offset: int) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "success": True,
            "data": jsonable_encoder(items),
            "meta": pagination_meta(total, limit, offset),
            "requestId": get_request_id(request),
        },
    )


def error_body(request: Request, code: str, message: str, details: Optional[dict] = None) -> dict:
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {
        "success": False,
        "error": error,
        "requestId": get_request_id(request),
    }
