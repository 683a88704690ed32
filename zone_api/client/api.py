import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class ApiError:
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


@dataclass
class ApiResult:
    success: bool
    data: Any = None
    error: Optional[ApiError] = None
    meta: Optional[Dict[str, Any]] = None
    status_code: Optional[int] = None
    request_id: Optional[str] = None

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None


class ApiClient:
    """
    Cliente HTTP del API de zonas. Nunca lanza por errores de red ni HTTP:
    todo vuelve como ApiResult para que los stores decidan.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 10.0
    ):
        self.base_url = base_url
        self.token = token
        self._client = httpx.Client(base_url=base_url, transport=transport, timeout=timeout)

    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(self, method: str, path: str, params: Dict[str, Any] = None, json: Any = None) -> ApiResult:
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            response = self._client.request(method, path, params=params, json=json, headers=self._headers())
        except httpx.HTTPError as e:
            logger.warning(f"❌ {method} {path} falló: {e}")
            return ApiResult(success=False, error=ApiError("NETWORK_ERROR", str(e) or "Network error"))

        try:
            body = response.json()
        except ValueError:
            return ApiResult(
                success=False,
                error=ApiError(f"HTTP_{response.status_code}", response.text or response.reason_phrase),
                status_code=response.status_code,
            )

        if isinstance(body, dict) and body.get("success"):
            return ApiResult(
                success=True,
                data=body.get("data"),
                meta=body.get("meta"),
                status_code=response.status_code,
                request_id=body.get("requestId"),
            )

        error = body.get("error") if isinstance(body, dict) else None
        # Algunos proxies devuelven {"error": "texto"} en vez del objeto del API
        if isinstance(error, str):
            error = {"message": error}
        elif not isinstance(error, dict):
            error = {}
        return ApiResult(
            success=False,
            error=ApiError(
                error.get("code", f"HTTP_{response.status_code}"),
                error.get("message", "Request failed"),
                error.get("details"),
            ),
            status_code=response.status_code,
            request_id=body.get("requestId") if isinstance(body, dict) else None,
        )

    def get(self, path: str, params: Dict[str, Any] = None) -> ApiResult:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> ApiResult:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> ApiResult:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> ApiResult:
        return self.request("DELETE", path)

    def close(self) -> None:
        self._client.close()
