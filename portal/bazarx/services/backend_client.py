"""
Upstream BazarXpress REST API client
"""
import logging
from typing import Any, Dict, Optional

import httpx

from bazarx.config import settings

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Non-2xx response or transport failure from the upstream API"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BackendAuthError(BackendError):
    """Upstream rejected the bearer token (401)"""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


def _error_message(response: httpx.Response, fallback: Optional[str] = None) -> str:
    fallback = fallback or f"HTTP {response.status_code}"
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict):
        return data.get("error") or data.get("message") or fallback
    return fallback


class BackendClient:
    """Thin JSON client for the upstream API.

    One instance per request; ``token`` is the upstream bearer token of the
    session, or None for the public endpoints.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.token = token
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self.transport = transport
        self.timeout = timeout if timeout is not None else settings.UPSTREAM_TIMEOUT_SECONDS

    def with_token(self, token: Optional[str]) -> "BackendClient":
        return BackendClient(token=token, base_url=self.base_url, transport=self.transport, timeout=self.timeout)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Issue one request against the upstream API

        Raises:
            BackendAuthError: on 401
            BackendError: on any other non-2xx status or transport failure
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.request(method, url, json=json, params=params, headers=self._headers())
        except httpx.TimeoutException:
            logger.warning("Upstream %s %s timed out", method, path)
            raise BackendError("The server took too long to respond")
        except httpx.HTTPError as exc:
            logger.warning("Upstream %s %s failed: %s", method, path, exc)
            raise BackendError("Could not reach the server")

        if response.status_code == 401:
            raise BackendAuthError(_error_message(response, "Authentication failed"))

        if response.is_error:
            message = _error_message(response)
            logger.warning("Upstream %s %s returned %s: %s", method, path, response.status_code, message)
            raise BackendError(message, status_code=response.status_code)

        if not response.content:
            return {"success": True}
        try:
            return response.json()
        except ValueError:
            return {"success": True}

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, data: Any) -> Any:
        return await self.request("POST", path, json=data)

    async def put(self, path: str, data: Any, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PUT", path, json=data, params=params)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
