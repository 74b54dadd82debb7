"""Async HTTP client for the REST backend."""

from typing import Any, Awaitable, Callable

import httpx
import structlog

from ..errors import BackendError
from .base import ApiResponse

logger = structlog.get_logger(__name__)

# Returns the stored bearer token, if any
TokenProvider = Callable[[], Awaitable[str | None]]


class ApiClient:
    """Thin wrapper over httpx.AsyncClient for the fitness backend.

    - Adds ``Authorization: Bearer <token>`` when a token is stored
    - Turns transport errors, timeouts and non-2xx statuses into BackendError
    - Logs requests at debug and failures at error level
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        token_provider: TokenProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _headers(self) -> dict[str, str]:
        if self._token_provider is None:
            return {}
        token = await self._token_provider()
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        """Send a request and parse the JSON body.

        Raises:
            BackendError: On any transport failure or non-2xx response
        """
        url = f"{self.base_url}{path}"
        headers = await self._headers()
        logger.debug("api_request", method=method, url=url, params=params, headers=headers)

        kwargs: dict[str, Any] = {"json": json, "params": params, "headers": headers}
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = await self._client.request(method, path or "/", **kwargs)
        except httpx.HTTPError as exc:
            logger.error("api_request_failed", method=method, url=url, error=str(exc) or type(exc).__name__)
            raise BackendError(
                f"{method} {url} failed: {exc or type(exc).__name__}", method=method, url=url
            ) from exc

        if response.is_error:
            logger.error(
                "api_unexpected_status",
                method=method,
                url=url,
                status_code=response.status_code,
                body_preview=response.text[:500] if response.text else "",
            )
            raise BackendError(
                f"{method} {url} returned {response.status_code}",
                status_code=response.status_code,
                method=method,
                url=url,
            )

        logger.debug("api_response", method=method, url=url, status_code=response.status_code)

        if not response.content:
            return ApiResponse(data=None, status_code=response.status_code)
        try:
            data = response.json()
        except ValueError as exc:
            logger.error("api_json_parse_failed", url=url, status_code=response.status_code)
            raise BackendError(
                f"{method} {url} returned invalid JSON",
                status_code=response.status_code,
                method=method,
                url=url,
            ) from exc
        return ApiResponse(data=data, status_code=response.status_code)

    async def get(self, path: str, params: dict | None = None, timeout: float | None = None) -> ApiResponse:
        return await self.request("GET", path, params=params, timeout=timeout)

    async def post(self, path: str, json: Any = None) -> ApiResponse:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> ApiResponse:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> ApiResponse:
        return await self.request("DELETE", path)
