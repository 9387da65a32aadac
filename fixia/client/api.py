"""Async HTTP client for the Explorer review endpoints."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for failures talking to the Fixia API."""

    def __init__(self, message: str, status_code: int | None = None, errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or {}


class AuthError(ApiError):
    """Missing, expired or insufficient credentials."""


class ValidationFailed(ApiError):
    pass


class NotFound(ApiError):
    pass


class Conflict(ApiError):
    """The server state moved on (e.g. the connection was already reviewed)."""


class ServiceUnavailable(ApiError):
    """Network failure or a 5xx from the server."""


def _raise_for_response(resp: httpx.Response) -> None:
    if resp.is_success:
        return
    try:
        body = resp.json()
    except ValueError:
        body = {}
    detail = body.get("detail") if isinstance(body, dict) else None
    message = detail if isinstance(detail, str) else resp.reason_phrase
    errors = body.get("errors") if isinstance(body, dict) else None

    status = resp.status_code
    if status in (401, 403):
        raise AuthError(message, status)
    if status in (400, 422):
        raise ValidationFailed(message, status, errors)
    if status == 404:
        raise NotFound(message, status)
    if status == 409:
        raise Conflict(message, status)
    if status >= 500:
        raise ServiceUnavailable(message, status)
    raise ApiError(message, status)


class ExplorerApiClient:
    """Bearer-authenticated wrapper around httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str,
        token: str,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "ExplorerApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ServiceUnavailable(f"Could not reach the server: {exc}") from exc
        _raise_for_response(resp)
        return resp.json()

    async def get_review_obligations(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/explorer/review-obligations")

    async def get_blocking_status(self) -> dict[str, Any]:
        return await self._request("GET", "/api/explorer/blocking-status")

    async def submit_review(self, form: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/api/explorer/reviews", json=form)
