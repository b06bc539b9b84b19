"""ApiClient: the one HTTP entry point to the REST backend.

Responsibilities:
1. Prefix every path with the configured API base URL
2. Attach `Authorization: Bearer <token>` from the shared Session
3. Act as the single 401 interceptor: call `session.on_unauthorized()` once per 401
4. Translate HTTP status codes and transport failures into ApiError subclasses
5. Decode JSON bodies (empty bodies decode to None)
6. Send form bodies as multipart/form-data, with or without file uploads

Stores never talk to httpx directly.
"""
import time
from typing import Any, Dict, List, Optional, Tuple

import httpx

from marketplace.config import settings
from marketplace.core.exceptions import (
    ForbiddenError,
    MissingTokenError,
    NetworkError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
)
from marketplace.core.logging import describe_token, get_logger
from marketplace.core.messages import (
    FORBIDDEN,
    MISSING_TOKEN,
    NETWORK,
    NOT_FOUND,
    SESSION_EXPIRED,
    server_error_message,
)
from marketplace.core.session import Session

logger = get_logger(__name__)

FormFields = List[Tuple[str, str]]
UploadPart = Tuple[str, Tuple[str, bytes, str]]


def _payload_message(response: httpx.Response) -> Optional[str]:
    """Extract `message` (or `error`) from an error payload, if it is JSON."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message") or body.get("error")
    return None


class ApiClient:
    """Async JSON client bound to one Session."""

    def __init__(
        self,
        session: Session,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.request_timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, require_auth: bool) -> Dict[str, str]:
        token = self.session.get_token()
        if require_auth and token is None:
            raise MissingTokenError(MISSING_TOKEN)
        if token is None:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return

        detail = _payload_message(response)

        if status == 401:
            self.session.on_unauthorized()
            raise UnauthorizedError(SESSION_EXPIRED, status_code=status, detail=detail)
        if status == 403:
            raise ForbiddenError(FORBIDDEN, status_code=status, detail=detail)
        if status == 404:
            raise NotFoundError(NOT_FOUND, status_code=status, detail=detail)
        raise ServerError(detail or server_error_message(status), status_code=status, detail=detail)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Optional[FormFields] = None,
        files: Optional[List[UploadPart]] = None,
        require_auth: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body."""
        headers = self._headers(require_auth)
        started = time.perf_counter()

        logger.debug(
            "%s %s (token %s)",
            method,
            path,
            describe_token(self.session.get_token()),
            extra={"url": path},
        )

        try:
            if data is not None or files is not None:
                # always multipart/form-data, with or without uploads
                response = await self._client.request(
                    method,
                    path,
                    params=params,
                    files=_multipart_parts(data or [], files),
                    headers=headers,
                )
            else:
                response = await self._client.request(
                    method, path, params=params, json=json, headers=headers
                )
        except httpx.TransportError as e:
            logger.error("No response for %s %s: %s", method, path, str(e), extra={"url": path})
            raise NetworkError(NETWORK, detail=str(e)) from e

        duration = round(time.perf_counter() - started, 3)
        logger.debug(
            "%s %s -> %d",
            method,
            path,
            response.status_code,
            extra={"url": path, "status": response.status_code, "duration": duration},
        )

        self._raise_for_status(response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)


def _multipart_parts(fields: FormFields, files: Optional[List[UploadPart]]) -> List[Tuple[str, Any]]:
    """Text fields as filename-less parts, so the body is multipart even without uploads."""
    parts: List[Tuple[str, Any]] = [(key, (None, value)) for key, value in fields]
    parts.extend(files or [])
    return parts
