"""
HTTP client for the upload service.

Every call is a single attempt: transport errors and error statuses are
raised as BackendError and never retried.
"""

import logging
from typing import List, Optional

import httpx

from app.api.schemas import DeleteAllResponse, UploadRecord
from app.core.config import settings
from app.core.exceptions import BackendError

logger = logging.getLogger(__name__)


class UploadsClient:
    """A client for the upload, list and delete endpoints."""

    def __init__(self, base_url: str = None, api_prefix: str = None,
                 http_client: Optional[httpx.AsyncClient] = None):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.api_prefix = settings.API_PREFIX if api_prefix is None else api_prefix
        self._client = http_client or httpx.AsyncClient()
        self._owns_client = http_client is None

    def _url(self, path: str) -> str:
        return f"{self.base_url}{self.api_prefix}{path}"

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, self._url(path), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise BackendError(f"{method} {path} failed: {e}") from e

        if response.is_error:
            try:
                detail = response.json().get("detail")
            except (ValueError, AttributeError):
                detail = None
            logger.error(f"{method} {path} returned {response.status_code}: {detail}")
            raise BackendError(detail or f"HTTP {response.status_code}", status_code=response.status_code)

        return response

    async def upload(self, filename: str, data: bytes, content_type: str) -> UploadRecord:
        response = await self._request(
            "POST", "/upload", files={"file": (filename, data, content_type)}
        )
        return UploadRecord(**response.json())

    async def list(self) -> List[UploadRecord]:
        response = await self._request("GET", "/list")
        return [UploadRecord(**item) for item in response.json()]

    async def delete(self, url: str) -> None:
        await self._request("DELETE", "/delete", json={"url": url})

    async def delete_all(self) -> DeleteAllResponse:
        response = await self._request("DELETE", "/delete-all")
        return DeleteAllResponse(**response.json())

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
