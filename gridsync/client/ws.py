"""
Web-service client for the spreadsheet API.

Speaks the same operation set as the evaluation service, over HTTP.
Every call returns a Result built from the response envelope: the
envelope ``result`` on success, its ``errors`` on failure. Transport
failures become failed results; nothing is retried.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from gridsync.domain.spreadsheet.entities import Result, err_result, ok_result
from gridsync.domain.spreadsheet.errors import ErrorCode, ErrorDetail

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class SpreadsheetWs:
    """Async client for the spreadsheet endpoints.

    Args:
        url: Base URL of the spreadsheet endpoints, e.g.
            ``http://localhost:2345/api``.
        client: Optional preconfigured ``httpx.AsyncClient``. When omitted
            one is created and closed by ``aclose``.
    """

    def __init__(
        self,
        url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._url = url.rstrip("/")
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "SpreadsheetWs":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def load(self, ss_name: str, pairs: list[list[str]]) -> Result:
        return await self._request("PUT", self._path(ss_name), json=pairs)

    async def query(self, ss_name: str, cell_id: str) -> Result:
        return await self._request("GET", self._path(ss_name, cell_id))

    async def evaluate(self, ss_name: str, cell_id: str, expr: str) -> Result:
        return await self._request(
            "PATCH", self._path(ss_name, cell_id), params={"expr": expr}
        )

    async def copy(self, ss_name: str, dest_cell_id: str, src_cell_id: str) -> Result:
        return await self._request(
            "PATCH", self._path(ss_name, dest_cell_id), params={"srcCellId": src_cell_id}
        )

    async def remove(self, ss_name: str, cell_id: str) -> Result:
        return await self._request("DELETE", self._path(ss_name, cell_id))

    async def dump(self, ss_name: str) -> Result:
        return await self._request(
            "GET", self._path(ss_name), params={"withValues": "false"}
        )

    async def dump_with_values(self, ss_name: str) -> Result:
        return await self._request("GET", self._path(ss_name))

    async def clear(self, ss_name: str) -> Result:
        return await self._request("DELETE", self._path(ss_name))

    def _path(self, ss_name: str, cell_id: str | None = None) -> str:
        path = f"{self._url}/{quote(ss_name, safe='')}"
        return f"{path}/{quote(cell_id, safe='')}" if cell_id else path

    async def _request(self, method: str, url: str, **kwargs: Any) -> Result:
        try:
            response = await self._client.request(method, url, **kwargs)
            envelope = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            return err_result(
                f"cannot reach spreadsheet service: {exc}", code=ErrorCode.INTERNAL
            )
        if not isinstance(envelope, dict) or "isOk" not in envelope:
            logger.warning("%s %s returned a non-envelope body", method, url)
            return err_result(
                f"unexpected response from spreadsheet service (HTTP {response.status_code})",
                code=ErrorCode.INTERNAL,
            )
        if envelope["isOk"]:
            return ok_result(envelope.get("result"))
        return err_result(
            [
                ErrorDetail(str(e.get("code", "")), str(e.get("message", "")))
                for e in envelope.get("errors", [])
            ]
        )
