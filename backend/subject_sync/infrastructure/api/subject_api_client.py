"""HTTP client for the subjects API, implementing the SubjectApi interface.

Talks to the ``/api/v1/subjects`` endpoints using httpx. Every failure,
whether an error response or a transport problem, surfaces as a
RemoteApiError whose message is safe to show to the user.
"""

import logging
from typing import Any

import httpx

from subject_sync.application.interfaces import SubjectApi
from subject_sync.application.schemas.subject import (
    BulkDeleteResult,
    DeleteResult,
    ImportResult,
    SubjectCreate,
    SubjectUpdate,
)
from subject_sync.domain.entities import Subject
from subject_sync.domain.exceptions import RemoteApiError

logger = logging.getLogger(__name__)


class HttpSubjectApiClient(SubjectApi):
    """Infrastructure adapter for the subjects REST API.

    Pass a shared ``httpx.AsyncClient`` to reuse connections; otherwise a
    short-lived client is created per request.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str = "",
        *,
        timeout: float = 30.0,
        owner_id: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._timeout = timeout
        self._owner_id = owner_id
        self._http_client = http_client

    def _get_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        if self._owner_id:
            headers["X-Owner-Id"] = self._owner_id
        return headers

    def _url(self, path: str = "") -> str:
        return f"{self._base_url}/api/v1/subjects{path}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _request(
        self,
        method: str,
        path: str = "",
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            try:
                response = await client.request(
                    method,
                    self._url(path),
                    headers=self._get_headers(),
                    json=json,
                    params=params,
                )
            except httpx.TimeoutException as exc:
                raise RemoteApiError(0, "Network error: request timed out") from exc
            except httpx.HTTPError as exc:
                raise RemoteApiError(0, f"Network error: {exc}") from exc

            if response.status_code >= 400:
                self._raise_api_error(response)

            if response.status_code == 204 or not response.content:
                return None
            return response.json()

        finally:
            if should_close:
                await client.aclose()

    async def list_subjects(self, count: int | None = None) -> list[Subject]:
        params = {"count": count} if count is not None else None
        data = await self._request("GET", params=params)
        return [Subject.from_dict(item) for item in data or []]

    async def create(self, payload: SubjectCreate) -> Subject:
        data = await self._request("POST", json=payload.model_dump(mode="json"))
        return Subject.from_dict(data)

    async def update(self, subject_id: str, patch: SubjectUpdate) -> Subject:
        body = patch.model_dump(mode="json", exclude_unset=True)
        body["id"] = subject_id
        data = await self._request("PUT", f"/{subject_id}", json=body)
        return Subject.from_dict(data)

    async def delete(self, subject_id: str) -> DeleteResult:
        data = await self._request("DELETE", f"/{subject_id}")
        return DeleteResult.model_validate(data or {"id": subject_id})

    async def delete_many(self, subject_ids: list[str]) -> BulkDeleteResult:
        data = await self._request("POST", "/bulk-delete", json={"ids": subject_ids})
        return BulkDeleteResult.model_validate(data)

    async def import_subjects(self, payloads: list[SubjectCreate]) -> ImportResult:
        rows = [p.model_dump(mode="json") for p in payloads]
        data = await self._request("POST", "/import", json=rows)
        return ImportResult.model_validate(data)

    def _raise_api_error(self, response: httpx.Response) -> None:
        """Raise RemoteApiError from an error response, preferring the API's ``detail``."""
        try:
            detail = response.json().get("detail", response.text)
        except Exception:
            detail = response.text

        if isinstance(detail, list):
            message = "; ".join(_describe_validation_item(item) for item in detail)
        elif isinstance(detail, str) and detail:
            message = detail
        else:
            message = f"Request failed with status {response.status_code}"

        logger.debug("Subjects API error %s: %s", response.status_code, message)
        raise RemoteApiError(status_code=response.status_code, message=message)


def _describe_validation_item(item: Any) -> str:
    if not isinstance(item, dict):
        return str(item)
    loc = [str(part) for part in item.get("loc", ()) if part != "body"]
    msg = item.get("msg", "Invalid value")
    return f"{'.'.join(loc)}: {msg}" if loc else msg
