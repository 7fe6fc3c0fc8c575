"""
Persistence adapter for the dashboard REST backend.

Reads are retried on transient network failures; writes are sent exactly
once so a retry can never duplicate an event. HTTP 404 surfaces as
``NotFound``, every other failure as ``TransportError``.
"""

import logging
from typing import Any

import httpx
from fastapi.encoders import jsonable_encoder
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from matchdesk.config import get_settings
from matchdesk.exceptions import NotFound, TransportError
from matchdesk.schemas import (
    CardResponse,
    GoalResponse,
    LineupEntry,
    LineupFormations,
    MatchFilter,
    MatchResponse,
    SubstitutionResponse,
    TeamDetail,
)

logger = logging.getLogger(__name__)

# Exceptions to retry on
RETRYABLE_EXCEPTIONS = (
    httpx.ConnectTimeout,
    httpx.ReadTimeout,
    httpx.ConnectError,
    httpx.RemoteProtocolError,
)


class BackendClient:
    """Thin JSON client for the backend API (``/api/v1``)."""

    def __init__(
        self,
        base_url: str | None = None,
        access_token: str | None = None,
        *,
        timeout: float | None = None,
        read_retries: int | None = None,
        retry_wait: wait_base | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.access_token = access_token if access_token is not None else settings.api_access_token
        self.timeout = timeout if timeout is not None else settings.api_timeout_seconds
        self.read_retries = read_retries if read_retries is not None else settings.api_read_retries
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=2, max=30)
        self.transport = transport

    def get_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def _send(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: Any = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            transport=self.transport,
            follow_redirects=True,
        ) as client:
            response = await client.request(
                method,
                path,
                headers=self.get_headers(),
                params=params,
                json=json,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response

    async def _send_with_retry(self, method: str, path: str, params: dict | None = None) -> httpx.Response:
        """
        Send a read request, retrying with exponential backoff on connection
        and read timeouts, connection errors and dropped connections.
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(1, self.read_retries)),
            wait=self.retry_wait,
            retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self._send(method, path, params=params)
        raise AssertionError("unreachable")

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None when empty)."""
        try:
            if method.upper() == "GET":
                response = await self._send_with_retry(method, path, params=params)
            else:
                response = await self._send(method, path, params=params, json=json)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise NotFound(f"{method.upper()} {path}: not found") from e
            logger.warning("Backend %s %s failed with HTTP %s", method.upper(), path, status)
            raise TransportError(f"{method.upper()} {path} failed with HTTP {status}") from e
        except httpx.HTTPError as e:
            logger.warning("Backend %s %s failed: %s", method.upper(), path, e)
            raise TransportError(f"{method.upper()} {path} failed: {e}") from e

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"{method.upper()} {path} returned invalid JSON") from e

    async def get(self, path: str, params: dict | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None, params: dict | None = None) -> Any:
        return await self.request("POST", path, json=json, params=params)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> None:
        await self.request("DELETE", path)


class RestMatchRepository:
    def __init__(self, client: BackendClient):
        self.client = client

    async def get(self, match_id: int) -> MatchResponse:
        data = await self.client.get(f"/matches/{match_id}")
        return MatchResponse.model_validate(data)

    async def update(self, match_id: int, fields: dict[str, Any]) -> MatchResponse:
        data = await self.client.put(f"/matches/{match_id}", json=jsonable_encoder(fields))
        return MatchResponse.model_validate(data)

    async def delete(self, match_id: int) -> None:
        await self.client.delete(f"/matches/{match_id}")

    async def list(self, filters: MatchFilter | None = None) -> list[MatchResponse]:
        filters = filters or MatchFilter()
        params: dict[str, Any] = {"offset": filters.offset, "limit": filters.limit}
        if filters.tournament_id is not None:
            params["tournament_id"] = filters.tournament_id

        data = await self.client.get("/matches/", params=params) or []
        matches = [MatchResponse.model_validate(item) for item in data]
        # The backend only filters by tournament
        if filters.stage is not None:
            matches = [m for m in matches if m.stage == filters.stage]
        if filters.status is not None:
            matches = [m for m in matches if m.status == filters.status]
        return matches


class RestEventRepository:
    """Goals, cards and substitutions share the same endpoint layout."""

    def __init__(self, client: BackendClient, resource: str, response_model: type):
        self.client = client
        self.resource = resource
        self.response_model = response_model

    async def list_by_match(self, match_id: int) -> list:
        data = await self.client.get(f"/{self.resource}/match/{match_id}") or []
        return [self.response_model.model_validate(item) for item in data]

    async def create(self, payload):
        data = await self.client.post(f"/{self.resource}/", json=payload.model_dump(mode="json"))
        return self.response_model.model_validate(data)

    async def delete(self, event_id: int) -> None:
        await self.client.delete(f"/{self.resource}/{event_id}")


def goal_repository(client: BackendClient) -> RestEventRepository:
    return RestEventRepository(client, "goals", GoalResponse)


def card_repository(client: BackendClient) -> RestEventRepository:
    return RestEventRepository(client, "cards", CardResponse)


def substitution_repository(client: BackendClient) -> RestEventRepository:
    return RestEventRepository(client, "substitutions", SubstitutionResponse)


class RestLineupRepository:
    def __init__(self, client: BackendClient):
        self.client = client

    async def set_lineups(
        self,
        match_id: int,
        entries: list[LineupEntry],
        formations: LineupFormations,
    ) -> list[LineupEntry]:
        params = formations.model_dump(exclude_none=True)
        body = [entry.model_dump(mode="json", exclude_none=True) for entry in entries]
        data = await self.client.post(f"/matches/{match_id}/lineups", json=body, params=params)
        if data is None:
            return entries
        return [LineupEntry.model_validate(item) for item in data]


class RestTeamService:
    def __init__(self, client: BackendClient):
        self.client = client

    async def get_team(self, team_id: int) -> TeamDetail:
        data = await self.client.get(f"/teams/{team_id}")
        return TeamDetail.model_validate(data)

