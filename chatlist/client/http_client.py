from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from chatlist.core.config import get_settings
from chatlist.features.conversations.errors import (
    MalformedResponseError,
    UnauthorizedError,
    UnavailableError,
)
from chatlist.features.conversations.types import LatestMessageRecord

logger = logging.getLogger(__name__)

LATEST_MESSAGES_PATH = "/api/rpc/get_latest_messages"


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict) and isinstance(payload.get("detail"), str):
        return payload["detail"]
    return response.reason_phrase


class HttpAggregationClient:
    """Calls the ``get_latest_messages`` procedure over HTTP."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.chat_api_base_url,
            timeout=timeout_seconds or settings.chat_api_timeout_seconds,
        )

    async def __aenter__(self) -> HttpAggregationClient:
        return self

    async def __aexit__(self, _exc_type, _exc, _tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get_latest_messages(self, current_user_id: str) -> list[LatestMessageRecord]:
        try:
            response = await self._client.post(
                LATEST_MESSAGES_PATH,
                json={"current_user_id": current_user_id},
            )
        except httpx.HTTPError as exc:
            logger.warning("Aggregation request failed: %s", exc)
            raise UnavailableError("Could not reach the chat service.") from exc

        if response.status_code in {401, 403}:
            raise UnauthorizedError(_error_detail(response))
        if response.is_error:
            raise UnavailableError(
                f"Chat service returned {response.status_code}: {_error_detail(response)}"
            )

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise MalformedResponseError("Chat service returned invalid JSON.") from exc
        if not isinstance(payload, list):
            raise MalformedResponseError("Expected a list of conversation records.")
        try:
            return [LatestMessageRecord.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise MalformedResponseError(f"Unexpected conversation record shape: {exc}") from exc
