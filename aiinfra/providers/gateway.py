# -*- coding: utf-8 -*-
"""Remote gateway to the provider service.

The sync layer only depends on :class:`AiProviderGateway`; the httpx
implementation below talks to the provider service REST API. Retries and
backoff are left to the transport.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol
from urllib.parse import quote

import httpx

from .models import (
    AiProviderDetailItem,
    AiProviderListItem,
    AiProviderRuntimeState,
    AiProviderSortMap,
    CreateAiProviderParams,
    UpdateAiProviderConfigParams,
    UpdateAiProviderParams,
)
from ..constant import BASE_URL, GATEWAY_TIMEOUT
from ..sync.errors import GatewayError

logger = logging.getLogger(__name__)

API_PREFIX = "/api/ai-providers"


class AiProviderGateway(Protocol):
    """Calls the sync layer needs from the provider service."""

    async def get_ai_provider_list(self) -> List[AiProviderListItem]:
        ...

    async def get_ai_provider_by_id(
        self,
        provider_id: str,
    ) -> Optional[AiProviderDetailItem]:
        ...

    async def get_ai_provider_runtime_state(
        self,
    ) -> Optional[AiProviderRuntimeState]:
        ...

    async def create_ai_provider(self, params: CreateAiProviderParams) -> None:
        ...

    async def delete_ai_provider(self, provider_id: str) -> None:
        ...

    async def update_ai_provider(
        self,
        provider_id: str,
        value: UpdateAiProviderParams,
    ) -> None:
        ...

    async def update_ai_provider_config(
        self,
        provider_id: str,
        value: UpdateAiProviderConfigParams,
    ) -> None:
        ...

    async def update_ai_provider_order(
        self,
        items: List[AiProviderSortMap],
    ) -> None:
        ...

    async def toggle_provider_enabled(
        self,
        provider_id: str,
        enabled: bool,
    ) -> None:
        ...


def _item_path(provider_id: str, suffix: str = "") -> str:
    return f"{API_PREFIX}/{quote(provider_id, safe='')}{suffix}"


class HttpAiProviderGateway:
    """:class:`AiProviderGateway` over HTTP (JSON, camelCase fields)."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        *,
        timeout: float = GATEWAY_TIMEOUT,
        api_key: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self) -> "HttpAiProviderGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        allow_not_found: bool = False,
    ) -> Any:
        try:
            resp = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise GatewayError(f"{method} {path} failed: {e}") from e

        if allow_not_found and resp.status_code == 404:
            return None
        if resp.is_error:
            logger.warning(
                "%s %s returned HTTP %s",
                method,
                path,
                resp.status_code,
            )
            raise GatewayError(
                f"{method} {path} returned HTTP {resp.status_code}: "
                f"{resp.text[:200]}",
                status_code=resp.status_code,
            )
        if not resp.content:
            return None
        return resp.json()

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    async def get_ai_provider_list(self) -> List[AiProviderListItem]:
        raw = await self._request("GET", API_PREFIX)
        return [AiProviderListItem.model_validate(item) for item in raw or []]

    async def get_ai_provider_by_id(
        self,
        provider_id: str,
    ) -> Optional[AiProviderDetailItem]:
        raw = await self._request(
            "GET",
            _item_path(provider_id),
            allow_not_found=True,
        )
        if raw is None:
            return None
        return AiProviderDetailItem.model_validate(raw)

    async def get_ai_provider_runtime_state(
        self,
    ) -> Optional[AiProviderRuntimeState]:
        raw = await self._request("GET", f"{API_PREFIX}/runtime-state")
        if raw is None:
            return None
        return AiProviderRuntimeState.model_validate(raw)

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    async def create_ai_provider(self, params: CreateAiProviderParams) -> None:
        await self._request("POST", API_PREFIX, json=params.to_wire())

    async def delete_ai_provider(self, provider_id: str) -> None:
        await self._request("DELETE", _item_path(provider_id))

    async def update_ai_provider(
        self,
        provider_id: str,
        value: UpdateAiProviderParams,
    ) -> None:
        await self._request(
            "PATCH",
            _item_path(provider_id),
            json=value.to_wire(),
        )

    async def update_ai_provider_config(
        self,
        provider_id: str,
        value: UpdateAiProviderConfigParams,
    ) -> None:
        await self._request(
            "PATCH",
            _item_path(provider_id, "/config"),
            json=value.to_wire(),
        )

    async def update_ai_provider_order(
        self,
        items: List[AiProviderSortMap],
    ) -> None:
        await self._request(
            "PUT",
            f"{API_PREFIX}/order",
            json={"sortMap": [item.to_wire() for item in items]},
        )

    async def toggle_provider_enabled(
        self,
        provider_id: str,
        enabled: bool,
    ) -> None:
        await self._request(
            "PATCH",
            _item_path(provider_id, "/enabled"),
            json={"enabled": enabled},
        )
