# -*- coding: utf-8 -*-
"""AI provider actions: cached reads, mutations and their refresh cascades.

Every mutation writes through the gateway, then refreshes the provider
list, which in turn refreshes the runtime state. Updates to a single
provider also refresh the detail of the active provider. A mutation call
returns only after its whole cascade has settled.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Callable, List, Optional

from .cache import CacheKey, CacheKind, CacheStore
from .derive import derive_runtime_state_fields
from .errors import ProviderValidationError
from .state import AiInfraState, StateContainer
from ..constant import DEPRECATED_EDITION
from ..providers.models import (
    AiProviderDetailItem,
    AiProviderListItem,
    AiProviderRuntimeState,
    AiProviderSortMap,
    AiProviderSourceEnum,
    CreateAiProviderParams,
    UpdateAiProviderConfigParams,
    UpdateAiProviderParams,
)

if TYPE_CHECKING:
    from ..providers.gateway import AiProviderGateway

logger = logging.getLogger(__name__)

AI_PROVIDER_LIST_KEY = CacheKey(CacheKind.AI_PROVIDER_LIST)
AI_PROVIDER_RUNTIME_STATE_KEY = CacheKey(CacheKind.AI_PROVIDER_RUNTIME_STATE)


def ai_provider_item_key(provider_id: str) -> CacheKey:
    return CacheKey(CacheKind.AI_PROVIDER_ITEM, provider_id)


def _require_id(provider_id: str) -> str:
    if not isinstance(provider_id, str) or not provider_id.strip():
        raise ProviderValidationError("provider id must not be empty")
    return provider_id


class AiProviderActions:
    def __init__(
        self,
        gateway: AiProviderGateway,
        *,
        cache: Optional[CacheStore] = None,
        state: Optional[StateContainer] = None,
        deprecated_edition: bool = DEPRECATED_EDITION,
    ) -> None:
        self.gateway = gateway
        self.cache = cache if cache is not None else CacheStore()
        self.state = state if state is not None else StateContainer()
        self.deprecated_edition = deprecated_edition

        self.cache.bind(AI_PROVIDER_LIST_KEY, gateway.get_ai_provider_list)
        self._unsubscribers: List[Callable[[], None]] = [
            self.cache.subscribe(
                CacheKind.AI_PROVIDER_LIST,
                self._on_ai_provider_list,
            ),
            self.cache.subscribe(
                CacheKind.AI_PROVIDER_ITEM,
                self._on_ai_provider_item,
            ),
            self.cache.subscribe(
                CacheKind.AI_PROVIDER_RUNTIME_STATE,
                self._on_ai_provider_runtime_state,
            ),
        ]

    def close(self) -> None:
        """Detach from the cache store."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def get_state(self) -> AiInfraState:
        return self.state.get()

    # -----------------------------------------------------------------------
    # Cache listeners
    # -----------------------------------------------------------------------

    def _on_ai_provider_list(
        self,
        key: CacheKey,
        data: Optional[List[AiProviderListItem]],
    ) -> None:
        # the snapshot owns its own copy of the cached list
        data = list(data or [])
        if not self.state.get().init_ai_provider_list:
            self.state.set(
                {"ai_provider_list": data, "init_ai_provider_list": True},
                "fetch_ai_provider_list/init",
            )
            return
        self.state.set(
            {"ai_provider_list": data},
            "fetch_ai_provider_list/refresh",
        )

    def _on_ai_provider_item(
        self,
        key: CacheKey,
        data: Optional[AiProviderDetailItem],
    ) -> None:
        if not data:
            return
        self.state.set(
            {"active_ai_provider": key.id, "ai_provider_detail": data},
            "fetch_ai_provider_item",
        )

    def _on_ai_provider_runtime_state(
        self,
        key: CacheKey,
        data: Optional[AiProviderRuntimeState],
    ) -> None:
        if data is None:
            return
        self.state.set(
            derive_runtime_state_fields(data),
            "fetch_ai_provider_runtime_state",
        )

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    async def fetch_ai_provider_list(self) -> List[AiProviderListItem]:
        return await self.cache.read(AI_PROVIDER_LIST_KEY)

    async def fetch_ai_provider_item(
        self,
        provider_id: str,
    ) -> Optional[AiProviderDetailItem]:
        """Read a provider detail; a defined result makes it the active one."""
        _require_id(provider_id)
        key = ai_provider_item_key(provider_id)
        if not self.cache.is_bound(key):

            async def fetch() -> Optional[AiProviderDetailItem]:
                return await self.gateway.get_ai_provider_by_id(provider_id)

            self.cache.bind(key, fetch)
        return await self.cache.read(key)

    async def fetch_ai_provider_runtime_state(
        self,
        is_login_on_init: Optional[bool],
    ) -> Optional[AiProviderRuntimeState]:
        """Init provider key vaults and the user's enabled model list.

        The fetch only runs when ``is_login_on_init`` holds and this is not
        the deprecated edition; otherwise the key is disabled and ``None``
        is returned.
        """
        enabled = bool(is_login_on_init) and not self.deprecated_edition
        self.cache.bind(
            AI_PROVIDER_RUNTIME_STATE_KEY,
            self.gateway.get_ai_provider_runtime_state if enabled else None,
        )
        return await self.cache.read(AI_PROVIDER_RUNTIME_STATE_KEY)

    # -----------------------------------------------------------------------
    # Refresh cascades
    # -----------------------------------------------------------------------

    async def refresh_ai_provider_list(self) -> None:
        await self.cache.invalidate(AI_PROVIDER_LIST_KEY)
        await self.refresh_ai_provider_runtime_state()

    async def refresh_ai_provider_detail(self) -> None:
        active = self.state.get().active_ai_provider
        if active is not None:
            await self.cache.invalidate(ai_provider_item_key(active))
        await self.refresh_ai_provider_runtime_state()

    async def refresh_ai_provider_runtime_state(self) -> None:
        await self.cache.invalidate(AI_PROVIDER_RUNTIME_STATE_KEY)

    async def reload_ai_provider_item(
        self,
        provider_id: str,
    ) -> Optional[AiProviderDetailItem]:
        """Return an up-to-date detail for one provider, making it active.

        The active detail is already fresh after a mutation cascade; any
        other cached detail is refetched.
        """
        key = ai_provider_item_key(_require_id(provider_id))
        if (
            self.state.get().active_ai_provider == provider_id
            or not self.cache.is_bound(key)
        ):
            return await self.fetch_ai_provider_item(provider_id)
        return await self.cache.invalidate(key)

    # -----------------------------------------------------------------------
    # Loading flags
    # -----------------------------------------------------------------------

    def internal_toggle_ai_provider_loading(
        self,
        provider_id: str,
        loading: bool,
    ) -> None:
        ids = self.state.get().ai_provider_loading_ids
        ids = ids | {provider_id} if loading else ids - {provider_id}
        self.state.set(
            {"ai_provider_loading_ids": ids},
            "toggle_ai_provider_loading",
        )

    @asynccontextmanager
    async def _provider_loading(self, provider_id: str) -> AsyncIterator[None]:
        self.internal_toggle_ai_provider_loading(provider_id, True)
        try:
            yield
        finally:
            self.internal_toggle_ai_provider_loading(provider_id, False)

    # -----------------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------------

    async def create_new_ai_provider(
        self,
        params: CreateAiProviderParams,
    ) -> None:
        """Create a user-defined provider (source is always ``custom``)."""
        _require_id(params.id)
        payload = params.model_copy(
            update={"source": AiProviderSourceEnum.Custom},
        )
        logger.info("creating provider %s", params.id)
        await self.gateway.create_ai_provider(payload)
        await self.refresh_ai_provider_list()

    async def delete_ai_provider(self, provider_id: str) -> None:
        _require_id(provider_id)
        logger.info("deleting provider %s", provider_id)
        await self.gateway.delete_ai_provider(provider_id)
        await self.refresh_ai_provider_list()

    async def remove_ai_provider(self, provider_id: str) -> None:
        await self.delete_ai_provider(provider_id)

    async def toggle_provider_enabled(
        self,
        provider_id: str,
        enabled: bool,
    ) -> None:
        _require_id(provider_id)
        async with self._provider_loading(provider_id):
            await self.gateway.toggle_provider_enabled(provider_id, enabled)
            await self.refresh_ai_provider_list()

    async def update_ai_provider(
        self,
        provider_id: str,
        value: UpdateAiProviderParams,
    ) -> None:
        _require_id(provider_id)
        async with self._provider_loading(provider_id):
            await self.gateway.update_ai_provider(provider_id, value)
            await self.refresh_ai_provider_list()
            await self.refresh_ai_provider_detail()

    async def update_ai_provider_config(
        self,
        provider_id: str,
        value: UpdateAiProviderConfigParams,
    ) -> None:
        _require_id(provider_id)
        async with self._provider_loading(provider_id):
            await self.gateway.update_ai_provider_config(provider_id, value)
            await self.refresh_ai_provider_list()
            await self.refresh_ai_provider_detail()

    async def update_ai_provider_sort(
        self,
        items: List[AiProviderSortMap],
    ) -> None:
        """Persist a new provider order.

        ``items`` must cover every provider exactly once.
        """
        self._validate_sort_items(items)
        await self.gateway.update_ai_provider_order(items)
        await self.refresh_ai_provider_list()

    def _validate_sort_items(self, items: List[AiProviderSortMap]) -> None:
        if not items:
            raise ProviderValidationError("sort items must not be empty")
        ids = [_require_id(item.id) for item in items]
        if len(set(ids)) != len(ids):
            raise ProviderValidationError("sort items contain duplicate ids")

        cached = self.cache.peek(AI_PROVIDER_LIST_KEY)
        if cached is None:
            return
        known = {item.id for item in cached}
        if set(ids) != known:
            missing = sorted(known - set(ids))
            extra = sorted(set(ids) - known)
            raise ProviderValidationError(
                "sort items must cover every provider exactly once "
                f"(missing: {missing}, unknown: {extra})",
            )
