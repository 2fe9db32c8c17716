"""Shared fixtures: an in-memory provider service and action sets over it."""

from __future__ import annotations

import asyncio
import typing as typ

import pytest

from aiinfra.providers import (
    AiProviderDetailItem,
    AiProviderListItem,
    AiProviderRuntimeState,
    AiProviderSortMap,
    AiProviderSourceEnum,
    CreateAiProviderParams,
    EnabledAiModel,
    EnabledProvider,
    ProviderRuntimeConfig,
    UpdateAiProviderConfigParams,
    UpdateAiProviderParams,
)
from aiinfra.sync import AiProviderActions, GatewayError


class FakeGateway:
    """In-memory stand-in for the provider service.

    Every call is appended to ``calls``; methods named in ``fail_on`` raise
    :class:`GatewayError`; a method with an entry in ``gates`` blocks until
    that event is set.
    """

    def __init__(self) -> None:
        self.providers: dict[str, AiProviderDetailItem] = {}
        self.models: list[EnabledAiModel] = []
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.logged_in = True

    async def __aenter__(self) -> FakeGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    def add_provider(
        self,
        provider_id: str,
        *,
        name: str | None = None,
        enabled: bool = True,
        sort: int | None = None,
        key_vaults: dict[str, str] | None = None,
    ) -> None:
        self.providers[provider_id] = AiProviderDetailItem(
            id=provider_id,
            name=name,
            enabled=enabled,
            sort=sort if sort is not None else len(self.providers),
            key_vaults=key_vaults or {},
        )

    def add_model(
        self,
        model_id: str,
        provider_id: str,
        *,
        model_type: str = "chat",
        display_name: str | None = None,
    ) -> None:
        self.models.append(
            EnabledAiModel(
                id=model_id,
                provider_id=provider_id,
                type=model_type,
                display_name=display_name,
            ),
        )

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    async def _enter(self, name: str, *args: object) -> None:
        self.calls.append((name, *args))
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        if name in self.fail_on:
            raise GatewayError(f"{name} failed", status_code=500)

    # reads

    async def get_ai_provider_list(self) -> list[AiProviderListItem]:
        await self._enter("get_ai_provider_list")
        items = sorted(self.providers.values(), key=lambda p: p.sort or 0)
        return [
            AiProviderListItem.model_validate(
                p.model_dump(include=set(AiProviderListItem.model_fields)),
            )
            for p in items
        ]

    async def get_ai_provider_by_id(
        self,
        provider_id: str,
    ) -> AiProviderDetailItem | None:
        await self._enter("get_ai_provider_by_id", provider_id)
        detail = self.providers.get(provider_id)
        return detail.model_copy(deep=True) if detail else None

    async def get_ai_provider_runtime_state(
        self,
    ) -> AiProviderRuntimeState | None:
        await self._enter("get_ai_provider_runtime_state")
        if not self.logged_in:
            return None
        enabled = [p for p in self.providers.values() if p.enabled]
        enabled_ids = {p.id for p in enabled}
        return AiProviderRuntimeState(
            enabled_ai_providers=[
                EnabledProvider(id=p.id, name=p.name, source=p.source)
                for p in enabled
            ],
            enabled_ai_models=[
                m for m in self.models if m.provider_id in enabled_ids
            ],
            runtime_config={
                p.id: ProviderRuntimeConfig(key_vaults=dict(p.key_vaults))
                for p in enabled
            },
        )

    # writes

    async def create_ai_provider(self, params: CreateAiProviderParams) -> None:
        await self._enter("create_ai_provider", params)
        self.providers[params.id] = AiProviderDetailItem(
            id=params.id,
            name=params.name,
            enabled=True,
            sort=len(self.providers),
            source=params.source or AiProviderSourceEnum.Builtin,
            key_vaults=params.key_vaults or {},
        )

    async def delete_ai_provider(self, provider_id: str) -> None:
        await self._enter("delete_ai_provider", provider_id)
        self.providers.pop(provider_id, None)

    async def update_ai_provider(
        self,
        provider_id: str,
        value: UpdateAiProviderParams,
    ) -> None:
        await self._enter("update_ai_provider", provider_id, value)
        current = self.providers[provider_id]
        changes = value.model_dump(
            exclude_none=True,
            include={"name", "description", "logo"},
        )
        self.providers[provider_id] = current.model_copy(update=changes)

    async def update_ai_provider_config(
        self,
        provider_id: str,
        value: UpdateAiProviderConfigParams,
    ) -> None:
        await self._enter("update_ai_provider_config", provider_id, value)
        current = self.providers[provider_id]
        key_vaults = {**current.key_vaults, **(value.key_vaults or {})}
        update: dict[str, typ.Any] = {"key_vaults": key_vaults}
        if value.fetch_on_client is not None:
            update["fetch_on_client"] = value.fetch_on_client
        if value.check_model is not None:
            update["check_model"] = value.check_model
        self.providers[provider_id] = current.model_copy(update=update)

    async def update_ai_provider_order(
        self,
        items: list[AiProviderSortMap],
    ) -> None:
        await self._enter("update_ai_provider_order", items)
        for item in items:
            current = self.providers[item.id]
            self.providers[item.id] = current.model_copy(
                update={"sort": item.sort},
            )

    async def toggle_provider_enabled(
        self,
        provider_id: str,
        enabled: bool,
    ) -> None:
        await self._enter("toggle_provider_enabled", provider_id, enabled)
        current = self.providers[provider_id]
        self.providers[provider_id] = current.model_copy(
            update={"enabled": enabled},
        )


@pytest.fixture
def gateway() -> FakeGateway:
    """Provider service with p1 (enabled), p2 (enabled), p3 (disabled)."""
    gw = FakeGateway()
    gw.add_provider("p1", name="Provider One")
    gw.add_provider("p2", name="Provider Two", key_vaults={"apiKey": "old"})
    gw.add_provider("p3", enabled=False)
    gw.add_model("m1", "p1", display_name="Model One")
    gw.add_model("m2", "p1")
    gw.add_model("m3", "p2", display_name="Model Three")
    gw.add_model("e1", "p2", model_type="embedding")
    gw.add_model("m4", "p3")
    return gw


@pytest.fixture
def actions(gateway: FakeGateway) -> typ.Iterator[AiProviderActions]:
    acts = AiProviderActions(gateway, deprecated_edition=False)
    yield acts
    acts.close()
