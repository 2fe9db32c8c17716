# -*- coding: utf-8 -*-
"""API routes exposing cached provider reads and provider mutations."""

from __future__ import annotations

from typing import Awaitable, List, Optional, TypeVar

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Request
from pydantic import BaseModel, Field

from ...providers import (
    AiProviderDetailItem,
    AiProviderListItem,
    AiProviderRuntimeState,
    AiProviderSortMap,
    CreateAiProviderParams,
    EnabledProviderWithModels,
    UpdateAiProviderConfigParams,
    UpdateAiProviderParams,
    mask_key_vaults,
)
from ...sync import AiProviderActions, GatewayError, ProviderValidationError

router = APIRouter(prefix="/providers", tags=["providers"])

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ToggleEnabledRequest(BaseModel):
    enabled: bool = Field(..., description="New enabled flag")


class SortRequest(BaseModel):
    """Request body for reordering providers (must list every provider)."""

    items: List[AiProviderSortMap] = Field(
        ...,
        description="Every provider id with its new sort weight",
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def get_actions(request: Request) -> AiProviderActions:
    return request.app.state.actions


async def _run(awaitable: Awaitable[T]) -> T:
    """Await an action, mapping sync-layer errors to HTTP errors."""
    try:
        return await awaitable
    except ProviderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except GatewayError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e


def _public_detail(
    provider_id: str,
    detail: Optional[AiProviderDetailItem],
) -> AiProviderDetailItem:
    if detail is None:
        raise HTTPException(
            status_code=404,
            detail=f"Provider '{provider_id}' not found",
        )
    return detail.model_copy(
        update={"key_vaults": mask_key_vaults(detail.key_vaults)},
    )


# ---------------------------------------------------------------------------
# Endpoints: reads
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=List[AiProviderListItem],
    summary="List all providers",
)
async def list_ai_providers(
    actions: AiProviderActions = Depends(get_actions),
) -> List[AiProviderListItem]:
    return await _run(actions.fetch_ai_provider_list())


@router.get(
    "/runtime-state",
    response_model=Optional[AiProviderRuntimeState],
    summary="Enabled providers, enabled models and runtime config",
    description="Returns null when the runtime-state fetch is disabled "
    "(not logged in, or deprecated edition).",
)
async def get_runtime_state(
    request: Request,
    actions: AiProviderActions = Depends(get_actions),
) -> Optional[AiProviderRuntimeState]:
    config = request.app.state.config
    return await _run(
        actions.fetch_ai_provider_runtime_state(config.is_login_on_init),
    )


@router.get(
    "/enabled-chat-models",
    response_model=List[EnabledProviderWithModels],
    summary="Enabled chat models grouped by provider",
)
async def list_enabled_chat_models(
    request: Request,
    actions: AiProviderActions = Depends(get_actions),
) -> List[EnabledProviderWithModels]:
    config = request.app.state.config
    await _run(
        actions.fetch_ai_provider_runtime_state(config.is_login_on_init),
    )
    return actions.get_state().enabled_chat_model_list or []


@router.get(
    "/loading",
    response_model=List[str],
    summary="Provider ids with a mutation in flight",
)
async def list_loading_ids(
    actions: AiProviderActions = Depends(get_actions),
) -> List[str]:
    return sorted(actions.get_state().ai_provider_loading_ids)


@router.get(
    "/{provider_id}",
    response_model=AiProviderDetailItem,
    summary="Get provider detail",
)
async def get_ai_provider(
    provider_id: str = Path(..., description="Provider identifier"),
    actions: AiProviderActions = Depends(get_actions),
) -> AiProviderDetailItem:
    detail = await _run(actions.fetch_ai_provider_item(provider_id))
    return _public_detail(provider_id, detail)


# ---------------------------------------------------------------------------
# Endpoints: mutations
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=List[AiProviderListItem],
    status_code=201,
    summary="Create a custom provider",
)
async def create_ai_provider(
    body: CreateAiProviderParams = Body(...),
    actions: AiProviderActions = Depends(get_actions),
) -> List[AiProviderListItem]:
    await _run(actions.create_new_ai_provider(body))
    return actions.get_state().ai_provider_list


@router.put(
    "/order",
    response_model=List[AiProviderListItem],
    summary="Reorder providers",
)
async def sort_ai_providers(
    body: SortRequest = Body(...),
    actions: AiProviderActions = Depends(get_actions),
) -> List[AiProviderListItem]:
    await _run(actions.update_ai_provider_sort(body.items))
    return actions.get_state().ai_provider_list


@router.put(
    "/{provider_id}",
    response_model=AiProviderDetailItem,
    summary="Update provider fields",
)
async def update_ai_provider(
    provider_id: str = Path(..., description="Provider identifier"),
    body: UpdateAiProviderParams = Body(...),
    actions: AiProviderActions = Depends(get_actions),
) -> AiProviderDetailItem:
    await _run(actions.update_ai_provider(provider_id, body))
    detail = await _run(actions.reload_ai_provider_item(provider_id))
    return _public_detail(provider_id, detail)


@router.put(
    "/{provider_id}/config",
    response_model=AiProviderDetailItem,
    summary="Update provider config (key vaults, fetch mode, ...)",
)
async def update_ai_provider_config(
    provider_id: str = Path(..., description="Provider identifier"),
    body: UpdateAiProviderConfigParams = Body(...),
    actions: AiProviderActions = Depends(get_actions),
) -> AiProviderDetailItem:
    await _run(actions.update_ai_provider_config(provider_id, body))
    detail = await _run(actions.reload_ai_provider_item(provider_id))
    return _public_detail(provider_id, detail)


@router.put(
    "/{provider_id}/enabled",
    response_model=List[AiProviderListItem],
    summary="Enable or disable a provider",
)
async def toggle_ai_provider(
    provider_id: str = Path(..., description="Provider identifier"),
    body: ToggleEnabledRequest = Body(...),
    actions: AiProviderActions = Depends(get_actions),
) -> List[AiProviderListItem]:
    await _run(actions.toggle_provider_enabled(provider_id, body.enabled))
    return actions.get_state().ai_provider_list


@router.delete(
    "/{provider_id}",
    status_code=204,
    summary="Delete a provider",
)
async def delete_ai_provider(
    provider_id: str = Path(..., description="Provider identifier"),
    actions: AiProviderActions = Depends(get_actions),
) -> None:
    await _run(actions.delete_ai_provider(provider_id))
