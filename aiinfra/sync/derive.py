# -*- coding: utf-8 -*-
"""Views derived from the provider runtime-state snapshot."""

from __future__ import annotations

from typing import Any, Dict, List

from ..constant import CHAT_MODEL_TYPE
from ..providers.models import (
    AiProviderRuntimeState,
    EnabledAiModel,
    EnabledChatModel,
    EnabledProviderWithModels,
    ModelAbilities,
)


def _to_chat_model(model: EnabledAiModel) -> EnabledChatModel:
    return EnabledChatModel(
        id=model.id,
        display_name=model.display_name or "",
        context_window_tokens=model.context_window_tokens,
        abilities=model.abilities or ModelAbilities(),
    )


def group_models_by_provider(
    models: List[EnabledAiModel],
    model_type: str,
) -> Dict[str, List[EnabledChatModel]]:
    """Group ``models`` of ``model_type`` by provider id.

    Inside a provider the first model with a given id wins.
    """
    grouped: Dict[str, List[EnabledChatModel]] = {}
    seen: Dict[str, set] = {}
    for model in models:
        if model.type != model_type:
            continue
        ids = seen.setdefault(model.provider_id, set())
        if model.id in ids:
            continue
        ids.add(model.id)
        grouped.setdefault(model.provider_id, []).append(
            _to_chat_model(model),
        )
    return grouped


def build_enabled_chat_model_list(
    runtime_state: AiProviderRuntimeState,
) -> List[EnabledProviderWithModels]:
    """One node per enabled provider, in the snapshot's order.

    Providers without chat models still get a node with no children;
    models whose provider is not enabled are left out.
    """
    grouped = group_models_by_provider(
        runtime_state.enabled_ai_models,
        CHAT_MODEL_TYPE,
    )
    tree: List[EnabledProviderWithModels] = []
    emitted = set()
    for provider in runtime_state.enabled_ai_providers:
        if provider.id in emitted:
            continue
        emitted.add(provider.id)
        tree.append(
            EnabledProviderWithModels(
                id=provider.id,
                name=provider.name or provider.id,
                children=grouped.get(provider.id, []),
            ),
        )
    return tree


def derive_runtime_state_fields(
    runtime_state: AiProviderRuntimeState,
) -> Dict[str, Any]:
    """State fields published together for one runtime-state snapshot."""
    return {
        "ai_provider_runtime_config": runtime_state.runtime_config,
        "enabled_ai_models": runtime_state.enabled_ai_models,
        "enabled_ai_providers": runtime_state.enabled_ai_providers,
        "enabled_chat_model_list": build_enabled_chat_model_list(
            runtime_state,
        ),
    }
