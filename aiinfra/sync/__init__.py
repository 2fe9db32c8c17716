# -*- coding: utf-8 -*-
"""Cache store, observable state and AI provider actions."""

from .errors import AiInfraError, GatewayError, ProviderValidationError
from .cache import CacheKey, CacheKind, CacheStore
from .state import AiInfraState, StateContainer
from .derive import build_enabled_chat_model_list, derive_runtime_state_fields
from .actions import (
    AI_PROVIDER_LIST_KEY,
    AI_PROVIDER_RUNTIME_STATE_KEY,
    AiProviderActions,
    ai_provider_item_key,
)

__all__ = [
    # errors
    "AiInfraError",
    "GatewayError",
    "ProviderValidationError",
    # cache
    "CacheKey",
    "CacheKind",
    "CacheStore",
    # state
    "AiInfraState",
    "StateContainer",
    # derive
    "build_enabled_chat_model_list",
    "derive_runtime_state_fields",
    # actions
    "AI_PROVIDER_LIST_KEY",
    "AI_PROVIDER_RUNTIME_STATE_KEY",
    "AiProviderActions",
    "ai_provider_item_key",
]
