# -*- coding: utf-8 -*-
"""Provider data model and the remote gateway to the provider service."""

from .models import (
    AiProviderDetailItem,
    AiProviderListItem,
    AiProviderRuntimeState,
    AiProviderSortMap,
    AiProviderSourceEnum,
    CreateAiProviderParams,
    EnabledAiModel,
    EnabledChatModel,
    EnabledProvider,
    EnabledProviderWithModels,
    ModelAbilities,
    ProviderRuntimeConfig,
    UpdateAiProviderConfigParams,
    UpdateAiProviderParams,
)
from .gateway import (
    AiProviderGateway,
    HttpAiProviderGateway,
)
from .utils import mask_api_key, mask_key_vaults

__all__ = [
    # models
    "AiProviderDetailItem",
    "AiProviderListItem",
    "AiProviderRuntimeState",
    "AiProviderSortMap",
    "AiProviderSourceEnum",
    "CreateAiProviderParams",
    "EnabledAiModel",
    "EnabledChatModel",
    "EnabledProvider",
    "EnabledProviderWithModels",
    "ModelAbilities",
    "ProviderRuntimeConfig",
    "UpdateAiProviderConfigParams",
    "UpdateAiProviderParams",
    # gateway
    "AiProviderGateway",
    "HttpAiProviderGateway",
    # utils
    "mask_api_key",
    "mask_key_vaults",
]
