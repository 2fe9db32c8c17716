# -*- coding: utf-8 -*-
"""Pydantic data models for AI providers, models and runtime state."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    """Base for payloads exchanged with the provider service (camelCase)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AiProviderSourceEnum(str, Enum):
    Builtin = "builtin"
    Custom = "custom"


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


class AiProviderListItem(_WireModel):
    """Light projection of a provider, as returned by the list endpoint."""

    id: str = Field(..., description="Provider identifier")
    name: Optional[str] = Field(default=None, description="Display name")
    description: Optional[str] = None
    logo: Optional[str] = None
    enabled: bool = Field(default=False)
    sort: Optional[int] = Field(
        default=None,
        description="Ordering weight, lower comes first",
    )
    source: AiProviderSourceEnum = AiProviderSourceEnum.Builtin


class AiProviderDetailItem(AiProviderListItem):
    """Full provider record including its configuration."""

    key_vaults: Dict[str, str] = Field(
        default_factory=dict,
        description="Provider credentials (api key, base url, ...)",
    )
    settings: Dict[str, Any] = Field(default_factory=dict)
    config: Dict[str, Any] = Field(default_factory=dict)
    fetch_on_client: Optional[bool] = None
    check_model: Optional[str] = None


# ---------------------------------------------------------------------------
# Models and runtime state
# ---------------------------------------------------------------------------


class ModelAbilities(_WireModel):
    """Capability flags of a model. Unset means "not declared"."""

    function_call: Optional[bool] = None
    vision: Optional[bool] = None
    reasoning: Optional[bool] = None
    files: Optional[bool] = None
    search: Optional[bool] = None
    image_output: Optional[bool] = None


class EnabledAiModel(_WireModel):
    """A model the user has enabled on some provider."""

    id: str
    provider_id: str
    type: str = Field(default="chat", description="Model classification")
    abilities: Optional[ModelAbilities] = None
    context_window_tokens: Optional[int] = None
    display_name: Optional[str] = None
    enabled: Optional[bool] = None
    sort: Optional[int] = None


class EnabledProvider(_WireModel):
    id: str
    name: Optional[str] = None
    logo: Optional[str] = None
    source: Optional[AiProviderSourceEnum] = None


class ProviderRuntimeConfig(_WireModel):
    """Provider-scoped runtime configuration."""

    key_vaults: Dict[str, str] = Field(default_factory=dict)
    settings: Dict[str, Any] = Field(default_factory=dict)
    fetch_on_client: Optional[bool] = None


class AiProviderRuntimeState(_WireModel):
    """Snapshot of what is enabled right now, across all providers."""

    enabled_ai_models: List[EnabledAiModel] = Field(default_factory=list)
    enabled_ai_providers: List[EnabledProvider] = Field(default_factory=list)
    runtime_config: Dict[str, ProviderRuntimeConfig] = Field(
        default_factory=dict,
    )


# ---------------------------------------------------------------------------
# Derived view: enabled chat model tree
# ---------------------------------------------------------------------------


class EnabledChatModel(_WireModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str = ""
    context_window_tokens: Optional[int] = None
    abilities: ModelAbilities = Field(default_factory=ModelAbilities)


class EnabledProviderWithModels(_WireModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    children: List[EnabledChatModel] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Mutation parameters
# ---------------------------------------------------------------------------


class CreateAiProviderParams(_WireModel):
    id: str = Field(..., description="Identifier of the new provider")
    name: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    sdk_type: Optional[str] = Field(
        default=None,
        description="Client SDK family, e.g. openai",
    )
    key_vaults: Optional[Dict[str, str]] = None
    settings: Optional[Dict[str, Any]] = None
    source: Optional[AiProviderSourceEnum] = None


class UpdateAiProviderParams(_WireModel):
    name: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    sdk_type: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None
    config: Optional[Dict[str, Any]] = None


class UpdateAiProviderConfigParams(_WireModel):
    key_vaults: Optional[Dict[str, str]] = None
    fetch_on_client: Optional[bool] = None
    check_model: Optional[str] = None
    config: Optional[Dict[str, Any]] = None


class AiProviderSortMap(_WireModel):
    id: str
    sort: int
