# -*- coding: utf-8 -*-
"""Process-wide observable state for the AI provider sync layer.

State lives in one immutable :class:`AiInfraState` snapshot. Every change
goes through :meth:`StateContainer.set`, which builds a new snapshot and
notifies subscribers; subscribers compare snapshots by identity.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..providers.models import (
    AiProviderDetailItem,
    AiProviderListItem,
    EnabledAiModel,
    EnabledProvider,
    EnabledProviderWithModels,
    ProviderRuntimeConfig,
)

logger = logging.getLogger(__name__)

# (state, prev_state)
StateListener = Callable[["AiInfraState", "AiInfraState"], None]


class AiInfraState(BaseModel):
    model_config = ConfigDict(frozen=True)

    active_ai_provider: Optional[str] = Field(
        default=None,
        description="Provider id of the most recent successful detail read",
    )
    ai_provider_detail: Optional[AiProviderDetailItem] = None
    ai_provider_list: List[AiProviderListItem] = Field(default_factory=list)
    init_ai_provider_list: bool = False
    ai_provider_loading_ids: FrozenSet[str] = frozenset()

    # Populated together from the runtime-state snapshot
    ai_provider_runtime_config: Optional[
        Dict[str, ProviderRuntimeConfig]
    ] = None
    enabled_ai_models: Optional[List[EnabledAiModel]] = None
    enabled_ai_providers: Optional[List[EnabledProvider]] = None
    enabled_chat_model_list: Optional[
        List[EnabledProviderWithModels]
    ] = None


class StateContainer:
    def __init__(self, initial: Optional[AiInfraState] = None) -> None:
        self._state = initial if initial is not None else AiInfraState()
        self._listeners: List[StateListener] = []

    def get(self) -> AiInfraState:
        return self._state

    def set(self, partial: Dict[str, Any], action: str) -> AiInfraState:
        """Apply ``partial`` as a new snapshot and notify subscribers.

        ``action`` names the change in the debug log.
        """
        unknown = set(partial) - set(AiInfraState.model_fields)
        if unknown:
            raise KeyError(f"unknown state fields: {sorted(unknown)}")

        prev = self._state
        if all(getattr(prev, k) == v for k, v in partial.items()):
            logger.debug("state %s: unchanged", action)
            return prev

        self._state = prev.model_copy(update=partial)
        logger.debug("state %s: %s", action, sorted(partial))
        for listener in list(self._listeners):
            listener(self._state, prev)
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
