# -*- coding: utf-8 -*-
"""Errors raised by the sync layer."""

from __future__ import annotations

from typing import Optional


class AiInfraError(Exception):
    """Base class for every error raised by aiinfra."""


class ProviderValidationError(AiInfraError, ValueError):
    """Mutation parameters were rejected before reaching the gateway."""


class GatewayError(AiInfraError):
    """The remote provider service failed or was unreachable."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
