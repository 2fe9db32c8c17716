# -*- coding: utf-8 -*-
from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, TypeVar

import click

from ..config import Config
from ..providers import HttpAiProviderGateway
from ..sync import AiInfraError, AiProviderActions

T = TypeVar("T")


def gateway(config: Config) -> HttpAiProviderGateway:
    return HttpAiProviderGateway(
        config.gateway.base_url,
        timeout=config.gateway.timeout,
        api_key=config.gateway.api_key,
    )


def run_actions(
    config: Config,
    fn: Callable[[AiProviderActions], Awaitable[T]],
) -> T:
    """Run ``fn`` against a fresh action set; exit 1 on sync-layer errors."""

    async def _main() -> T:
        async with gateway(config) as gw:
            actions = AiProviderActions(
                gw,
                deprecated_edition=config.deprecated_edition,
            )
            try:
                return await fn(actions)
            finally:
                actions.close()

    try:
        return asyncio.run(_main())
    except AiInfraError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1) from e


def print_json(data: Any) -> None:
    click.echo(json.dumps(data, ensure_ascii=False, indent=2))
