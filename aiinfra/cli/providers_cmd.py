# -*- coding: utf-8 -*-
"""CLI commands for managing AI providers on the provider service."""
from __future__ import annotations

from typing import Dict, Optional, Tuple

import click

from .http import print_json, run_actions
from ..config import Config
from ..providers import (
    AiProviderSortMap,
    CreateAiProviderParams,
    UpdateAiProviderConfigParams,
    UpdateAiProviderParams,
    mask_key_vaults,
)


def _config(ctx: click.Context) -> Config:
    return ctx.obj["config"]


def _key_vaults(
    api_key: Optional[str],
    endpoint: Optional[str],
) -> Optional[Dict[str, str]]:
    vaults: Dict[str, str] = {}
    if api_key is not None:
        vaults["apiKey"] = api_key
    if endpoint is not None:
        vaults["baseURL"] = endpoint
    return vaults or None


def _abilities_label(abilities) -> str:
    flags = [
        name
        for name, value in abilities.model_dump(by_alias=True).items()
        if value
    ]
    return f" [{', '.join(flags)}]" if flags else ""


# ---------------------------------------------------------------------------
# Group
# ---------------------------------------------------------------------------


@click.group("providers")
def providers_group() -> None:
    """Manage AI providers.

    \b
    Examples:
      aiinfra providers list
      aiinfra providers show openai
      aiinfra providers enable openai
      aiinfra providers config openai --api-key sk-...
      aiinfra providers sort openai anthropic ollama
      aiinfra providers models
    """


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@providers_group.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@click.pass_context
def list_cmd(ctx: click.Context, as_json: bool) -> None:
    """Show all providers in sort order."""
    providers = run_actions(
        _config(ctx),
        lambda actions: actions.fetch_ai_provider_list(),
    )
    if as_json:
        print_json([p.to_wire() for p in providers])
        return

    click.echo("\n=== Providers ===")
    for p in providers:
        mark = "✓" if p.enabled else "✗"
        name = p.name or p.id
        click.echo(f"  [{mark}] {name} ({p.id}) — {p.source.value}")
    click.echo()


@providers_group.command("show")
@click.argument("provider_id")
@click.pass_context
def show_cmd(ctx: click.Context, provider_id: str) -> None:
    """Show one provider's detail (key vaults are masked)."""
    detail = run_actions(
        _config(ctx),
        lambda actions: actions.fetch_ai_provider_item(provider_id),
    )
    if detail is None:
        click.echo(click.style(f"Unknown provider: {provider_id}", fg="red"))
        raise SystemExit(1)
    data = detail.to_wire()
    data["keyVaults"] = mask_key_vaults(detail.key_vaults)
    print_json(data)


@providers_group.command("models")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@click.pass_context
def models_cmd(ctx: click.Context, as_json: bool) -> None:
    """Show enabled chat models grouped by provider."""
    config = _config(ctx)

    async def _load(actions):
        await actions.fetch_ai_provider_runtime_state(config.is_login_on_init)
        return actions.get_state().enabled_chat_model_list

    tree = run_actions(config, _load)
    if tree is None:
        click.echo("Runtime state is not available (login required).")
        return
    if as_json:
        print_json([node.to_wire() for node in tree])
        return

    for node in tree:
        click.echo(f"\n{node.name} ({node.id})")
        if not node.children:
            click.echo("  (no chat models)")
        for model in node.children:
            label = model.display_name or model.id
            ctx_tokens = (
                f", {model.context_window_tokens} tokens"
                if model.context_window_tokens
                else ""
            )
            click.echo(
                f"  - {label} ({model.id}{ctx_tokens})"
                f"{_abilities_label(model.abilities)}",
            )
    click.echo()


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


@providers_group.command("create")
@click.argument("provider_id")
@click.option("--name", default=None, help="Display name")
@click.option("--description", default=None)
@click.option("--logo", default=None, help="Logo URL")
@click.option("--sdk-type", default=None, help="Client SDK family, e.g. openai")
@click.option("--api-key", default=None)
@click.option("--endpoint", default=None, help="API base URL")
@click.pass_context
def create_cmd(
    ctx: click.Context,
    provider_id: str,
    name: Optional[str],
    description: Optional[str],
    logo: Optional[str],
    sdk_type: Optional[str],
    api_key: Optional[str],
    endpoint: Optional[str],
) -> None:
    """Create a custom provider."""
    params = CreateAiProviderParams(
        id=provider_id,
        name=name,
        description=description,
        logo=logo,
        sdk_type=sdk_type,
        key_vaults=_key_vaults(api_key, endpoint),
    )
    run_actions(
        _config(ctx),
        lambda actions: actions.create_new_ai_provider(params),
    )
    click.echo(f"✓ Created provider {provider_id}")


@providers_group.command("update")
@click.argument("provider_id")
@click.option("--name", default=None)
@click.option("--description", default=None)
@click.option("--logo", default=None)
@click.option("--sdk-type", default=None)
@click.pass_context
def update_cmd(
    ctx: click.Context,
    provider_id: str,
    name: Optional[str],
    description: Optional[str],
    logo: Optional[str],
    sdk_type: Optional[str],
) -> None:
    """Update a provider's name, description, logo or SDK type."""
    value = UpdateAiProviderParams(
        name=name,
        description=description,
        logo=logo,
        sdk_type=sdk_type,
    )

    async def _update(actions):
        await actions.fetch_ai_provider_item(provider_id)
        await actions.update_ai_provider(provider_id, value)

    run_actions(_config(ctx), _update)
    click.echo(f"✓ Updated provider {provider_id}")


@providers_group.command("config")
@click.argument("provider_id")
@click.option("--api-key", default=None)
@click.option("--endpoint", default=None, help="API base URL")
@click.option(
    "--fetch-on-client/--fetch-on-server",
    default=None,
    help="Whether requests go from the client directly",
)
@click.option("--check-model", default=None, help="Model used for checks")
@click.pass_context
def config_cmd(
    ctx: click.Context,
    provider_id: str,
    api_key: Optional[str],
    endpoint: Optional[str],
    fetch_on_client: Optional[bool],
    check_model: Optional[str],
) -> None:
    """Update a provider's key vaults and runtime config."""
    value = UpdateAiProviderConfigParams(
        key_vaults=_key_vaults(api_key, endpoint),
        fetch_on_client=fetch_on_client,
        check_model=check_model,
    )

    async def _configure(actions):
        await actions.fetch_ai_provider_item(provider_id)
        await actions.update_ai_provider_config(provider_id, value)
        return actions.get_state().ai_provider_detail

    detail = run_actions(_config(ctx), _configure)
    vaults = mask_key_vaults(detail.key_vaults) if detail else {}
    click.echo(f"✓ Configured provider {provider_id}")
    for key, val in vaults.items():
        click.echo(f"  {key:16s}: {val or '(not set)'}")


def _toggle(ctx: click.Context, provider_id: str, enabled: bool) -> None:
    run_actions(
        _config(ctx),
        lambda actions: actions.toggle_provider_enabled(provider_id, enabled),
    )
    state = "enabled" if enabled else "disabled"
    click.echo(f"✓ Provider {provider_id} {state}")


@providers_group.command("enable")
@click.argument("provider_id")
@click.pass_context
def enable_cmd(ctx: click.Context, provider_id: str) -> None:
    """Enable a provider."""
    _toggle(ctx, provider_id, True)


@providers_group.command("disable")
@click.argument("provider_id")
@click.pass_context
def disable_cmd(ctx: click.Context, provider_id: str) -> None:
    """Disable a provider."""
    _toggle(ctx, provider_id, False)


@providers_group.command("sort")
@click.argument("provider_ids", nargs=-1, required=True)
@click.pass_context
def sort_cmd(ctx: click.Context, provider_ids: Tuple[str, ...]) -> None:
    """Reorder providers. Every provider id must be listed once."""
    items = [
        AiProviderSortMap(id=pid, sort=index)
        for index, pid in enumerate(provider_ids)
    ]

    async def _sort(actions):
        await actions.fetch_ai_provider_list()
        await actions.update_ai_provider_sort(items)

    run_actions(_config(ctx), _sort)
    click.echo("✓ Order: " + " > ".join(provider_ids))


@providers_group.command("delete")
@click.argument("provider_id")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_cmd(ctx: click.Context, provider_id: str, yes: bool) -> None:
    """Delete a provider."""
    if not yes and not click.confirm(f"Delete provider {provider_id}?"):
        return
    run_actions(
        _config(ctx),
        lambda actions: actions.delete_ai_provider(provider_id),
    )
    click.echo(f"✓ Deleted provider {provider_id}")
