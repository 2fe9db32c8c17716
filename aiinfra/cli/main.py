# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Optional

import click

from .providers_cmd import providers_group
from .. import __version__
from ..config import load_config
from ..utils.logging import setup_logger


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="aiinfra")
@click.option(
    "--base-url",
    default=None,
    help="Provider service URL (default: $AIINFRA_BASE_URL)",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(
        ["critical", "error", "warning", "info", "debug"],
        case_sensitive=False,
    ),
    help="Log level (default: $AIINFRA_LOG_LEVEL or info)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    base_url: Optional[str],
    log_level: Optional[str],
) -> None:
    """aiinfra: sync AI provider settings with the provider service."""
    setup_logger(log_level)
    config = load_config()
    if base_url:
        config.gateway.base_url = base_url.rstrip("/")
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


cli.add_command(providers_group)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
