# -*- coding: utf-8 -*-
import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from ..constant import BASE_URL, DEPRECATED_EDITION, GATEWAY_TIMEOUT


class GatewayConfig(BaseModel):
    """Remote provider service connection settings."""

    base_url: str = BASE_URL
    timeout: float = GATEWAY_TIMEOUT
    api_key: str = ""


class Config(BaseModel):
    """Root config for the sync layer."""

    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    # When True the runtime-state fetch is never bound.
    deprecated_edition: bool = DEPRECATED_EDITION
    # Caller-supplied precondition for the runtime-state fetch.
    is_login_on_init: bool = True


def _env_bool(name: str) -> Optional[bool]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() in ("true", "1", "yes")


def load_config(env_file: Optional[Union[str, Path]] = None) -> Config:
    """Build a Config from a ``.env`` file (if any) and the environment.

    Variables already present in the environment win over the file.
    """
    load_dotenv(env_file, override=False)

    gateway = GatewayConfig(
        base_url=os.environ.get("AIINFRA_BASE_URL", BASE_URL),
        timeout=float(os.environ.get("AIINFRA_TIMEOUT", GATEWAY_TIMEOUT)),
        api_key=os.environ.get("AIINFRA_API_KEY", ""),
    )
    config = Config(gateway=gateway)

    deprecated = _env_bool("AIINFRA_DEPRECATED_EDITION")
    if deprecated is not None:
        config.deprecated_edition = deprecated
    login = _env_bool("AIINFRA_LOGIN_ON_INIT")
    if login is not None:
        config.is_login_on_init = login
    return config
