# -*- coding: utf-8 -*-
from .config import Config, GatewayConfig, load_config

__all__ = ["Config", "GatewayConfig", "load_config"]
