# -*- coding: utf-8 -*-
import os

# Remote provider service (Remote Gateway target).
BASE_URL = os.environ.get("AIINFRA_BASE_URL", "http://127.0.0.1:3010")

GATEWAY_TIMEOUT = float(os.environ.get("AIINFRA_TIMEOUT", "30"))

# Env key for app log level (used by CLI and app factory).
LOG_LEVEL_ENV = "AIINFRA_LOG_LEVEL"

# Reduced edition: the runtime-state fetch is never bound.
DEPRECATED_EDITION = os.environ.get(
    "AIINFRA_DEPRECATED_EDITION",
    "false",
).lower() in (
    "true",
    "1",
    "yes",
)

# Model classification used by the enabled chat model tree.
CHAT_MODEL_TYPE = "chat"
