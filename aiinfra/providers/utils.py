# -*- coding: utf-8 -*-
"""Display helpers for provider credentials."""


def mask_api_key(api_key: str, visible_chars: int = 4) -> str:
    """Hide an API key except for its vendor prefix and last characters.

    A short dash-terminated prefix such as ``sk-`` stays readable, and at
    least four stars are always shown.

    Example: ``"sk-abcdefghijk"`` -> ``"sk-*******hijk"``
    """
    if len(api_key) <= visible_chars:
        return "*" * len(api_key)
    head, dash, _ = api_key.partition("-")
    prefix = head + dash if dash and len(head) <= 3 else ""
    hidden = max(len(api_key) - len(prefix) - visible_chars, 4)
    return prefix + "*" * hidden + api_key[-visible_chars:]


def mask_key_vaults(key_vaults: dict) -> dict:
    """Mask every secret-looking entry of a key vault mapping.

    URLs stay readable; anything else is treated as a secret.
    """
    masked = {}
    for name, value in key_vaults.items():
        if not isinstance(value, str) or name.lower().endswith("url"):
            masked[name] = value
        else:
            masked[name] = mask_api_key(value)
    return masked
